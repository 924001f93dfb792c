from proteovariant.core.adapter import UnsupportedAdapter
from proteovariant.core.model import SourceSoftware


class ProteomeDiscoverer(UnsupportedAdapter):
    """Proteome Discoverer exports are not handled yet."""

    software = SourceSoftware.PROTEOME_DISCOVERER
