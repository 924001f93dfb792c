"""Selection of the format adapter matching a sample's source software."""

from typing import Dict, Type, Union

from proteovariant.core.adapter import FormatAdapter
from proteovariant.core.maxquant.maxquant import MaxQuant
from proteovariant.core.model import SourceSoftware
from proteovariant.core.peaks.peaks import PeaksStudio
from proteovariant.core.proteome_discoverer.proteome_discoverer import (
    ProteomeDiscoverer,
)

ADAPTERS: Dict[SourceSoftware, Type[FormatAdapter]] = {
    SourceSoftware.PEAKS_STUDIO: PeaksStudio,
    SourceSoftware.MAXQUANT: MaxQuant,
    SourceSoftware.PROTEOME_DISCOVERER: ProteomeDiscoverer,
}


def get_available_adapters() -> Dict[str, Type[FormatAdapter]]:
    """Adapter classes keyed by the display label of their software."""
    return {software.value: adapter for software, adapter in ADAPTERS.items()}


def get_adapter(software: Union[SourceSoftware, str]) -> FormatAdapter:
    """Return a fresh adapter for the given software (enum member or label)."""
    if not isinstance(software, SourceSoftware):
        software = SourceSoftware.from_label(software)
    return ADAPTERS[software]()
