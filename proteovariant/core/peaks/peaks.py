"""Peaks Studio data processing module"""

from proteovariant.core.adapter import FlatTableAdapter
from proteovariant.core.common import (
    PEAKS_PEPTIDE_MAP,
    PEAKS_PROTEIN_MAP,
    PEAKS_UNIQUE_FLAGS,
)
from proteovariant.core.model import SourceSoftware


class PeaksStudio(FlatTableAdapter):
    """Peaks Studio protein-peptides and proteins tables (tab, comma or semicolon separated).

    Localized exports write decimal commas, so numeric cells are normalized.
    """

    software = SourceSoftware.PEAKS_STUDIO
    normalize_decimals = True

    peptide_map = PEAKS_PEPTIDE_MAP
    protein_map = PEAKS_PROTEIN_MAP
    unique_flags = PEAKS_UNIQUE_FLAGS
