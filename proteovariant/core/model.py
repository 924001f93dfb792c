"""Canonical records shared by the adapters, the batch pipeline and the comparison engine."""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import FrozenSet, Optional, Tuple

from proteovariant.core.common import (
    DEFAULT_DISEASE_ASSOCIATION,
    UNIQUE_PEPTIDES_SEPARATOR,
)


class SourceSoftware(str, Enum):
    """Analysis software that produced a sample's tables."""

    PEAKS_STUDIO = "Peaks Studio"
    MAXQUANT = "MaxQuant"
    PROTEOME_DISCOVERER = "Proteome Discoverer"

    @classmethod
    def from_label(cls, label: str) -> "SourceSoftware":
        """Resolve a display label, enum name or loose spelling ("peaks-studio")."""
        wanted = _fold(label)
        for member in cls:
            if wanted in (_fold(member.value), _fold(member.name)):
                return member
        raise ValueError(
            f"Unknown source software '{label}'. Available: {[m.value for m in cls]}"
        )


def _fold(label: str) -> str:
    return "".join(ch for ch in str(label).lower() if ch.isalnum())


@dataclass(frozen=True)
class ProteinRecord:
    """One classified protein of one sample."""

    accession: str
    description: str
    protein_group: str
    average_abundance: float
    total_peptides: int
    unique_peptides: FrozenSet[str]
    is_unique_group: bool
    sample_id: int
    disease_association: str = DEFAULT_DISEASE_ASSOCIATION
    raw_score: Optional[float] = None
    accession_match: bool = False
    marker_match: bool = False

    @property
    def unique_peptides_count(self) -> int:
        return len(self.unique_peptides)

    @property
    def unique_peptides_list(self) -> str:
        return UNIQUE_PEPTIDES_SEPARATOR.join(sorted(self.unique_peptides))


@dataclass(frozen=True)
class AnalysisResult:
    """What an adapter returns for one sample."""

    records: Tuple[ProteinRecord, ...]
    total_area: float
    normalization_factor: float
    total_peptides: int
    total_proteins: int
    unmatched_peptides: int = 0


@dataclass(frozen=True)
class SampleInput:
    """Raw contents and metadata of one sample, as handed over by the caller."""

    id: int
    name: str
    source_software: SourceSoftware
    peptide_text: Optional[str]
    protein_text: Optional[str] = None


@dataclass(frozen=True)
class Sample:
    """A processed sample. Replaced wholesale on re-processing."""

    id: int
    name: str
    source_software: SourceSoftware
    analysis_results: Tuple[ProteinRecord, ...]
    total_peptides_count: int
    total_proteins_count: int
    normalization_factor: float
    skipped_rows: int = 0
    _accessions: FrozenSet[str] = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        object.__setattr__(
            self,
            "_accessions",
            frozenset(record.accession for record in self.analysis_results),
        )

    @property
    def accessions(self) -> FrozenSet[str]:
        return self._accessions

    def record_for(self, accession: str) -> Optional[ProteinRecord]:
        """First (most abundant) record of an accession, if any."""
        for record in self.analysis_results:
            if record.accession == accession:
                return record
        return None

    def renamed(self, name: str, sample_id: Optional[int] = None) -> "Sample":
        """Copy of the sample with a new display name and, optionally, a new id."""
        if sample_id is None or sample_id == self.id:
            return replace(self, name=name)
        records = tuple(
            replace(record, sample_id=sample_id) for record in self.analysis_results
        )
        return replace(self, id=sample_id, name=name, analysis_results=records)
