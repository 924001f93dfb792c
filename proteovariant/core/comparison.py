"""
Cross-sample aggregation: comparative tables, heatmap matrices and Venn overlaps.

Everything here is a projection over already processed samples. Nothing is
cached and samples are never modified.
"""

from dataclasses import dataclass, field
from functools import reduce
from itertools import combinations
from typing import Dict, FrozenSet, List, Optional, Sequence, Tuple

import pandas as pd

from proteovariant.core.common import EXPORT_ABUNDANCE_TEMPLATE, EXPORT_DETAIL_HEADERS
from proteovariant.core.model import ProteinRecord, Sample
from proteovariant.utils.logger import get_logger

logger = get_logger(__name__)

MIN_OVERLAP_SAMPLES = 2
MAX_OVERLAP_SAMPLES = 3


@dataclass(frozen=True, eq=False)
class ComparativeDataset:
    """
    One row per accession detected in at least one selected sample.

    ``rows`` hold ``None`` for a sample that did not detect the accession,
    while ``heatmap_matrix`` holds 0.0 there.
    """

    headers: Tuple[str, ...] = ()
    rows: Tuple[tuple, ...] = ()
    heatmap_matrix: pd.DataFrame = field(default_factory=pd.DataFrame)
    max_abundance: float = 0.0
    sample_ids: Tuple[int, ...] = ()
    sample_labels: Tuple[str, ...] = ()

    @property
    def accessions(self) -> Tuple[str, ...]:
        return tuple(row[0] for row in self.rows)

    @property
    def is_empty(self) -> bool:
        return not self.rows

    def abundances(self, sample_label: str) -> Dict[str, Optional[float]]:
        """Abundance column of one sample keyed by accession."""
        offset = len(EXPORT_DETAIL_HEADERS) + self.sample_labels.index(sample_label)
        return {row[0]: row[offset] for row in self.rows}


@dataclass(frozen=True)
class OverlapSet:
    """Accessions shared by one combination of 2 or 3 samples."""

    member_sample_ids: Tuple[int, ...]
    labels: Tuple[str, ...]
    accessions: FrozenSet[str]

    @property
    def size(self) -> int:
        return len(self.accessions)

    @property
    def key(self) -> str:
        return " & ".join(self.labels)


@dataclass(frozen=True)
class VennSet:
    sample_id: int
    label: str
    size: int


@dataclass(frozen=True)
class VennData:
    sets: Tuple[VennSet, ...]
    overlaps: Tuple[OverlapSet, ...]


# ============================================================================
# Set algebra
# ============================================================================


def assign_labels(samples: Sequence[Sample]) -> List[str]:
    """
    Unique display label per sample, in input order.

    Unnamed samples become ``Sample <id>``; repeated names get a ``Name (n)``
    suffix so that labels can key overlaps.
    """
    labels = []
    used = set()
    for sample in samples:
        base = sample.name.strip() if sample.name else ""
        base = base or f"Sample {sample.id}"
        label = base
        suffix = 1
        while label in used:
            suffix += 1
            label = f"{base} ({suffix})"
        if label != base:
            logger.warning(f"Duplicate sample name '{base}' relabelled as '{label}'")
        used.add(label)
        labels.append(label)
    return labels


def union_accessions(samples: Sequence[Sample]) -> FrozenSet[str]:
    return frozenset().union(*(sample.accessions for sample in samples))


def intersect_accessions(samples: Sequence[Sample]) -> FrozenSet[str]:
    """Accessions present in every sample; empty for an empty selection."""
    if not samples:
        return frozenset()
    return reduce(
        lambda shared, sample: shared & sample.accessions,
        samples[1:],
        samples[0].accessions,
    )


def common_records(samples: Sequence[Sample]) -> List[ProteinRecord]:
    """Records of every sample whose accession was detected in all selected samples."""
    if len(samples) < 2:
        return []
    shared = intersect_accessions(samples)
    return [
        record
        for sample in samples
        for record in sample.analysis_results
        if record.accession in shared
    ]


def unique_records(samples: Sequence[Sample], sample_id: int) -> List[ProteinRecord]:
    """Records of one sample whose accession no other selected sample detected."""
    target = next((sample for sample in samples if sample.id == sample_id), None)
    if target is None:
        raise KeyError(sample_id)
    others = union_accessions([sample for sample in samples if sample.id != sample_id])
    return [record for record in target.analysis_results if record.accession not in others]


# ============================================================================
# Comparative table and heatmap
# ============================================================================


def _detail_cells(record: ProteinRecord) -> tuple:
    return (
        record.accession,
        record.description,
        record.disease_association,
        record.total_peptides,
        record.unique_peptides_count,
        record.is_unique_group,
        record.unique_peptides_list,
    )


def build_comparative(samples: Sequence[Sample]) -> ComparativeDataset:
    """
    Build the comparative table of the selected samples.

    Details of an accession come from the first sample (in input order) that
    contains it; the other samples only contribute their abundance.
    """
    if len(samples) < 2:
        return ComparativeDataset()

    labels = assign_labels(samples)
    first_records: Dict[str, ProteinRecord] = {}
    abundance_maps = []
    for sample in samples:
        abundances = {}
        for record in sample.analysis_results:
            first_records.setdefault(record.accession, record)
            abundances.setdefault(record.accession, record.average_abundance)
        abundance_maps.append(abundances)

    rows = []
    for accession, record in first_records.items():
        values = tuple(abundances.get(accession) for abundances in abundance_maps)
        rows.append(_detail_cells(record) + values)

    accessions = list(first_records)
    matrix = pd.DataFrame(
        {
            label: [abundances.get(accession, 0.0) for accession in accessions]
            for label, abundances in zip(labels, abundance_maps)
        },
        index=pd.Index(accessions, name="accession"),
        columns=labels,
        dtype=float,
    )
    present = [
        value
        for abundances in abundance_maps
        for value in abundances.values()
    ]
    max_abundance = max(present) if present else 0.0

    headers = tuple(EXPORT_DETAIL_HEADERS) + tuple(
        EXPORT_ABUNDANCE_TEMPLATE.format(label) for label in labels
    )
    logger.info(f"Comparative table: {len(rows)} accessions across {len(samples)} samples")
    return ComparativeDataset(
        headers=headers,
        rows=tuple(rows),
        heatmap_matrix=matrix,
        max_abundance=float(max_abundance),
        sample_ids=tuple(sample.id for sample in samples),
        sample_labels=tuple(labels),
    )


# ============================================================================
# Venn overlaps
# ============================================================================


def build_overlap(samples: Sequence[Sample]) -> List[OverlapSet]:
    """
    Exact accession intersections of every pair and, for 3 samples, the triple.

    Only 2 or 3 samples are accepted; anything else yields an empty list.
    Empty intersections are left out.
    """
    if not MIN_OVERLAP_SAMPLES <= len(samples) <= MAX_OVERLAP_SAMPLES:
        logger.debug(f"Overlaps need 2 or 3 samples, got {len(samples)}")
        return []

    labels = assign_labels(samples)
    members = list(zip(samples, labels))
    overlaps = []
    for size in range(MIN_OVERLAP_SAMPLES, len(samples) + 1):
        for combo in combinations(members, size):
            shared = intersect_accessions([sample for sample, _ in combo])
            if not shared:
                continue
            overlaps.append(
                OverlapSet(
                    member_sample_ids=tuple(sample.id for sample, _ in combo),
                    labels=tuple(label for _, label in combo),
                    accessions=shared,
                )
            )
    return overlaps


def build_venn(samples: Sequence[Sample]) -> VennData:
    """Per-sample circles plus their overlaps."""
    labels = assign_labels(samples)
    sets = tuple(
        VennSet(sample_id=sample.id, label=label, size=len(sample.accessions))
        for sample, label in zip(samples, labels)
    )
    return VennData(sets=sets, overlaps=tuple(build_overlap(samples)))
