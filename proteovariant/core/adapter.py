"""Base classes of the per-software format adapters."""

from dataclasses import dataclass, field
from typing import Dict, FrozenSet, Optional, Sequence

import pandas as pd

from proteovariant.core.classification import PathogenicClassifier, disease_association
from proteovariant.core.common import (
    ACCESSION,
    AREA,
    DESCRIPTION,
    PROTEIN_GROUP,
    RAW_SCORE,
)
from proteovariant.core.model import AnalysisResult, ProteinRecord, SourceSoftware
from proteovariant.core.normalization import (
    accession_statistics,
    coerce_numeric,
    collect_unique_peptides,
    group_uniqueness,
    normalize_abundance,
    normalize_accession,
    select_representatives,
)
from proteovariant.core.parser import RowRecord
from proteovariant.core.validation import (
    EmptyTableError,
    UnsupportedFormatError,
    validate_required_columns,
)
from proteovariant.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class SampleContext:
    """Per-sample information an adapter needs besides the two tables."""

    sample_id: int
    sample_name: str = ""
    classifier: PathogenicClassifier = field(default_factory=PathogenicClassifier)


class FormatAdapter:
    """Turns the tables exported by one analysis software into protein records."""

    software: SourceSoftware
    requires_protein_table = True
    normalize_decimals = False

    def adapt(
        self,
        peptide_rows: Sequence[RowRecord],
        protein_rows: Optional[Sequence[RowRecord]],
        context: SampleContext,
    ) -> AnalysisResult:
        raise NotImplementedError


class UnsupportedAdapter(FormatAdapter):
    """Declared software without an implementation. Never returns an empty result."""

    def adapt(self, peptide_rows, protein_rows, context) -> AnalysisResult:
        raise UnsupportedFormatError(self.software.value)


class FlatTableAdapter(FormatAdapter):
    """
    Adapter for exports made of a flat peptide table and a flat protein table.

    Subclasses provide the column maps from source column names to the
    canonical names, and the values of the unique-peptide flag.
    """

    peptide_map: Dict[str, str] = {}
    protein_map: Dict[str, str] = {}
    unique_flags: FrozenSet[str] = frozenset()

    # ============================================================================
    # Table preparation
    # ============================================================================

    def _validate(self, peptide_rows, protein_rows) -> None:
        if not peptide_rows:
            raise EmptyTableError("peptide table")
        if not protein_rows:
            raise EmptyTableError("protein table")
        validate_required_columns(
            {
                "peptide table": (peptide_rows[0].keys(), list(self.peptide_map)),
                "protein table": (protein_rows[0].keys(), list(self.protein_map)),
            }
        )

    def _frame(self, rows: Sequence[RowRecord], mapping: Dict[str, str]) -> pd.DataFrame:
        df = pd.DataFrame.from_records(
            [[row[column] for column in mapping] for row in rows],
            columns=list(mapping),
        )
        return df.rename(columns=mapping)

    def prepare_peptides(self, peptide_rows: Sequence[RowRecord]) -> pd.DataFrame:
        df = self._frame(peptide_rows, self.peptide_map)
        df[ACCESSION] = df[ACCESSION].map(normalize_accession)
        df[PROTEIN_GROUP] = df[PROTEIN_GROUP].astype(str).str.strip()
        df[RAW_SCORE] = coerce_numeric(df[RAW_SCORE], self.normalize_decimals)
        df[AREA] = coerce_numeric(df[AREA], self.normalize_decimals)
        return df

    def prepare_proteins(self, protein_rows: Sequence[RowRecord]) -> pd.DataFrame:
        df = self._frame(protein_rows, self.protein_map)
        df[ACCESSION] = df[ACCESSION].map(normalize_accession)
        df[DESCRIPTION] = df[DESCRIPTION].astype(str).str.strip()
        return df

    # ============================================================================
    # Core Processing
    # ============================================================================

    def join(self, peptides: pd.DataFrame, proteins: pd.DataFrame) -> pd.DataFrame:
        """Attach the protein description to every peptide row, empty when unmatched."""
        descriptions = proteins.drop_duplicates(subset=[ACCESSION], keep="first")
        descriptions = descriptions.set_index(ACCESSION)[DESCRIPTION]
        return peptides.assign(
            **{DESCRIPTION: peptides[ACCESSION].map(descriptions).fillna("")}
        )

    def adapt(
        self,
        peptide_rows: Sequence[RowRecord],
        protein_rows: Optional[Sequence[RowRecord]],
        context: SampleContext,
    ) -> AnalysisResult:
        self._validate(peptide_rows, protein_rows)

        proteins = self.prepare_proteins(protein_rows)
        peptides = self.join(self.prepare_peptides(peptide_rows), proteins)
        unmatched = int((~peptides[ACCESSION].isin(set(proteins[ACCESSION]))).sum())
        if unmatched:
            logger.warning(
                f"{context.sample_name or context.sample_id}: {unmatched} peptide rows "
                f"have no matching protein row"
            )

        peptides, total_area, factor = normalize_abundance(peptides)
        unique_groups = group_uniqueness(peptides)
        unique_peptides = collect_unique_peptides(peptides, self.unique_flags)
        statistics = accession_statistics(peptides)
        representatives = select_representatives(peptides)

        classifier = context.classifier
        records = []
        for row in representatives.itertuples(index=False):
            accession = getattr(row, ACCESSION)
            description = getattr(row, DESCRIPTION)
            signals = classifier.signals(accession, description)
            if not classifier.is_pathogenic(signals):
                continue
            stats = statistics.loc[accession]
            group = getattr(row, PROTEIN_GROUP)
            records.append(
                ProteinRecord(
                    accession=accession,
                    description=description,
                    protein_group=group,
                    average_abundance=float(stats["average_abundance"]),
                    total_peptides=int(stats["total_peptides"]),
                    unique_peptides=unique_peptides.get(accession, frozenset()),
                    is_unique_group=bool(unique_groups[group]),
                    sample_id=context.sample_id,
                    disease_association=disease_association(description, True),
                    raw_score=float(getattr(row, RAW_SCORE)),
                    accession_match=signals.accession_match,
                    marker_match=signals.marker_match,
                )
            )

        records.sort(key=lambda record: record.average_abundance, reverse=True)
        logger.info(
            f"{context.sample_name or context.sample_id}: {len(representatives)} protein groups, "
            f"{len(records)} pathogenic-variant candidates"
        )
        return AnalysisResult(
            records=tuple(records),
            total_area=total_area,
            normalization_factor=factor,
            total_peptides=len(peptides),
            total_proteins=int(proteins[ACCESSION].nunique()),
            unmatched_peptides=unmatched,
        )
