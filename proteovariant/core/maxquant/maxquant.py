"""MaxQuant data processing module"""

from typing import Sequence

import pandas as pd

from proteovariant.core.adapter import FlatTableAdapter
from proteovariant.core.common import (
    ACCESSION,
    DECOY_PREFIXES,
    DESCRIPTION,
    MAXQUANT_ACCESSION_SEPARATOR,
    MAXQUANT_PEPTIDE_MAP,
    MAXQUANT_PROTEIN_MAP,
    MAXQUANT_UNIQUE_FLAGS,
)
from proteovariant.core.model import SourceSoftware
from proteovariant.core.normalization import normalize_accession
from proteovariant.core.parser import RowRecord
from proteovariant.utils.logger import get_logger

logger = get_logger(__name__)


def is_decoy_or_contaminant(accession: str) -> bool:
    """MaxQuant marks reversed sequences with REV__ and contaminants with CON__"""
    upper = str(accession).upper()
    return any(upper.startswith(prefix) for prefix in DECOY_PREFIXES)


class MaxQuant(FlatTableAdapter):
    """MaxQuant peptides.txt and proteinGroups.txt tables.

    Protein groups list several ids separated by ';' and the fasta headers in the
    same order; each id becomes its own protein row before the join.
    """

    software = SourceSoftware.MAXQUANT

    peptide_map = MAXQUANT_PEPTIDE_MAP
    protein_map = MAXQUANT_PROTEIN_MAP
    unique_flags = MAXQUANT_UNIQUE_FLAGS

    def prepare_peptides(self, peptide_rows: Sequence[RowRecord]) -> pd.DataFrame:
        df = super().prepare_peptides(peptide_rows)
        decoys = df[ACCESSION].map(is_decoy_or_contaminant)
        if decoys.any():
            logger.info(f"Removed {int(decoys.sum())} decoy or contaminant peptide rows")
        return df[~decoys].reset_index(drop=True)

    def prepare_proteins(self, protein_rows: Sequence[RowRecord]) -> pd.DataFrame:
        df = self._frame(protein_rows, self.protein_map)
        df[ACCESSION] = df[ACCESSION].astype(str).str.split(MAXQUANT_ACCESSION_SEPARATOR)
        df[DESCRIPTION] = [
            _aligned_headers(accessions, headers)
            for accessions, headers in zip(df[ACCESSION], df[DESCRIPTION])
        ]
        df = df.explode([ACCESSION, DESCRIPTION], ignore_index=True)
        df[ACCESSION] = df[ACCESSION].map(normalize_accession)
        df[DESCRIPTION] = df[DESCRIPTION].fillna("").astype(str).str.strip()
        return df[~df[ACCESSION].map(is_decoy_or_contaminant)].reset_index(drop=True)


def _aligned_headers(accessions: list, description: str) -> list:
    """One fasta header per accession; the whole text is reused when the counts differ."""
    headers = str(description).split(MAXQUANT_ACCESSION_SEPARATOR)
    if len(headers) == len(accessions):
        return headers
    return [str(description)] * len(accessions)
