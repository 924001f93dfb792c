"""
Normalization primitives shared by every format adapter.

Adapters rename their source columns to the canonical names of
``proteovariant.core.common`` and then reduce the peptide table with the
functions below. All of them return new objects and leave their input alone.
"""

from typing import Dict, FrozenSet, Iterable, Tuple

import pandas as pd

from proteovariant.core.common import (
    ACCESSION,
    AREA,
    NORMALIZATION_TARGET,
    NORMALIZED_AREA,
    PROTEIN_GROUP,
    RAW_SCORE,
    SEQUENCE,
    UNIQUE,
)
from proteovariant.utils.logger import get_logger

logger = get_logger(__name__)


def coerce_numeric(series: pd.Series, decimal_comma: bool = False) -> pd.Series:
    """Parse a column as float; unparsable cells become 0 instead of failing the row."""
    values = series.astype(str).str.strip()
    if decimal_comma:
        values = values.str.replace(r"^([+-]?\d+),(\d+)$", r"\1.\2", regex=True)
    numeric = pd.to_numeric(values, errors="coerce")
    invalid = int(numeric.isna().sum())
    if invalid:
        logger.debug(f"{invalid} non-numeric values in column '{series.name}' set to 0")
    return numeric.fillna(0.0).astype(float)


def normalize_accession(value: str) -> str:
    """Reduce compound ids such as ``sp|P12345|VIME_HUMAN`` to their second segment."""
    accession = str(value).strip().strip('"')
    if "|" in accession:
        segments = accession.split("|")
        if len(segments) > 1 and segments[1].strip():
            return segments[1].strip()
    return accession


def normalization_factor(total_area: float, target: float = NORMALIZATION_TARGET) -> float:
    """Scale factor bringing ``total_area`` to ``target``; 1 when there is no area."""
    if total_area > 0:
        return target / total_area
    return 1.0


def normalize_abundance(
    df: pd.DataFrame, column: str = AREA, target: float = NORMALIZATION_TARGET
) -> Tuple[pd.DataFrame, float, float]:
    """
    Add the normalized abundance column to a peptide table.

    Args:
        df: Peptide table with a numeric abundance column
        column: Name of the abundance column
        target: Value the normalized abundances sum to

    Returns:
        Tuple of (table with ``normalized_area``, total area, normalization factor)
    """
    total_area = float(df[column].sum())
    factor = normalization_factor(total_area, target)
    result = df.assign(**{NORMALIZED_AREA: df[column] * factor})
    logger.debug(f"Total area {total_area:g}, normalization factor {factor:g}")
    return result, total_area, factor


def group_uniqueness(df: pd.DataFrame) -> Dict[str, bool]:
    """A protein group is unique when exactly one distinct accession maps to it."""
    counts = df.groupby(PROTEIN_GROUP, sort=False)[ACCESSION].nunique()
    return counts.eq(1).to_dict()


def collect_unique_peptides(
    df: pd.DataFrame, flags: Iterable[str]
) -> Dict[str, FrozenSet[str]]:
    """Sequences of the peptides the source software flagged as unique, per accession."""
    flags = set(flags)
    unique_rows = df[df[UNIQUE].astype(str).str.strip().isin(flags)]
    unique_rows = unique_rows[unique_rows[SEQUENCE].astype(str).str.len() > 0]
    if unique_rows.empty:
        return {}
    grouped = unique_rows.groupby(ACCESSION, sort=False)[SEQUENCE]
    return {accession: frozenset(sequences) for accession, sequences in grouped}


def select_representatives(df: pd.DataFrame) -> pd.DataFrame:
    """
    Pick one row per protein group: the highest ``raw_score``.

    Equal scores are resolved by row order, the first row seen wins.
    """
    ordered = df.reset_index(drop=True)
    best = ordered.sort_values(RAW_SCORE, ascending=False, kind="mergesort")
    best = best.drop_duplicates(subset=[PROTEIN_GROUP], keep="first")
    return best.sort_index()


def accession_statistics(df: pd.DataFrame) -> pd.DataFrame:
    """Mean normalized abundance and peptide row count for every accession."""
    return df.groupby(ACCESSION, sort=False)[NORMALIZED_AREA].agg(
        average_abundance="mean", total_peptides="size"
    )
