"""
Export of samples, comparative tables and overlaps.

Text exports are tab- or comma-delimited and can be read back with
``proteovariant.core.parser.parse``. Parquet exports go through pyarrow with
the schemas of ``proteovariant.core.format``.
"""

from pathlib import Path
from typing import Iterable, List, Sequence, Union

import pandas as pd
import pyarrow as pa
import pyarrow.parquet as pq

from proteovariant.core.common import (
    ACCESSION_LIST_SEPARATOR,
    EXPORT_ABUNDANCE_TEMPLATE,
    EXPORT_DETAIL_HEADERS,
    UNIQUE_PEPTIDES_SEPARATOR,
)
from proteovariant.core.comparison import ComparativeDataset, OverlapSet
from proteovariant.core.format import SAMPLE_RECORD_SCHEMA, comparative_schema
from proteovariant.core.model import ProteinRecord, Sample
from proteovariant.utils.file_utils import write_text
from proteovariant.utils.logger import get_logger

logger = get_logger(__name__)

DELIMITERS = {".tsv": "\t", ".txt": "\t", ".csv": ","}

OVERLAP_HEADERS = ["Samples", "Size", "Accessions"]


# ============================================================================
# Delimited text
# ============================================================================


def format_cell(value, delimiter: str = "\t") -> str:
    """Render one cell; text containing the delimiter or a quote is quote-wrapped."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "Yes" if value else "No"
    if isinstance(value, float):
        return f"{value:.4f}"
    text = str(value).replace("\r\n", " ").replace("\n", " ").replace("\r", " ")
    if delimiter in text or '"' in text:
        return '"' + text.replace('"', '""') + '"'
    return text


def format_table(
    headers: Sequence[str], rows: Iterable[Sequence], delimiter: str = "\t"
) -> str:
    def render(cells: Iterable) -> str:
        return delimiter.join(format_cell(cell, delimiter) for cell in cells)

    lines = [render(headers)]
    lines.extend(render(row) for row in rows)
    return "\n".join(lines) + "\n"


def export_comparative(dataset: ComparativeDataset, delimiter: str = "\t") -> str:
    """Comparative table as delimited text; an empty dataset gives an empty string."""
    if dataset.is_empty:
        return ""
    return format_table(dataset.headers, dataset.rows, delimiter)


def _record_cells(record: ProteinRecord) -> tuple:
    return (
        record.accession,
        record.description,
        record.disease_association,
        record.total_peptides,
        record.unique_peptides_count,
        record.is_unique_group,
        record.unique_peptides_list,
        record.average_abundance,
    )


def export_sample(sample: Sample, delimiter: str = "\t") -> str:
    """Pathogenic-variant candidates of one sample as delimited text."""
    headers = EXPORT_DETAIL_HEADERS + [EXPORT_ABUNDANCE_TEMPLATE.format(sample.name)]
    return format_table(
        headers, (_record_cells(record) for record in sample.analysis_results), delimiter
    )


def export_overlaps(overlaps: Sequence[OverlapSet], delimiter: str = "\t") -> str:
    """One line per overlap with its sample labels, size and sorted accessions."""
    rows = (
        (
            overlap.key,
            overlap.size,
            ACCESSION_LIST_SEPARATOR.join(sorted(overlap.accessions)),
        )
        for overlap in overlaps
    )
    return format_table(OVERLAP_HEADERS, rows, delimiter)


# ============================================================================
# DataFrames and parquet
# ============================================================================


def comparative_to_dataframe(dataset: ComparativeDataset) -> pd.DataFrame:
    """Comparative rows as a DataFrame; absent abundances become NaN."""
    df = pd.DataFrame(list(dataset.rows), columns=list(dataset.headers))
    abundance_columns = list(dataset.headers[len(EXPORT_DETAIL_HEADERS):])
    if abundance_columns:
        df[abundance_columns] = df[abundance_columns].astype(float)
    return df


def heatmap_to_dataframe(dataset: ComparativeDataset) -> pd.DataFrame:
    """Heatmap matrix with the accession as a regular column; absent values are 0."""
    return dataset.heatmap_matrix.reset_index()


def sample_to_dataframe(sample: Sample) -> pd.DataFrame:
    return pd.DataFrame(_sample_records(sample), columns=SAMPLE_RECORD_SCHEMA.names)


def _sample_records(sample: Sample) -> List[dict]:
    return [
        {
            "accession": record.accession,
            "description": record.description,
            "disease_association": record.disease_association,
            "total_peptides": record.total_peptides,
            "unique_peptides_count": record.unique_peptides_count,
            "is_unique_group": record.is_unique_group,
            "unique_peptides": sorted(record.unique_peptides),
            "protein_group": record.protein_group,
            "average_abundance": record.average_abundance,
            "raw_score": record.raw_score,
            "sample_id": record.sample_id,
        }
        for record in sample.analysis_results
    ]


def comparative_to_table(dataset: ComparativeDataset) -> pa.Table:
    schema = comparative_schema(dataset.sample_labels)
    detail_count = len(EXPORT_DETAIL_HEADERS)
    records = []
    for row in dataset.rows:
        unique_list = row[6]
        record = {
            "accession": row[0],
            "description": row[1],
            "disease_association": row[2],
            "total_peptides": row[3],
            "unique_peptides_count": row[4],
            "is_unique_group": row[5],
            "unique_peptides": (
                unique_list.split(UNIQUE_PEPTIDES_SEPARATOR) if unique_list else []
            ),
        }
        for label, value in zip(dataset.sample_labels, row[detail_count:]):
            record[f"average_abundance_{label}"] = value
        records.append(record)
    return pa.Table.from_pylist(records, schema=schema)


def _delimiter_for(path: Path) -> str:
    try:
        return DELIMITERS[path.suffix.lower()]
    except KeyError:
        raise ValueError(
            f"Unsupported output extension '{path.suffix}'. "
            f"Use one of: {', '.join(list(DELIMITERS) + ['.parquet'])}"
        ) from None


def write_comparative(dataset: ComparativeDataset, output_path: Union[str, Path]) -> Path:
    """Write a comparative table; the format follows the file extension."""
    output_path = Path(output_path)
    if output_path.suffix.lower() == ".parquet":
        output_path.parent.mkdir(parents=True, exist_ok=True)
        pq.write_table(
            comparative_to_table(dataset), str(output_path), compression="gzip"
        )
    else:
        write_text(output_path, export_comparative(dataset, _delimiter_for(output_path)))
    logger.info(f"Comparative table written to {output_path}")
    return output_path


def write_sample(sample: Sample, output_path: Union[str, Path]) -> Path:
    """Write the records of one sample; the format follows the file extension."""
    output_path = Path(output_path)
    if output_path.suffix.lower() == ".parquet":
        table = pa.Table.from_pylist(_sample_records(sample), schema=SAMPLE_RECORD_SCHEMA)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        pq.write_table(table, str(output_path), compression="gzip")
    else:
        write_text(output_path, export_sample(sample, _delimiter_for(output_path)))
    logger.info(f"Sample '{sample.name}' written to {output_path}")
    return output_path


def write_overlaps(overlaps: Sequence[OverlapSet], output_path: Union[str, Path]) -> Path:
    output_path = Path(output_path)
    write_text(output_path, export_overlaps(overlaps, _delimiter_for(output_path)))
    logger.info(f"{len(overlaps)} overlaps written to {output_path}")
    return output_path
