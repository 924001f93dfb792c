from pathlib import Path

import pyarrow.parquet as pq
import pytest
from hypothesis import given, settings, strategies as st

from proteovariant.core.comparison import build_comparative, build_overlap
from proteovariant.core.export import (
    comparative_to_dataframe,
    export_comparative,
    export_overlaps,
    export_sample,
    format_cell,
    heatmap_to_dataframe,
    sample_to_dataframe,
    write_comparative,
    write_overlaps,
    write_sample,
)
from proteovariant.core.model import ProteinRecord, Sample, SourceSoftware
from proteovariant.core.parser import parse, parse_file
from proteovariant.core.pipeline import load_sample_inputs, process_batch

TEST_DATA_ROOT = Path(__file__).parents[1] / "examples"


@pytest.fixture(scope="module")
def samples():
    return process_batch(load_sample_inputs(TEST_DATA_ROOT / "sample_sheet.tsv"))


def make_sample(sample_id, name, records):
    return Sample(
        id=sample_id,
        name=name,
        source_software=SourceSoftware.MAXQUANT,
        analysis_results=tuple(records),
        total_peptides_count=len(records),
        total_proteins_count=len(records),
        normalization_factor=1.0,
    )


def make_record(accession, abundance, sample_id, description="PATHOGENIC_VARIANT"):
    return ProteinRecord(
        accession=accession,
        description=description,
        protein_group="1",
        average_abundance=abundance,
        total_peptides=3,
        unique_peptides=frozenset({"PEPB", "PEPA"}),
        is_unique_group=False,
        sample_id=sample_id,
    )


@pytest.mark.parametrize(
    "value, delimiter, expected",
    [
        (None, "\t", ""),
        (True, "\t", "Yes"),
        (False, "\t", "No"),
        (3, "\t", "3"),
        (1234.5, "\t", "1234.5000"),
        ("plain", "\t", "plain"),
        ("a,b", ",", '"a,b"'),
        ("a,b", "\t", "a,b"),
        ('say "hi"', "\t", '"say ""hi"""'),
        ("two\nlines", "\t", "two lines"),
    ],
)
def test_format_cell(value, delimiter, expected):
    assert format_cell(value, delimiter) == expected


def test_export_comparative_round_trip(samples):
    dataset = build_comparative(samples)
    text = export_comparative(dataset)
    table = parse(text)

    assert list(table.header) == list(dataset.headers)
    assert len(table) == len(dataset.rows)
    detail_count = 7
    for parsed, row in zip(table.rows, dataset.rows):
        assert parsed["Protein Accession"] == row[0]
        assert parsed["Description"] == row[1]
        for header, value in zip(dataset.headers[detail_count:], row[detail_count:]):
            if value is None:
                assert parsed[header] == ""
            else:
                assert round(float(parsed[header]), 2) == round(value, 2)


def test_export_comparative_csv_quotes_delimiters():
    first = make_sample(1, "One", [make_record("P1-A1B", 10.0, 1, "Kinase, isoform 2")])
    second = make_sample(2, "Two", [make_record("P1-A1B", 20.0, 2)])
    text = export_comparative(build_comparative([first, second]), delimiter=",")
    assert '"Kinase, isoform 2"' in text
    table = parse(text)
    assert table.rows[0]["Description"] == "Kinase, isoform 2"
    assert table.rows[0]["Unique Peptides List"] == "PEPA;PEPB"
    assert table.rows[0]["Is Unique Group?"] == "No"


def test_export_empty_comparative(samples):
    assert export_comparative(build_comparative(samples[:1])) == ""


def test_export_sample(samples):
    text = export_sample(samples[0])
    lines = text.splitlines()
    assert lines[0].split("\t")[-1] == "Average Abundance (Tumor A)"
    assert len(lines) == 1 + len(samples[0].analysis_results)
    assert lines[1].startswith("P12345-A123B\tTumor suppressor")


def test_export_overlaps(samples):
    text = export_overlaps(build_overlap(samples))
    lines = text.splitlines()
    assert lines[0] == "Samples\tSize\tAccessions"
    assert "Tumor A & Tumor B & Control C\t1\tP12345-A123B" in lines


@settings(max_examples=50)
@given(
    st.lists(
        st.floats(min_value=0.0, max_value=1e7, allow_nan=False, allow_infinity=False),
        min_size=1,
        max_size=10,
    )
)
def test_property_abundances_survive_round_trip(abundances):
    first = make_sample(
        1, "One", [make_record(f"P{i}", value, 1) for i, value in enumerate(abundances)]
    )
    second = make_sample(2, "Two", [make_record("P0", 1.0, 2)])
    dataset = build_comparative([first, second])
    parsed = parse(export_comparative(dataset))
    for row, value in zip(parsed.rows, abundances):
        assert float(row["Average Abundance (One)"]) == pytest.approx(value, abs=0.005)


def test_comparative_dataframes(samples):
    dataset = build_comparative(samples)
    df = comparative_to_dataframe(dataset)
    assert list(df.columns) == list(dataset.headers)
    assert df["Average Abundance (Tumor B)"].isna().sum() == 3

    heatmap = heatmap_to_dataframe(dataset)
    assert list(heatmap.columns) == ["accession", "Tumor A", "Tumor B", "Control C"]
    assert (heatmap[["Tumor A", "Tumor B", "Control C"]] >= 0).all().all()


def test_sample_to_dataframe(samples):
    df = sample_to_dataframe(samples[2])
    assert df["accession"].tolist() == ["P55555-G12D", "P12345-A123B"]
    assert df["sample_id"].unique().tolist() == [3]


def test_write_comparative_formats(samples, tmp_path):
    dataset = build_comparative(samples)

    tsv = write_comparative(dataset, tmp_path / "out" / "comparative.tsv")
    assert parse_file(tsv).header == dataset.headers

    csv = write_comparative(dataset, tmp_path / "comparative.csv")
    assert parse_file(csv).delimiter == ","

    parquet = write_comparative(dataset, tmp_path / "comparative.parquet")
    table = pq.read_table(parquet)
    assert table.num_rows == len(dataset.rows)
    assert "average_abundance_Control C" in table.column_names
    assert table.column("unique_peptides").to_pylist()[0] == ["PEPTIDEA"]


def test_write_comparative_unknown_extension(samples, tmp_path):
    with pytest.raises(ValueError, match="Unsupported output extension"):
        write_comparative(build_comparative(samples), tmp_path / "comparative.xlsx")


def test_write_sample_and_overlaps(samples, tmp_path):
    parquet = write_sample(samples[0], tmp_path / "sample.parquet")
    table = pq.read_table(parquet)
    assert table.column("accession").to_pylist() == [
        "P12345-A123B",
        "Q99999-VAR_001234",
        "O22222-R45W",
    ]
    assert table.schema.metadata[b"proteovariant_version"]

    overlaps = write_overlaps(build_overlap(samples), tmp_path / "overlaps.csv")
    assert len(parse_file(overlaps)) == 4


def test_export_keeps_literal_quotes():
    first = make_sample(1, "One", [make_record("P1-A1B", 10.0, 1, '"KIN1 kinase"')])
    second = make_sample(2, "Two", [make_record("P1-A1B", 20.0, 2)])
    table = parse(export_comparative(build_comparative([first, second])))
    assert table.rows[0]["Description"] == '"KIN1 kinase"'
