import logging
from pathlib import Path

import pyarrow.parquet as pq
from click.testing import CliRunner

from proteovariant import __version__
from proteovariant.core.parser import parse_file
from proteovariant.proteovariantc import cli

TEST_DATA_ROOT = Path(__file__).parent / "examples"
SAMPLE_SHEET = TEST_DATA_ROOT / "sample_sheet.tsv"


def run(args):
    runner = CliRunner()
    return runner.invoke(cli, args)


def test_version():
    result = run(["--version"])
    assert result.exit_code == 0
    assert __version__ in result.output


def test_help_lists_commands():
    result = run(["-h"])
    assert result.exit_code == 0
    for command in ("analyze", "compare", "overlap"):
        assert command in result.output


def test_analyze(tmp_path):
    result = run(
        [
            "analyze",
            "--sample-sheet",
            str(SAMPLE_SHEET),
            "--output-folder",
            str(tmp_path),
            "--output-prefix",
            "variants",
        ]
    )
    assert result.exit_code == 0, result.output
    outputs = sorted(tmp_path.glob("variants-*.tsv"))
    assert len(outputs) == 3
    first = sorted(tmp_path.glob("variants-1-*.tsv"))[0]
    assert len(parse_file(first)) == 3


def test_analyze_parquet(tmp_path):
    result = run(
        [
            "analyze",
            "--sample-sheet",
            str(SAMPLE_SHEET),
            "--output-folder",
            str(tmp_path),
            "--output-format",
            "parquet",
        ]
    )
    assert result.exit_code == 0, result.output
    outputs = list(tmp_path.glob("sample-3-*.parquet"))
    assert len(outputs) == 1
    assert pq.read_table(outputs[0]).num_rows == 2


def test_compare_with_heatmap(tmp_path):
    result = run(
        [
            "compare",
            "--sample-sheet",
            str(SAMPLE_SHEET),
            "--samples",
            "3,1",
            "--output-folder",
            str(tmp_path),
            "--heatmap",
        ]
    )
    assert result.exit_code == 0, result.output
    comparative = [
        path for path in tmp_path.glob("comparative-*.tsv") if "heatmap" not in path.name
    ]
    assert len(comparative) == 1
    table = parse_file(comparative[0])
    assert table.header[-2:] == ("Average Abundance (Control C)", "Average Abundance (Tumor A)")
    assert [row["Protein Accession"] for row in table.rows] == [
        "P55555-G12D",
        "P12345-A123B",
        "Q99999-VAR_001234",
        "O22222-R45W",
    ]
    heatmaps = list(tmp_path.glob("comparative-heatmap-*.tsv"))
    assert len(heatmaps) == 1
    assert parse_file(heatmaps[0]).header == ("accession", "Control C", "Tumor A")


def test_compare_needs_two_samples(tmp_path):
    result = run(
        [
            "compare",
            "--sample-sheet",
            str(SAMPLE_SHEET),
            "--samples",
            "1",
            "--output-folder",
            str(tmp_path),
        ]
    )
    assert result.exit_code != 0
    assert "at least 2 samples" in result.output


def test_compare_unknown_sample_id(tmp_path):
    result = run(
        [
            "compare",
            "--sample-sheet",
            str(SAMPLE_SHEET),
            "--samples",
            "1,9",
            "--output-folder",
            str(tmp_path),
        ]
    )
    assert result.exit_code != 0
    assert "Unknown sample ids" in result.output


def test_overlap(tmp_path):
    result = run(
        [
            "overlap",
            "--sample-sheet",
            str(SAMPLE_SHEET),
            "--output-folder",
            str(tmp_path),
            "--output-format",
            "csv",
        ]
    )
    assert result.exit_code == 0, result.output
    outputs = list(tmp_path.glob("overlap-*.csv"))
    assert len(outputs) == 1
    table = parse_file(outputs[0])
    assert [row["Samples"] for row in table.rows] == [
        "Tumor A & Tumor B",
        "Tumor A & Control C",
        "Tumor B & Control C",
        "Tumor A & Tumor B & Control C",
    ]
    assert {row["Accessions"] for row in table.rows} == {"P12345-A123B"}


def test_unsupported_software_reports_sample(tmp_path):
    peptides = TEST_DATA_ROOT / "peaks/sample_a/protein-peptides.txt"
    proteins = TEST_DATA_ROOT / "peaks/sample_a/proteins.txt"
    sheet = tmp_path / "sheet.tsv"
    sheet.write_text(
        "name\tsoftware\tpeptides\tproteins\n"
        f"Tumor A\tPeaks Studio\t{peptides}\t{proteins}\n"
        f"Discoverer run\tProteome Discoverer\t{peptides}\t{proteins}\n"
    )
    result = run(
        ["analyze", "--sample-sheet", str(sheet), "--output-folder", str(tmp_path / "out")]
    )
    assert result.exit_code != 0
    assert "Discoverer run" in result.output
    assert "not supported" in result.output
    assert not list((tmp_path / "out").glob("*.tsv"))


def test_keyword_policy(tmp_path):
    result = run(
        [
            "analyze",
            "--sample-sheet",
            str(SAMPLE_SHEET),
            "--output-folder",
            str(tmp_path),
            "--policy",
            "keyword",
            "--keyword",
            "normal",
        ]
    )
    assert result.exit_code == 0, result.output
    first = list(tmp_path.glob("sample-1-*.tsv"))[0]
    accessions = [row["Protein Accession"] for row in parse_file(first).rows]
    assert "P11111" in accessions


def test_verbose_does_not_leak_between_runs(tmp_path):
    args = ["analyze", "--sample-sheet", str(SAMPLE_SHEET), "--output-folder", str(tmp_path)]
    package_level = logging.getLogger("proteovariant").level

    assert run(args + ["--verbose"]).exit_code == 0
    assert logging.getLogger("proteovariant.commands.analyze").level == logging.DEBUG
    assert logging.getLogger("proteovariant").level == package_level

    assert run(args).exit_code == 0
    assert logging.getLogger("proteovariant.commands.analyze").level == logging.NOTSET
