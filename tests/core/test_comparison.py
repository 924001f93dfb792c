import pytest
from hypothesis import given, settings, strategies as st

from proteovariant.core.comparison import (
    assign_labels,
    build_comparative,
    build_overlap,
    build_venn,
    common_records,
    intersect_accessions,
    union_accessions,
    unique_records,
)
from proteovariant.core.model import ProteinRecord, Sample, SourceSoftware


def make_record(accession, abundance, sample_id, description="PATHOGENIC_VARIANT"):
    return ProteinRecord(
        accession=accession,
        description=description,
        protein_group=accession,
        average_abundance=abundance,
        total_peptides=1,
        unique_peptides=frozenset({f"PEP{accession}"}),
        is_unique_group=True,
        sample_id=sample_id,
    )


def make_sample(sample_id, name, abundances, **kwargs):
    records = tuple(
        make_record(accession, abundance, sample_id, **kwargs)
        for accession, abundance in abundances.items()
    )
    return Sample(
        id=sample_id,
        name=name,
        source_software=SourceSoftware.PEAKS_STUDIO,
        analysis_results=records,
        total_peptides_count=len(records),
        total_proteins_count=len(records),
        normalization_factor=1.0,
    )


@pytest.fixture
def s1():
    return make_sample(1, "S1", {"A": 300.0, "B": 200.0, "C": 100.0}, description="first")


@pytest.fixture
def s2():
    return make_sample(2, "S2", {"B": 50.0, "C": 40.0, "D": 900.0}, description="second")


@pytest.fixture
def s3():
    return make_sample(3, "S3", {"C": 10.0, "E": 5.0})


def test_pairwise_overlap(s1, s2):
    overlaps = build_overlap([s1, s2])
    assert len(overlaps) == 1
    assert overlaps[0].accessions == frozenset({"B", "C"})
    assert overlaps[0].size == 2
    assert overlaps[0].key == "S1 & S2"
    assert overlaps[0].member_sample_ids == (1, 2)


def test_three_way_overlaps(s1, s2, s3):
    overlaps = {overlap.key: overlap.accessions for overlap in build_overlap([s1, s2, s3])}
    assert overlaps == {
        "S1 & S2": frozenset({"B", "C"}),
        "S1 & S3": frozenset({"C"}),
        "S2 & S3": frozenset({"C"}),
        "S1 & S2 & S3": frozenset({"C"}),
    }


def test_overlap_leaves_out_empty_intersections(s1):
    other = make_sample(2, "Other", {"Z": 1.0})
    assert build_overlap([s1, other]) == []


def test_overlap_needs_two_or_three_samples(s1, s2, s3):
    assert build_overlap([s1]) == []
    s4 = make_sample(4, "S4", {"C": 1.0})
    assert build_overlap([s1, s2, s3, s4]) == []


def test_overlap_duplicate_names():
    first = make_sample(1, "Tumor", {"A": 1.0})
    second = make_sample(2, "Tumor", {"A": 2.0})
    overlaps = build_overlap([first, second])
    assert overlaps[0].labels == ("Tumor", "Tumor (2)")


def test_assign_labels():
    samples = [
        make_sample(1, "A", {}),
        make_sample(2, "", {}),
        make_sample(3, "A", {}),
        make_sample(4, "A", {}),
    ]
    assert assign_labels(samples) == ["A", "Sample 2", "A (2)", "A (3)"]


def test_venn(s1, s2, s3):
    venn = build_venn([s1, s2, s3])
    assert [(venn_set.label, venn_set.size) for venn_set in venn.sets] == [
        ("S1", 3),
        ("S2", 3),
        ("S3", 2),
    ]
    assert len(venn.overlaps) == 4


def test_union_and_intersection(s1, s2, s3):
    assert union_accessions([s1, s2, s3]) == frozenset("ABCDE")
    assert intersect_accessions([s1, s2, s3]) == frozenset({"C"})
    assert intersect_accessions([]) == frozenset()
    assert union_accessions([]) == frozenset()


def test_common_records(s1, s2):
    records = common_records([s1, s2])
    assert [(record.sample_id, record.accession) for record in records] == [
        (1, "B"),
        (1, "C"),
        (2, "B"),
        (2, "C"),
    ]
    assert common_records([s1]) == []


def test_unique_records(s1, s2, s3):
    assert [record.accession for record in unique_records([s1, s2, s3], 1)] == ["A"]
    assert [record.accession for record in unique_records([s1, s2, s3], 2)] == ["D"]
    with pytest.raises(KeyError):
        unique_records([s1, s2], 7)


def test_comparative_needs_two_samples(s1):
    assert build_comparative([]).is_empty
    dataset = build_comparative([s1])
    assert dataset.is_empty
    assert dataset.headers == ()
    assert dataset.heatmap_matrix.empty


def test_comparative_table(s1, s2):
    dataset = build_comparative([s1, s2])

    assert dataset.headers[-2:] == ("Average Abundance (S1)", "Average Abundance (S2)")
    assert dataset.accessions == ("A", "B", "C", "D")
    assert dataset.sample_ids == (1, 2)
    assert dataset.sample_labels == ("S1", "S2")

    rows = {row[0]: row for row in dataset.rows}
    # details come from the first sample that has the accession
    assert rows["B"][1] == "first"
    assert rows["D"][1] == "second"
    assert rows["A"][-2:] == (300.0, None)
    assert rows["B"][-2:] == (200.0, 50.0)
    assert rows["D"][-2:] == (None, 900.0)
    assert dataset.abundances("S2") == {"A": None, "B": 50.0, "C": 40.0, "D": 900.0}

    assert dataset.max_abundance == 900.0
    assert dataset.heatmap_matrix.loc["A", "S2"] == 0.0
    assert dataset.heatmap_matrix.loc["D", "S2"] == 900.0
    assert list(dataset.heatmap_matrix.columns) == ["S1", "S2"]
    assert dataset.heatmap_matrix.index.name == "accession"


def test_comparative_does_not_modify_samples(s1, s2):
    before = (s1, s2)
    build_comparative([s1, s2])
    assert (s1, s2) == before
    assert build_comparative([s1, s2]).rows == build_comparative([s1, s2]).rows


accession_sets = st.sets(st.sampled_from("ABCDEFGHIJ"), max_size=10)


@settings(max_examples=100)
@given(st.lists(accession_sets, min_size=2, max_size=3))
def test_property_overlaps_are_contained_in_members(sets):
    samples = [
        make_sample(index + 1, f"S{index + 1}", {acc: 1.0 for acc in sorted(accessions)})
        for index, accessions in enumerate(sets)
    ]
    by_id = {sample.id: sample for sample in samples}
    for overlap in build_overlap(samples):
        assert overlap.size > 0
        for sample_id in overlap.member_sample_ids:
            assert overlap.accessions <= by_id[sample_id].accessions
        assert overlap.accessions == intersect_accessions(
            [by_id[sample_id] for sample_id in overlap.member_sample_ids]
        )
