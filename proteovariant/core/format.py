from typing import Sequence

import pyarrow as pa

from proteovariant.core.common import PROTEOVARIANT_VERSION

PROTEIN_DETAIL_FIELDS = [
    pa.field(
        "accession",
        pa.string(),
        metadata={"description": "Protein accession, compound ids reduced to the second segment"},
    ),
    pa.field(
        "description",
        pa.string(),
        metadata={"description": "Protein description as written by the source software"},
    ),
    pa.field(
        "disease_association",
        pa.string(),
        metadata={
            "description": "Association or clinical significance taken from the description, N/A otherwise"
        },
    ),
    pa.field(
        "total_peptides",
        pa.int32(),
        metadata={"description": "Number of peptide rows mapped to the accession"},
    ),
    pa.field(
        "unique_peptides_count",
        pa.int32(),
        metadata={"description": "Number of distinct unique peptide sequences"},
    ),
    pa.field(
        "is_unique_group",
        pa.bool_(),
        metadata={"description": "True when the protein group holds exactly one accession"},
    ),
    pa.field(
        "unique_peptides",
        pa.list_(pa.string()),
        metadata={"description": "Sorted unique peptide sequences"},
    ),
]

SAMPLE_RECORD_FIELDS = PROTEIN_DETAIL_FIELDS + [
    pa.field(
        "protein_group",
        pa.string(),
        metadata={"description": "Protein group identifier of the source software"},
    ),
    pa.field(
        "average_abundance",
        pa.float64(),
        metadata={"description": "Mean normalized abundance of the peptide rows"},
    ),
    pa.field(
        "raw_score",
        pa.float64(),
        metadata={"description": "Score used to pick the representative of the group"},
    ),
    pa.field(
        "sample_id",
        pa.int32(),
        metadata={"description": "Identifier of the owning sample"},
    ),
]

SAMPLE_RECORD_SCHEMA = pa.schema(
    SAMPLE_RECORD_FIELDS,
    metadata={
        "description": "pathogenic-variant candidates of one sample",
        "proteovariant_version": PROTEOVARIANT_VERSION,
    },
)


def abundance_field(label: str) -> pa.Field:
    return pa.field(
        f"average_abundance_{label}",
        pa.float64(),
        metadata={"description": f"Average abundance in sample {label}, null when not detected"},
    )


def comparative_schema(labels: Sequence[str]) -> pa.Schema:
    """Schema of a comparative table: protein details plus one abundance per sample."""
    return pa.schema(
        PROTEIN_DETAIL_FIELDS + [abundance_field(label) for label in labels],
        metadata={
            "description": "comparative table of pathogenic-variant candidates",
            "proteovariant_version": PROTEOVARIANT_VERSION,
        },
    )
