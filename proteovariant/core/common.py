"""
Common constants for proteovariant.
This module provides column mapping dictionaries, classification markers and export headers used across the library.
"""

from typing import Dict, List

from proteovariant import __version__

PROTEOVARIANT_VERSION = __version__

# Canonical column names used after an adapter has renamed a source table
ACCESSION = "accession"
DESCRIPTION = "description"
PROTEIN_GROUP = "protein_group"
SEQUENCE = "sequence"
UNIQUE = "unique"
RAW_SCORE = "raw_score"
AREA = "area"
NORMALIZED_AREA = "normalized_area"

# Areas of a sample are scaled so that they sum to this value
NORMALIZATION_TARGET = 1e6

# Peaks Studio protein-peptides.csv / proteins.csv
PEAKS_PEPTIDE_MAP: Dict[str, str] = {
    "Protein Group": PROTEIN_GROUP,
    "Protein Accession": ACCESSION,
    "Peptide": SEQUENCE,
    "Unique": UNIQUE,
    "-10lgP": RAW_SCORE,
    "Area": AREA,
}

PEAKS_PROTEIN_MAP: Dict[str, str] = {
    "Accession": ACCESSION,
    "Description": DESCRIPTION,
}

PEAKS_UNIQUE_FLAGS = frozenset({"Y"})

# MaxQuant peptides.txt / proteinGroups.txt
MAXQUANT_PEPTIDE_MAP: Dict[str, str] = {
    "Protein group IDs": PROTEIN_GROUP,
    "Leading razor protein": ACCESSION,
    "Sequence": SEQUENCE,
    "Unique (Proteins)": UNIQUE,
    "Score": RAW_SCORE,
    "Intensity": AREA,
}

MAXQUANT_PROTEIN_MAP: Dict[str, str] = {
    "Protein IDs": ACCESSION,
    "Fasta headers": DESCRIPTION,
}

MAXQUANT_UNIQUE_FLAGS = frozenset({"yes", "Yes", "+"})

# Separator of the accession lists in MaxQuant protein tables
MAXQUANT_ACCESSION_SEPARATOR = ";"

# Classification markers
VARIANT_MARKER_TOKEN = "-VAR_"
VARIANT_SUFFIX_PATTERN = r"-[A-Z]\d+[A-Z]$"
PATHOGENIC_MARKER_TOKEN = "PATHOGENIC_VARIANT"
DEFAULT_DISEASE_KEYWORDS: List[str] = ["pathogenic", "cancer"]
DEFAULT_DISEASE_ASSOCIATION = "N/A"
PATHOGENIC_ASSOCIATION = "Pathogenic"

# Export headers
EXPORT_ACCESSION = "Protein Accession"
EXPORT_DESCRIPTION = "Description"
EXPORT_DISEASE_ASSOCIATION = "Disease Association"
EXPORT_TOTAL_PEPTIDES = "# Total Peptides"
EXPORT_UNIQUE_PEPTIDES = "# Unique Peptides"
EXPORT_UNIQUE_GROUP = "Is Unique Group?"
EXPORT_UNIQUE_PEPTIDES_LIST = "Unique Peptides List"
EXPORT_ABUNDANCE_TEMPLATE = "Average Abundance ({})"

EXPORT_DETAIL_HEADERS: List[str] = [
    EXPORT_ACCESSION,
    EXPORT_DESCRIPTION,
    EXPORT_DISEASE_ASSOCIATION,
    EXPORT_TOTAL_PEPTIDES,
    EXPORT_UNIQUE_PEPTIDES,
    EXPORT_UNIQUE_GROUP,
    EXPORT_UNIQUE_PEPTIDES_LIST,
]

UNIQUE_PEPTIDES_SEPARATOR = ";"
ACCESSION_LIST_SEPARATOR = ";"

# Sample sheet columns read by the command line
SAMPLE_SHEET_ID = "id"
SAMPLE_SHEET_NAME = "name"
SAMPLE_SHEET_SOFTWARE = "software"
SAMPLE_SHEET_PEPTIDES = "peptides"
SAMPLE_SHEET_PROTEINS = "proteins"
SAMPLE_SHEET_REQUIRED = [
    SAMPLE_SHEET_NAME,
    SAMPLE_SHEET_SOFTWARE,
    SAMPLE_SHEET_PEPTIDES,
]

# MaxQuant prefixes of reversed (decoy) and contaminant accessions
DECOY_PREFIXES: List[str] = ["REV__", "CON__"]
