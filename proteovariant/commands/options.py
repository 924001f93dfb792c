"""
Options and helpers shared by the proteovariant commands.
"""

import logging
from pathlib import Path
from typing import List, Optional, Sequence

import click

from proteovariant.core.classification import DEFAULT_POLICY, POLICIES, PathogenicClassifier
from proteovariant.core.model import Sample
from proteovariant.core.pipeline import SampleStore, load_sample_inputs
from proteovariant.utils.logger import get_logger

OUTPUT_FORMATS = {"tsv": ".tsv", "csv": ".csv", "parquet": ".parquet"}


def sample_options(func):
    """Sample sheet and classification options common to every command."""
    decorators = [
        click.option(
            "--sample-sheet",
            help="Delimited file with the columns name, software, peptides, proteins and optionally id",
            required=True,
            type=click.Path(exists=True, dir_okay=False, path_type=Path),
        ),
        click.option(
            "--policy",
            help="Classification policy for pathogenic-variant candidates",
            default=DEFAULT_POLICY,
            show_default=True,
            type=click.Choice(list(POLICIES)),
        ),
        click.option(
            "--keyword",
            "keywords",
            help="Disease keyword used by the keyword policy (repeatable)",
            multiple=True,
        ),
        click.option(
            "--output-folder",
            help="Output directory for generated files",
            required=True,
            type=click.Path(file_okay=False, path_type=Path),
        ),
        click.option(
            "--output-prefix",
            help="Prefix for output files",
        ),
        click.option("--verbose", help="Enable verbose logging", is_flag=True),
    ]
    for decorator in reversed(decorators):
        func = decorator(func)
    return func


def command_logger(name: str, verbose: bool) -> logging.Logger:
    """Logger of one command; DEBUG with --verbose, inherited level otherwise."""
    logger = get_logger(f"proteovariant.commands.{name}")
    logger.setLevel(logging.DEBUG if verbose else logging.NOTSET)
    if verbose:
        logger.debug("Verbose logging enabled")
    return logger


def run_sample_sheet(
    sample_sheet: Path, policy: str, keywords: Sequence[str]
) -> List[Sample]:
    """Load and process every sample of a sample sheet."""
    classifier = PathogenicClassifier(policy=policy, keywords=list(keywords) or None)
    store = SampleStore(classifier)
    return list(store.run_batch(load_sample_inputs(sample_sheet)))


def parse_sample_ids(value: Optional[str]) -> Optional[List[int]]:
    """Parse a comma-separated list of sample ids such as ``1,3``."""
    if not value:
        return None
    try:
        return [int(item) for item in value.split(",") if item.strip()]
    except ValueError:
        raise click.BadParameter(f"Sample ids must be integers: {value}") from None


def select_samples(samples: Sequence[Sample], sample_ids: Optional[List[int]]) -> List[Sample]:
    """Samples in the order of the requested ids, or all of them."""
    if sample_ids is None:
        return list(samples)
    by_id = {sample.id: sample for sample in samples}
    unknown = [sample_id for sample_id in sample_ids if sample_id not in by_id]
    if unknown:
        raise click.BadParameter(f"Unknown sample ids: {unknown}. Available: {list(by_id)}")
    return [by_id[sample_id] for sample_id in sample_ids]


def prepare_output_folder(output_folder: Path, logger: logging.Logger) -> Path:
    output_folder = Path(output_folder)
    output_folder.mkdir(parents=True, exist_ok=True)
    logger.info(f"Using output directory: {output_folder}")
    return output_folder
