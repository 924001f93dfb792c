"""
Venn overlaps between two or three samples.
"""

from pathlib import Path
from typing import Optional, Tuple

import click

from proteovariant.commands.options import (
    command_logger,
    parse_sample_ids,
    prepare_output_folder,
    run_sample_sheet,
    sample_options,
    select_samples,
)
from proteovariant.core.comparison import (
    MAX_OVERLAP_SAMPLES,
    MIN_OVERLAP_SAMPLES,
    build_venn,
)
from proteovariant.core.export import write_overlaps
from proteovariant.utils.file_utils import create_uuid_filename

OVERLAP_FORMATS = {"tsv": ".tsv", "csv": ".csv"}


@click.command(
    "overlap",
    short_help="Write the accession overlaps of 2 or 3 samples",
)
@sample_options
@click.option(
    "--samples",
    "sample_ids",
    help="Comma-separated ids of the 2 or 3 samples to intersect (default: all)",
)
@click.option(
    "--output-format",
    help="Format of the overlap table",
    default="tsv",
    show_default=True,
    type=click.Choice(list(OVERLAP_FORMATS)),
)
def overlap_cmd(
    sample_sheet: Path,
    policy: str,
    keywords: Tuple[str, ...],
    output_folder: Path,
    output_prefix: Optional[str],
    sample_ids: Optional[str],
    output_format: str,
    verbose: bool = False,
):
    """
    Intersect the candidate accessions of every pair of samples and of the triple.

    Example:
        proteovariantc overlap \\
            --sample-sheet samples.tsv \\
            --samples 1,2,3 \\
            --output-folder ./output
    """
    logger = command_logger("overlap", verbose)
    requested = parse_sample_ids(sample_ids)

    try:
        output_folder = prepare_output_folder(output_folder, logger)
        samples = select_samples(
            run_sample_sheet(sample_sheet, policy, keywords), requested
        )
        if not MIN_OVERLAP_SAMPLES <= len(samples) <= MAX_OVERLAP_SAMPLES:
            raise click.UsageError(
                f"Overlaps need {MIN_OVERLAP_SAMPLES} or {MAX_OVERLAP_SAMPLES} samples, "
                f"got {len(samples)}"
            )

        venn = build_venn(samples)
        for venn_set in venn.sets:
            logger.info(f"{venn_set.label}: {venn_set.size} accessions")

        prefix = output_prefix or "overlap"
        filename = create_uuid_filename(prefix, OVERLAP_FORMATS[output_format])
        write_overlaps(list(venn.overlaps), output_folder / filename)

    except click.ClickException:
        raise
    except Exception as e:
        logger.error(f"Error in overlap computation: {str(e)}", exc_info=True)
        raise click.ClickException(f"Error: {str(e)}\nCheck the logs for more details.")
