"""
Per-sample analysis: pathogenic-variant candidates of every sample in a sheet.
"""

from pathlib import Path
from typing import Optional, Tuple

import click

from proteovariant.commands.options import (
    OUTPUT_FORMATS,
    command_logger,
    prepare_output_folder,
    run_sample_sheet,
    sample_options,
)
from proteovariant.core.export import write_sample
from proteovariant.utils.file_utils import create_uuid_filename


@click.command(
    "analyze",
    short_help="Classify the proteins of every sample and write one table per sample",
)
@sample_options
@click.option(
    "--output-format",
    help="Format of the per-sample tables",
    default="tsv",
    show_default=True,
    type=click.Choice(list(OUTPUT_FORMATS)),
)
def analyze_cmd(
    sample_sheet: Path,
    policy: str,
    keywords: Tuple[str, ...],
    output_folder: Path,
    output_prefix: Optional[str],
    output_format: str,
    verbose: bool = False,
):
    """
    Process a batch of samples and write their pathogenic-variant candidates.

    Example:
        proteovariantc analyze \\
            --sample-sheet samples.tsv \\
            --output-folder ./output \\
            --output-format tsv
    """
    logger = command_logger("analyze", verbose)

    try:
        output_folder = prepare_output_folder(output_folder, logger)
        samples = run_sample_sheet(sample_sheet, policy, keywords)

        prefix = output_prefix or "sample"
        for sample in samples:
            filename = create_uuid_filename(
                f"{prefix}-{sample.id}", OUTPUT_FORMATS[output_format]
            )
            write_sample(sample, output_folder / filename)
            logger.info(
                f"Sample '{sample.name}': {sample.total_peptides_count} peptides, "
                f"{sample.total_proteins_count} proteins, "
                f"{len(sample.analysis_results)} candidates, "
                f"{sample.skipped_rows} skipped rows"
            )

    except click.ClickException:
        raise
    except Exception as e:
        logger.error(f"Error in sample analysis: {str(e)}", exc_info=True)
        raise click.ClickException(f"Error: {str(e)}\nCheck the logs for more details.")
