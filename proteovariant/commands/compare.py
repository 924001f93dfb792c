"""
Comparative table and heatmap matrix across samples.
"""

from pathlib import Path
from typing import Optional, Tuple

import click

from proteovariant.commands.options import (
    OUTPUT_FORMATS,
    command_logger,
    parse_sample_ids,
    prepare_output_folder,
    run_sample_sheet,
    sample_options,
    select_samples,
)
from proteovariant.core.comparison import build_comparative
from proteovariant.core.export import heatmap_to_dataframe, write_comparative
from proteovariant.utils.file_utils import create_uuid_filename


@click.command(
    "compare",
    short_help="Build the comparative table of two or more samples",
)
@sample_options
@click.option(
    "--samples",
    "sample_ids",
    help="Comma-separated sample ids to compare, in column order (default: all)",
)
@click.option(
    "--output-format",
    help="Format of the comparative table",
    default="tsv",
    show_default=True,
    type=click.Choice(list(OUTPUT_FORMATS)),
)
@click.option(
    "--heatmap",
    help="Also write the heatmap matrix (accession x sample) as TSV",
    is_flag=True,
)
def compare_cmd(
    sample_sheet: Path,
    policy: str,
    keywords: Tuple[str, ...],
    output_folder: Path,
    output_prefix: Optional[str],
    sample_ids: Optional[str],
    output_format: str,
    heatmap: bool,
    verbose: bool = False,
):
    """
    Compare the pathogenic-variant candidates of several samples.

    Example:
        proteovariantc compare \\
            --sample-sheet samples.tsv \\
            --samples 1,2 \\
            --output-folder ./output \\
            --heatmap
    """
    logger = command_logger("compare", verbose)
    requested = parse_sample_ids(sample_ids)

    try:
        output_folder = prepare_output_folder(output_folder, logger)
        samples = select_samples(
            run_sample_sheet(sample_sheet, policy, keywords), requested
        )
        if len(samples) < 2:
            raise click.UsageError("A comparison needs at least 2 samples")

        dataset = build_comparative(samples)
        prefix = output_prefix or "comparative"
        filename = create_uuid_filename(prefix, OUTPUT_FORMATS[output_format])
        write_comparative(dataset, output_folder / filename)

        if heatmap:
            heatmap_path = output_folder / create_uuid_filename(f"{prefix}-heatmap", ".tsv")
            heatmap_to_dataframe(dataset).to_csv(heatmap_path, sep="\t", index=False)
            logger.info(
                f"Heatmap matrix saved to {heatmap_path} (max abundance {dataset.max_abundance:.4f})"
            )

    except click.ClickException:
        raise
    except Exception as e:
        logger.error(f"Error in sample comparison: {str(e)}", exc_info=True)
        raise click.ClickException(f"Error: {str(e)}\nCheck the logs for more details.")
