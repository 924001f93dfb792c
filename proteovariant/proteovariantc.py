"""
Commandline interface for proteovariant: classifies pathogenic-variant candidates in the
protein and peptide exports of proteomics software and compares them across samples.
"""

import logging

import click

from proteovariant import __version__ as __version__

from proteovariant.commands.analyze import analyze_cmd
from proteovariant.commands.compare import compare_cmd
from proteovariant.commands.overlap import overlap_cmd

CONTEXT_SETTINGS = dict(help_option_names=["-h", "--help"])


@click.version_option(
    version=__version__, package_name="proteovariant", message="%(package)s %(version)s"
)
@click.group(context_settings=CONTEXT_SETTINGS)
def cli() -> None:
    """
    proteovariant - Pathogenic-variant detection and cross-sample comparison of proteomics results
    """
    logging.basicConfig(
        level=logging.INFO,
        datefmt="%H:%M:%S",
        format="[%(asctime)s] %(levelname).1s | %(name)s | %(message)s",
    )


cli.add_command(analyze_cmd, name="analyze")
cli.add_command(compare_cmd, name="compare")
cli.add_command(overlap_cmd, name="overlap")


def proteovariant_main() -> None:
    """
    Main function to run the proteovariant command line interface
    :return: none
    """
    cli()


if __name__ == "__main__":
    proteovariant_main()
