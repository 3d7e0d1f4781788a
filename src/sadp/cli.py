#!/usr/bin/env python3
"""Command-line interface for SADP contact map alignment.

This module provides the CLI entry point for matching two contact maps
with softassign and dynamic programming:

1. Load both contact maps from the plain-text contact-map format
2. Run the annealing, discretization and non-crossing extraction
3. Report shared contacts, score, timing and the node mapping
4. Optionally write the mapping to a TSV file

Usage:
    sadp -x first.cm -y second.cm
    sadp -x first.cm -y second.cm -o mapping.tsv --progress
"""

import logging
import os
from typing import List, Optional

import click
from tqdm import tqdm

from sadp import constants, io, softassign, util
from sadp.config import SADPConfig
from sadp.contact_map import ContactMap
from sadp.types import MatchResult

LOGGER = logging.getLogger(__name__)


def config_options(func):
    """Attach the optimizer parameter options shared by both commands."""
    options = [
        click.option(
            "--b0",
            "b0",
            type=float,
            default=constants.DEFAULT_B0,
            show_default=True,
            help="Initial annealing parameter b = 1/T.",
        ),
        click.option(
            "--bf",
            "bf",
            type=float,
            default=constants.DEFAULT_BF,
            show_default=True,
            help="Final annealing parameter.",
        ),
        click.option(
            "--br",
            "br",
            type=float,
            default=constants.DEFAULT_BR,
            show_default=True,
            help="Factor by which b grows after each annealing step.",
        ),
        click.option(
            "--assignment-iterations",
            "assignment_iterations",
            type=int,
            default=constants.DEFAULT_MAX_ASSIGNMENT_ITERATIONS,
            show_default=True,
            help="Maximum softmax iterations per annealing step.",
        ),
        click.option(
            "--sinkhorn-iterations",
            "sinkhorn_iterations",
            type=int,
            default=constants.DEFAULT_MAX_SINKHORN_ITERATIONS,
            show_default=True,
            help="Maximum Sinkhorn passes per softmax iteration.",
        ),
        click.option(
            "--eps0",
            "eps0",
            type=float,
            default=constants.DEFAULT_EPS0,
            show_default=True,
            help="Convergence threshold of the assignment loop.",
        ),
        click.option(
            "--eps1",
            "eps1",
            type=float,
            default=constants.DEFAULT_EPS1,
            show_default=True,
            help="Convergence threshold of the Sinkhorn loop.",
        ),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def build_config(**kwargs) -> SADPConfig:
    """Create a config from CLI values, turning errors into usage errors."""
    try:
        return SADPConfig.from_cli_args(**kwargs)
    except ValueError as e:
        raise click.BadParameter(str(e)) from e


def format_summary(
    result: MatchResult, first: ContactMap, second: ContactMap
) -> List[str]:
    """Return the human-readable report lines for ``result``."""
    lines = [
        f"First map            : {first.name}",
        f"    nodes/contacts   : {first.n_nodes}/{first.n_edges}",
        f"Second map           : {second.name}",
        f"    nodes/contacts   : {second.n_nodes}/{second.n_edges}",
        f"#(shared contacts)   : {result.ncc}",
        f"Score                : {result.score}",
        f"Feasible             : {result.is_feasible}",
        f"Iterations           : {result.iterations}",
        f"Time                 : {result.elapsed_ms:.1f} msec",
        "",
        "Match:",
    ]
    lines.extend(f"    {i} -> {j}" for i, j in result.matching)
    return lines


@click.command(
    context_settings={"help_option_names": ["-h", "--help"]},
    help=(
        "Align two protein contact maps with softassign and dynamic "
        "programming (SADP), maximizing the number of shared non-crossing "
        "contacts."
    ),
)
@click.option(
    "-x",
    "--first",
    "first_file",
    required=True,
    type=click.Path(exists=True, dir_okay=False, readable=True, path_type=str),
    help="First contact map file.",
)
@click.option(
    "-y",
    "--second",
    "second_file",
    required=True,
    type=click.Path(exists=True, dir_okay=False, readable=True, path_type=str),
    help="Second contact map file.",
)
@click.option(
    "-o",
    "--output",
    "output_file",
    default=None,
    type=click.Path(dir_okay=False, writable=True, path_type=str),
    help="Write the node mapping as a TSV file.",
)
@click.option(
    "--overwrite",
    is_flag=True,
    help="Overwrite the output file if it already exists.",
)
@click.option(
    "--progress",
    "show_progress",
    is_flag=True,
    help="Show a progress bar during annealing.",
)
@click.option(
    "-v",
    "--verbose",
    is_flag=True,
    help="Enable verbose logging.",
)
@config_options
def main(
    first_file: str,
    second_file: str,
    output_file: Optional[str],
    overwrite: bool,
    show_progress: bool,
    verbose: bool,
    **config_args,
) -> None:
    """Run the command-line workflow for aligning two contact maps."""
    util.configure_logging(verbose)
    config = build_config(**config_args)
    LOGGER.info(f"Using {config}")

    if output_file and os.path.exists(output_file) and not overwrite:
        raise click.ClickException(
            f"{output_file} exists, rerun with --overwrite to replace it"
        )

    try:
        first = io.read_contact_map(first_file)
        second = io.read_contact_map(second_file)
    except ValueError as e:
        raise click.ClickException(str(e)) from e

    if show_progress:
        with tqdm(total=100.0, desc="Annealing", unit="%") as bar:

            def advance(percentage: float) -> None:
                bar.update(percentage - bar.n)

            result = softassign.match_contact_maps(
                first, second, config=config, progress=advance
            )
    else:
        result = softassign.match_contact_maps(first, second, config=config)

    for line in format_summary(result, first, second):
        click.echo(line)

    if output_file:
        io.write_matching(result.matching, output_file)


if __name__ == "__main__":
    main()
