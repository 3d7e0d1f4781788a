#!/usr/bin/env python3
"""
Parallelized batch processing CLI for SADP.

Matches many pairs of contact maps, either sequentially or spread over a
process pool. Matcher instances share no state, so every pair runs in
its own worker without coordination.

Input is a text file with one pair per line, "first,second" or
"first second". Lines starting with # are ignored. One summary row per
pair is written to a TSV file.
"""

import csv
import logging
import os
from concurrent.futures import ProcessPoolExecutor, as_completed
from dataclasses import dataclass
from typing import List, Optional, Tuple

import click

from sadp import io, softassign, util
from sadp.cli import build_config, config_options
from sadp.config import SADPConfig

LOGGER = logging.getLogger(__name__)

SUMMARY_FIELDS = [
    "first",
    "second",
    "success",
    "feasible",
    "score",
    "ncc",
    "iterations",
    "elapsed_ms",
    "matched_pairs",
    "error",
]


@dataclass
class MatchJob:
    """Represents a single contact map pair to match."""

    first_file: str
    second_file: str
    config: SADPConfig


@dataclass
class JobResult:
    """Result of matching a single pair."""

    job: MatchJob
    success: bool
    score: Optional[float] = None
    ncc: Optional[int] = None
    is_feasible: Optional[bool] = None
    iterations: Optional[int] = None
    elapsed_ms: Optional[float] = None
    matched_pairs: Optional[int] = None
    error_msg: Optional[str] = None

    def to_row(self) -> dict:
        return {
            "first": self.job.first_file,
            "second": self.job.second_file,
            "success": self.success,
            "feasible": self.is_feasible,
            "score": self.score,
            "ncc": self.ncc,
            "iterations": self.iterations,
            "elapsed_ms": (
                None if self.elapsed_ms is None else round(self.elapsed_ms, 1)
            ),
            "matched_pairs": self.matched_pairs,
            "error": self.error_msg,
        }


def process_pair(job: MatchJob) -> JobResult:
    """
    Load and match one pair of contact maps.

    Runs in a worker process when jobs are parallel. Failures are captured
    in the returned JobResult instead of being raised.
    """
    try:
        first = io.read_contact_map(job.first_file)
        second = io.read_contact_map(job.second_file)
        result = softassign.match_contact_maps(
            first, second, config=job.config
        )
        LOGGER.info(
            f"Matched {job.first_file} with {job.second_file}: "
            f"score={result.score}"
        )
        return JobResult(
            job=job,
            success=True,
            score=result.score,
            ncc=result.ncc,
            is_feasible=result.is_feasible,
            iterations=result.iterations,
            elapsed_ms=result.elapsed_ms,
            matched_pairs=len(result.matching),
        )

    except Exception as e:
        LOGGER.error(
            f"Error matching {job.first_file} with {job.second_file}: {e}"
        )
        return JobResult(job=job, success=False, error_msg=str(e))


def parse_pairs_file(input_file: str) -> List[Tuple[str, str]]:
    """
    Parse a file listing contact map pairs.

    Format: Each line should be "first,second" or "first second".
    Relative paths are resolved against the directory of ``input_file``.
    """
    base_dir = os.path.dirname(os.path.abspath(input_file))
    pairs = []
    with open(input_file) as f:
        for line_num, line in enumerate(f, 1):
            line = line.strip()
            if not line or line.startswith("#"):
                continue

            if "," in line:
                parts = [p.strip() for p in line.split(",")]
            else:
                parts = line.split()

            if len(parts) < 2:
                LOGGER.warning(
                    f"Line {line_num}: Expected 'first,second', "
                    f"got '{line}'. Skipping."
                )
                continue

            paths = [os.path.join(base_dir, p) for p in parts[:2]]
            missing = [p for p in paths if not os.path.exists(p)]
            if missing:
                LOGGER.warning(
                    f"Line {line_num}: Contact map not found: "
                    f"{', '.join(missing)}. Skipping."
                )
                continue

            pairs.append((paths[0], paths[1]))

    return pairs


def write_summary(results: List[JobResult], output_file: str) -> None:
    """Write one TSV row per job, in input order."""
    with open(output_file, "w", newline="") as f:
        writer = csv.DictWriter(f, fieldnames=SUMMARY_FIELDS, delimiter="\t")
        writer.writeheader()
        for result in results:
            writer.writerow(result.to_row())
    LOGGER.info(f"Wrote summary of {len(results)} pairs to {output_file}")


@click.command(
    context_settings={"help_option_names": ["-h", "--help"]},
    help=(
        "Parallelized batch processing for SADP. Matches every contact map "
        "pair listed in the input file and writes a TSV summary."
    ),
)
@click.option(
    "-i",
    "--input",
    "input_file",
    required=True,
    type=click.Path(exists=True, dir_okay=False, readable=True, path_type=str),
    help="Text file listing 'first,second' contact map pairs, one per line.",
)
@click.option(
    "-o",
    "--output",
    "output_file",
    required=True,
    type=click.Path(dir_okay=False, writable=True, path_type=str),
    help="Destination TSV summary file.",
)
@click.option(
    "--overwrite",
    is_flag=True,
    help="Overwrite the summary file if it already exists.",
)
@click.option(
    "-j",
    "--jobs",
    "num_jobs",
    type=int,
    default=1,
    show_default=True,
    help=(
        "Number of parallel jobs. Use 1 for sequential, >1 for a process "
        "pool with that many workers."
    ),
)
@click.option(
    "-v",
    "--verbose",
    is_flag=True,
    help="Enable verbose logging.",
)
@config_options
def main(
    input_file: str,
    output_file: str,
    overwrite: bool,
    num_jobs: int,
    verbose: bool,
    **config_args,
) -> None:
    """Run batch matching over all pairs in the input file."""
    util.configure_logging(verbose)
    config = build_config(**config_args)

    if num_jobs < 1:
        raise click.BadParameter(
            f"must be at least 1; got {num_jobs}", param_hint="--jobs"
        )
    if os.path.exists(output_file) and not overwrite:
        raise click.ClickException(
            f"{output_file} exists, rerun with --overwrite to replace it"
        )

    jobs = [
        MatchJob(first_file=first, second_file=second, config=config)
        for first, second in parse_pairs_file(input_file)
    ]
    if not jobs:
        click.echo("No pairs to process.")
        return

    click.echo(f"Processing {len(jobs)} pair(s) with {num_jobs} worker(s)...")

    results: List[JobResult] = []
    if num_jobs == 1:
        for i, job in enumerate(jobs, 1):
            click.echo(
                f"Processing {i}/{len(jobs)}: "
                f"{job.first_file} vs {job.second_file}"
            )
            result = process_pair(job)
            results.append(result)
            if not result.success:
                click.echo(f"  ERROR: {result.error_msg}", err=True)
    else:
        order = {id(job): idx for idx, job in enumerate(jobs)}
        with ProcessPoolExecutor(max_workers=num_jobs) as executor:
            futures = {executor.submit(process_pair, job): job for job in jobs}

            with click.progressbar(
                length=len(futures), label="Processing"
            ) as pbar:
                for future in as_completed(futures):
                    result = future.result()
                    result.job = futures[future]
                    results.append(result)
                    pbar.update(1)
                    if not result.success:
                        click.echo(
                            f"\nFailed: {result.job.first_file} vs "
                            f"{result.job.second_file}: {result.error_msg}",
                            err=True,
                        )
        results.sort(key=lambda r: order[id(r.job)])

    write_summary(results, output_file)

    successful = sum(1 for r in results if r.success)
    failed = len(results) - successful
    click.echo(f"\nCompleted: {successful} successful, {failed} failed")


if __name__ == "__main__":
    main()
