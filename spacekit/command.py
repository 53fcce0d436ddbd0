"""Command-line parsing of the build tasks and selection of the command to run."""

from __future__ import annotations

import argparse
from collections.abc import Iterable, Sequence
from typing import Any, Protocol, runtime_checkable

from .benchmark import BenchmarkCommand
from .coverage import CoverageCommand, CoverageOptions, CoverageReportType
from .version import VersionCommand, VersionOptions


@runtime_checkable
class BuildItCommand(Protocol):
    """A build task that can be run."""

    def run(self) -> Any:
        """Perform the task, raising on failure."""


def _split_spaces(values: Iterable[str] | None) -> list[str] | None:
    if values is None:
        return None
    return [part for value in values for part in value.split(" ") if part]


def build_parser() -> argparse.ArgumentParser:
    """The argument parser of the build tasks."""
    parser = argparse.ArgumentParser(prog="buildit", description="Build, test and release tasks.")
    subcommands = parser.add_subparsers(dest="command", required=True, metavar="COMMAND")

    coverage = subcommands.add_parser(
        "coverage", help="Builds, runs, measures and creates code coverage reports."
    )
    coverage.add_argument(
        "-o", "--output", dest="output_types", action="append",
        type=CoverageReportType, choices=list(CoverageReportType),
        help="The coverage report types to generate.",
    )
    coverage.add_argument("--package", help="An optional package to cover.")
    coverage.add_argument(
        "--exclude-files", dest="exclude_file_globs", nargs="+", action="extend",
        help="Glob patterns of files to exclude from coverage, separated by spaces.",
    )
    coverage.add_argument(
        "--include-ignored", action="store_true", help="Optionally include the ignored tests."
    )

    benchmark = subcommands.add_parser(
        "benchmark", help="Runs a benchmark using a known directory structure."
    )
    benchmark.add_argument(
        "--bench-names", nargs="+", action="extend",
        help="Benchmarks to run, separated by spaces. All are run if not given.",
    )
    benchmark.add_argument(
        "--sample-url", help="Where to download the sample archive from when it is not present."
    )

    version = subcommands.add_parser(
        "version",
        help="Determines the previous and next version numbers based on repository history.",
    )
    version.add_argument("-r", "--repo-root-dir", help="The Git repository root directory.")
    version.add_argument("-p", "--version-tag-prefix", help="An optional version tag prefix.")
    version.add_argument("--max-commit-count", type=int, default=1000,
                         help="The maximum number of commits to process.")
    version.add_argument("--release-branch-name", default="main",
                         help="The branch from which releases are done.")
    version.add_argument("--no-branch-name", action="store_true",
                         help="Use the pre-release name instead of the branch name.")
    version.add_argument("--pre-release-name", default="alpha",
                         help="The default pre-release name.")
    version.add_argument(
        "-m", "--manifest-globs", action="append",
        help="Glob patterns of Cargo.toml manifests to update, separated by spaces.",
    )
    return parser


def resolve_command(argv: Sequence[str] | None = None) -> BuildItCommand:
    """Parse ``argv`` and create the command it asks for."""
    args = build_parser().parse_args(argv)
    if args.command == "coverage":
        return CoverageCommand(
            CoverageOptions(
                output_types=args.output_types,
                package=args.package,
                exclude_file_globs=_split_spaces(args.exclude_file_globs),
                include_ignored=args.include_ignored,
            )
        )
    if args.command == "benchmark":
        return BenchmarkCommand(
            bench_names=_split_spaces(args.bench_names), sample_url=args.sample_url
        )
    manifest_globs = _split_spaces(args.manifest_globs) or ["**/Cargo.toml"]
    return VersionCommand(
        VersionOptions(
            repo_root_dir=args.repo_root_dir,
            version_tag_prefix=args.version_tag_prefix,
            max_commit_count=args.max_commit_count,
            release_branch_name=args.release_branch_name,
            no_branch_name=args.no_branch_name,
            pre_release_name=args.pre_release_name,
            manifest_globs=manifest_globs,
        )
    )