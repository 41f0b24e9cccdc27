"""
Command-line interface for cfactory.

This module provides the `cfactory` CLI tool for building C projects
described by factory.json files.
"""

import argparse
import sys
import traceback
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Sequence

from rich.console import Console
from rich.table import Table

from cfactory import __version__
from cfactory.build import BuildOrchestrator, BuildParams, BuildResult, clean_build_root
from cfactory.errors import FactoryError
from cfactory.output import init_timer, log_header, set_verbose
from cfactory.paths import DESCRIPTOR_FILE_NAME
from cfactory.project import DependencyResolver, ProjectRegistry, load_project_file, topological_sort

console = Console(highlight=False)


@dataclass
class BuildArgs:
    """Arguments for the build command."""

    project_dir: Path
    descriptor_file: str = DESCRIPTOR_FILE_NAME
    verbose: bool = False


@dataclass
class OrderArgs:
    """Arguments for the order command."""

    project_dir: Path
    descriptor_file: str = DESCRIPTOR_FILE_NAME
    verbose: bool = False


@dataclass
class CleanArgs:
    """Arguments for the clean command."""

    project_dir: Path
    verbose: bool = False


def _report_unexpected(e: Exception, verbose: bool) -> None:
    console.print()
    console.print("[bold red]✗ Unexpected error[/bold red]")
    console.print()
    console.print(f"{type(e).__name__}: {e}", markup=False)
    if verbose:
        console.print()
        console.print("Traceback:")
        console.print(traceback.format_exc(), markup=False)


def render_summary(result: BuildResult) -> Table:
    """Build the per-target, per-project summary table of a run."""
    table = Table(title="Build summary")
    table.add_column("Target")
    table.add_column("Project")
    table.add_column("Compiled", justify="right")
    table.add_column("Failed", justify="right")
    table.add_column("Output")

    for project in result.projects:
        if project.executable is not None:
            output = project.executable.as_posix()
        elif project.link_error is not None:
            output = "[red]link failed[/red]"
        else:
            output = "-"
        failed = str(len(project.failed))
        table.add_row(
            project.target.value,
            project.project_name,
            str(len(project.compiled)),
            f"[red]{failed}[/red]" if project.failed else failed,
            output,
        )
    return table


def build_command(args: BuildArgs) -> None:
    """Build every project for the debug and release targets.

    Examples:
        cfactory build                     # Build the project in the current directory
        cfactory build examples/hello      # Build a specific project
        cfactory build --file other.json   # Use another descriptor file
        cfactory build --verbose           # Verbose output
    """
    init_timer()
    set_verbose(args.verbose)
    log_header("cfactory", __version__)

    try:
        orchestrator = BuildOrchestrator()
        result = orchestrator.build(
            BuildParams(
                project_dir=args.project_dir,
                descriptor_file=args.descriptor_file,
                verbose=args.verbose,
            )
        )

        if result.projects:
            console.print()
            console.print(render_summary(result))

        console.print()
        if result.success:
            console.print("[bold green]✓ Build successful![/bold green]")
            console.print(f"Build time: {result.build_time:.2f}s")
            sys.exit(0)
        else:
            console.print("[bold red]✗ Build failed![/bold red]")
            console.print()
            console.print(result.message, markup=False)
            sys.exit(1)

    except KeyboardInterrupt:
        console.print()
        console.print("[bold yellow]✗ Build interrupted[/bold yellow]")
        sys.exit(130)  # Standard exit code for SIGINT

    except Exception as e:
        _report_unexpected(e, args.verbose)
        sys.exit(1)


def order_command(args: OrderArgs) -> None:
    """Print the build order without compiling.

    Remote dependencies are still fetched, since their descriptors decide
    the rest of the graph.
    """
    init_timer()
    set_verbose(args.verbose)

    try:
        registry = ProjectRegistry()
        root = load_project_file(
            args.project_dir / args.descriptor_file,
            registry,
            display_name=args.descriptor_file,
        )
        DependencyResolver(registry, args.project_dir).resolve_all(root)
        order = topological_sort(root)

        console.print()
        for index, project in enumerate(order, start=1):
            console.print(f"{index:>3}. {project.name} [dim]({project.type.value}, {project.path})[/dim]")
        sys.exit(0)

    except FactoryError as e:
        console.print()
        console.print("[bold red]✗ Error[/bold red]")
        console.print(str(e), markup=False)
        sys.exit(1)

    except KeyboardInterrupt:
        console.print()
        console.print("[bold yellow]✗ Interrupted[/bold yellow]")
        sys.exit(130)

    except Exception as e:
        _report_unexpected(e, args.verbose)
        sys.exit(1)


def clean_command(args: CleanArgs) -> None:
    """Remove the build root of a project."""
    init_timer()
    set_verbose(args.verbose)

    try:
        if clean_build_root(args.project_dir):
            console.print("[bold green]✓ Build artifacts removed[/bold green]")
        else:
            console.print("Nothing to clean")
        sys.exit(0)

    except OSError as e:
        console.print("[bold red]✗ Clean failed[/bold red]")
        console.print(str(e), markup=False)
        sys.exit(1)


def _add_project_dir_argument(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "project_dir",
        nargs="?",
        type=Path,
        default=Path.cwd(),
        help="Project directory (default: current directory)",
    )


def _add_verbose_argument(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Show verbose output",
    )


def _add_file_argument(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "-f",
        "--file",
        dest="descriptor_file",
        default=DESCRIPTOR_FILE_NAME,
        help=f"Project descriptor file (default: {DESCRIPTOR_FILE_NAME})",
    )


def create_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cfactory",
        description="cfactory - build C projects described by factory.json files",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"cfactory {__version__}",
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    build_parser = subparsers.add_parser("build", help="Build debug and release targets")
    _add_project_dir_argument(build_parser)
    _add_file_argument(build_parser)
    _add_verbose_argument(build_parser)

    order_parser = subparsers.add_parser("order", help="Print the build order")
    _add_project_dir_argument(order_parser)
    _add_file_argument(order_parser)
    _add_verbose_argument(order_parser)

    clean_parser = subparsers.add_parser("clean", help="Remove build artifacts")
    _add_project_dir_argument(clean_parser)
    _add_verbose_argument(clean_parser)

    return parser


def main(argv: Optional[Sequence[str]] = None) -> None:
    """cfactory - build C projects described by factory.json files."""
    parser = create_parser()
    parsed_args = parser.parse_args(argv)

    # If no command specified, show help
    if not parsed_args.command:
        parser.print_help()
        sys.exit(0)

    if not parsed_args.project_dir.exists():
        console.print(f"[bold red]✗ Error: Path does not exist: {parsed_args.project_dir}[/bold red]")
        sys.exit(2)
    if not parsed_args.project_dir.is_dir():
        console.print(f"[bold red]✗ Error: Path is not a directory: {parsed_args.project_dir}[/bold red]")
        sys.exit(2)

    if parsed_args.command == "build":
        build_command(
            BuildArgs(
                project_dir=parsed_args.project_dir,
                descriptor_file=parsed_args.descriptor_file,
                verbose=parsed_args.verbose,
            )
        )
    elif parsed_args.command == "order":
        order_command(
            OrderArgs(
                project_dir=parsed_args.project_dir,
                descriptor_file=parsed_args.descriptor_file,
                verbose=parsed_args.verbose,
            )
        )
    elif parsed_args.command == "clean":
        clean_command(CleanArgs(project_dir=parsed_args.project_dir, verbose=parsed_args.verbose))


if __name__ == "__main__":
    main()
