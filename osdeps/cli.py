"""CLI entry point: osdeps.

Subcommands:
    osdeps scan /path/to/venv                    # list required OS libraries
    osdeps scan /path/to/venv --output-format json
    osdeps ignore-list --os darwin               # show the active base-image list
"""

from __future__ import annotations

import sys

import click

from osdeps.config import load_config
from osdeps.core.logging import setup_logging
from osdeps.exceptions import OsDepsError
from osdeps.output import FORMATS, format_dependencies
from osdeps.parsers import PARSERS
from osdeps.pipeline import analyze_environment
from osdeps.progress import PhaseTimer
from osdeps.scanners import SCANNERS


def _default_os() -> str:
    if sys.platform.startswith("linux"):
        return "linux"
    if sys.platform == "darwin":
        return "darwin"
    return sys.platform


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Verbose logging")
def main(verbose: bool) -> None:
    """osdeps: find the OS shared libraries a Python environment needs."""
    setup_logging("DEBUG" if verbose else None)


@main.command("scan")
@click.argument("env_path", type=click.Path(file_okay=False, resolve_path=True))
@click.option(
    "--env-type",
    default="python-venv",
    show_default=True,
    type=click.Choice(sorted(SCANNERS)),
    help="Type of environment",
)
@click.option(
    "--os",
    "target_os",
    default=_default_os,
    show_default="current platform",
    type=click.Choice(sorted(PARSERS)),
    help="Target operating system",
)
@click.option(
    "--output-format",
    default="list",
    show_default=True,
    type=click.Choice(FORMATS, case_sensitive=False),
    help="Output format",
)
@click.option(
    "--workers",
    default=0,
    show_default=True,
    envvar="OSDEPS_WORKERS",
    type=int,
    help="Worker threads (<= 0: one per CPU)",
)
@click.option("--no-filter", is_flag=True, help="Do not drop base-image libraries")
@click.option(
    "--config",
    "config_path",
    default=None,
    type=click.Path(exists=True, dir_okay=False),
    help="TOML file with extra ignore-list entries",
)
@click.option("--debug", is_flag=True, help="Also print all dependencies before filtering")
def scan(
    env_path: str,
    env_type: str,
    target_os: str,
    output_format: str,
    workers: int,
    no_filter: bool,
    config_path: str | None,
    debug: bool,
) -> None:
    """Scan ENV_PATH and print the OS libraries its extension modules need."""
    progress = PhaseTimer()
    try:
        config = load_config(config_path)
        if no_filter:
            config = config.without_filtering(target_os)
        report = analyze_environment(
            env_path,
            target_os,
            env_type=env_type,
            config=config,
            workers=workers,
            progress=progress,
        )
        rendered = format_dependencies(report.dependencies, output_format)
    except OsDepsError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    if rendered:
        click.echo(rendered)

    click.echo(
        f"Analyzed {report.artifact_count} artifacts with {report.workers} workers: "
        f"{report.parsed_count} parsed, {len(report.skipped)} skipped, "
        f"{len(report.dependencies)} dependencies",
        err=True,
    )
    for ref, candidates in sorted(report.ambiguous.items()):
        click.echo(
            f"Ambiguous: {ref} -> {candidates[0]} (also: {', '.join(candidates[1:])})",
            err=True,
        )

    if debug:
        click.echo(f"\nPipeline summary (total: {progress.total}s):", err=True)
        for p in progress.phases:
            elapsed = f" ({p.elapsed}s)" if p.elapsed else ""
            detail = f" - {p.detail}" if p.detail else ""
            click.echo(f"  [{p.status}] {p.name}{elapsed}{detail}", err=True)
        click.echo("\nAll dependencies before filtering:", err=True)
        for dep in report.unfiltered:
            click.echo(f"  {dep}", err=True)
        for path in report.skipped:
            click.echo(f"  skipped: {path}", err=True)


@main.command("ignore-list")
@click.option(
    "--os",
    "target_os",
    default=_default_os,
    show_default="current platform",
    help="Target operating system",
)
@click.option(
    "--config",
    "config_path",
    default=None,
    type=click.Path(exists=True, dir_okay=False),
    help="TOML file with extra ignore-list entries",
)
def ignore_list(target_os: str, config_path: str | None) -> None:
    """Print the libraries treated as part of the base OS image."""
    try:
        config = load_config(config_path)
    except OsDepsError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    names = config.ignore_list_for(target_os)
    if names is None:
        click.echo(f"No ignore list defined for OS '{target_os}'", err=True)
        sys.exit(1)
    for name in sorted(names):
        click.echo(name)


if __name__ == "__main__":
    main()
