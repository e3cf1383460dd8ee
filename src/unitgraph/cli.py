"""unitgraph CLI entry point."""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path
from typing import TYPE_CHECKING

import click

from unitgraph import __version__

if TYPE_CHECKING:
    from collections.abc import Callable

    from unitgraph.graph.resolver import UnitSet

_OPTIMIZE_CHOICES = ["Debug", "ReleaseSafe", "ReleaseFast", "ReleaseSmall"]


@click.group()
@click.version_option(version=__version__, prog_name="unitgraph")
@click.option("--verbose", "-v", is_flag=True, help="Verbose output.")
@click.option("--quiet", "-q", is_flag=True, help="Minimal output (errors only).")
@click.pass_context
def main(ctx: click.Context, *, verbose: bool, quiet: bool) -> None:
    """unitgraph - build manifest to unit graph resolver."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet

    level = logging.WARNING
    if verbose:
        level = logging.DEBUG
    elif quiet:
        level = logging.ERROR
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")


def _manifest_options(func: Callable[..., None]) -> Callable[..., None]:
    """Options shared by every command that resolves a manifest."""
    options = [
        click.argument(
            "manifest_path",
            metavar="MANIFEST",
            type=click.Path(exists=True, dir_okay=False, path_type=Path),
        ),
        click.option(
            "--target", default=None, help="Target triple (default: from manifest or host)."
        ),
        click.option(
            "--optimize",
            type=click.Choice(_OPTIMIZE_CHOICES, case_sensitive=False),
            default=None,
            help="Optimize mode (default: from manifest or Debug).",
        ),
        click.option("--strip/--no-strip", default=None, help="Strip debug info."),
        click.option(
            "--tests/--no-tests", default=None, help="Build test units for nodes with tests."
        ),
        click.option(
            "--file-gen/--no-file-gen",
            default=None,
            help="Run header generation for flagged nodes.",
        ),
        click.option("--host", "host_triple", default=None, help="Override the host triple."),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def _resolve(
    manifest_path: Path,
    *,
    target: str | None,
    optimize: str | None,
    strip: bool | None,
    tests: bool | None,
    file_gen: bool | None,
    host_triple: str | None,
) -> UnitSet:
    """Load *manifest_path* and build its unit set, exiting on failure."""
    from unitgraph.build.context import BuildContext, OptimizeMode
    from unitgraph.graph.errors import UnitGraphError
    from unitgraph.graph.meta import GenerativeInput
    from unitgraph.graph.resolver import BuildDetails, UnitSet
    from unitgraph.manifest.loader import ManifestError, load_manifest

    try:
        loaded = load_manifest(manifest_path)
    except ManifestError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(1)

    defaults = loaded.build
    build_ctx = BuildContext(manifest_path.parent, host_triple=host_triple)
    resolved_target = build_ctx.resolve_target(target or defaults.target)

    try:
        details = BuildDetails(
            vis=defaults.vis,
            target=resolved_target,
            optimize=OptimizeMode.parse(optimize or defaults.optimize),
            strip=defaults.strip if strip is None else strip,
            file_gen=defaults.file_gen if file_gen is None else file_gen,
            tests=defaults.tests if tests is None else tests,
        )

        if resolved_target == build_ctx.host:
            return UnitSet.init(
                build_ctx, defaults.name, loaded.manifest, loaded.packages, details
            )

        # Cross build: tools come from a host set built from the same manifest.
        host_set = UnitSet.init(
            build_ctx,
            f"{defaults.name}-host",
            loaded.manifest,
            loaded.packages,
            BuildDetails(
                vis=defaults.vis,
                target=build_ctx.host,
                optimize=details.optimize,
                file_gen=details.file_gen,
            ),
        )
        cross_details = BuildDetails(
            meta=GenerativeInput(host_set),
            vis=details.vis,
            target=details.target,
            optimize=details.optimize,
            strip=details.strip,
            file_gen=details.file_gen,
            tests=details.tests,
        )
        return UnitSet.init(
            build_ctx, defaults.name, loaded.manifest, loaded.packages, cross_details
        )
    except (UnitGraphError, OSError, ValueError) as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(1)


@main.command()
@_manifest_options
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["text", "json", "mermaid"]),
    default="text",
    help="Output format (default: text).",
)
def resolve(*, manifest_path: Path, output_format: str, **options: object) -> None:
    """Resolve MANIFEST into a unit graph and print it."""
    from unitgraph.graph.render import format_json, format_mermaid, format_text

    unit_set = _resolve(manifest_path, **options)  # type: ignore[arg-type]
    formatters = {
        "text": format_text,
        "json": format_json,
        "mermaid": format_mermaid,
    }
    click.echo(formatters[output_format](unit_set))


@main.command()
@_manifest_options
def units(*, manifest_path: Path, **options: object) -> None:
    """Show a table of every unit in MANIFEST's graph."""
    from rich.console import Console
    from rich.table import Table

    unit_set = _resolve(manifest_path, **options)  # type: ignore[arg-type]

    table = Table(title=f"{unit_set.name} ({unit_set.target.triple})")
    table.add_column("unit", style="cyan")
    table.add_column("kind")
    table.add_column("dependencies")
    for unit in unit_set.units.values():
        table.add_row(unit.name, unit.kind.value, ", ".join(unit.dependencies))

    console = Console()
    console.print(table)
    console.print(
        f"  Units: [bold]{len(unit_set.units)}[/]   "
        f"Tests: [bold]{len(unit_set.tests)}[/]   "
        f"Files: [bold]{len(unit_set.files)}[/]"
    )


@main.command()
@_manifest_options
def steps(*, manifest_path: Path, **options: object) -> None:
    """Dump every declared build step of MANIFEST's graph as JSON."""
    unit_set = _resolve(manifest_path, **options)  # type: ignore[arg-type]
    click.echo(json.dumps(unit_set.ctx.to_dict(), ensure_ascii=False, indent=2, default=str))
