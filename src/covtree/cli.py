"""covtree CLI - inspect, compare, split and combine coverage trees.

Trees are read from covtree tree documents (JSON or YAML, see
covtree.documents). Results go to stdout: tables through the rich
console, documents and --json output as plain JSON.
"""

import json
import logging
from pathlib import Path

import click
from babel.numbers import format_percent
from rich.console import Console
from rich.table import Table

from covtree import __version__
from covtree.combine import combine_all
from covtree.config import (
    ConfigLoadError,
    ConfigValidationError,
    CovtreeConfig,
    generate_config_template,
    get_config,
    get_global_config_path,
)
from covtree.documents import dump_tree, load_tree
from covtree.errors import DocumentError, UnknownMetricError
from covtree.models import CoverageMetric, CoverageNode

console = Console()

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


def _get_config(ctx: click.Context) -> CovtreeConfig:
    return ctx.obj["config"]


def _load(path: str) -> CoverageNode:
    """Load a tree document or exit with an error message."""
    try:
        return load_tree(Path(path))
    except DocumentError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise SystemExit(1)


def _format_delta(delta, config: CovtreeConfig) -> str:
    text = format_percent(float(delta), format=config.percentage_pattern, locale=config.locale)
    return f"+{text}" if delta > 0 else text


@click.group()
@click.option(
    "--log-level",
    type=click.Choice(LOG_LEVELS, case_sensitive=False),
    default="WARNING",
    envvar="COVTREE_LOG_LEVEL",
    help="Logging level (default: WARNING)",
)
@click.option(
    "--config", "config_path",
    type=click.Path(dir_okay=False),
    default=None,
    help="Config file (default: ~/.covtree_config.json)",
)
@click.option("--locale", default=None, help="Locale for percentages, e.g. de_DE")
@click.pass_context
def main(ctx: click.Context, log_level: str, config_path: str | None, locale: str | None) -> None:
    """covtree - hierarchical coverage trees.

    Aggregate, compare, split and combine coverage tree documents.
    """
    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        config = get_config(Path(config_path) if config_path else None)
        if locale:
            config.locale = locale
            config.validate()
    except (ConfigLoadError, ConfigValidationError) as e:
        console.print(f"[red]Error:[/red] {e}")
        raise SystemExit(1)

    ctx.ensure_object(dict)
    ctx.obj["config"] = config


@main.command()
def version() -> None:
    """Show version."""
    console.print(f"covtree {__version__}")


@main.command()
@click.argument("tree_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--split-packages", is_flag=True, help="Split dotted package names first")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def summary(ctx: click.Context, tree_file: str, split_packages: bool, as_json: bool) -> None:
    """Show the aggregated coverage of every metric in a tree."""
    config = _get_config(ctx)
    tree = _load(tree_file)
    if split_packages:
        tree.split_packages()

    distribution = tree.get_metrics_distribution()

    if as_json:
        print(json.dumps({
            metric.name: {
                "covered": counter.covered,
                "missed": counter.missed,
                "total": counter.total,
                "percentage": float(counter.percentage),
            }
            for metric, counter in distribution.items()
        }, indent=2))
        return

    table = Table(title=f"Coverage of {tree.name}")
    table.add_column("Metric", style="cyan")
    table.add_column("Covered", justify="right")
    table.add_column("Missed", justify="right")
    table.add_column("Total", justify="right")
    table.add_column("Coverage", justify="right")
    for metric, counter in distribution.items():
        table.add_row(
            metric.display_name,
            str(counter.covered),
            str(counter.missed),
            str(counter.total),
            counter.format_percentage(config.locale, config.percentage_pattern),
        )
    console.print(table)


@main.command()
@click.argument("tree_file", type=click.Path(exists=True, dir_okay=False))
@click.argument("reference_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def delta(ctx: click.Context, tree_file: str, reference_file: str, as_json: bool) -> None:
    """Show the coverage delta of TREE_FILE against REFERENCE_FILE."""
    config = _get_config(ctx)
    tree = _load(tree_file)
    reference = _load(reference_file)

    deltas = tree.compute_delta(reference, limit=config.rational_limit)

    if as_json:
        print(json.dumps({
            metric.name: {
                "delta": str(value),
                "percentage_points": float(value) * 100,
            }
            for metric, value in deltas.items()
        }, indent=2))
        return

    table = Table(title=f"Coverage delta of {tree.name} against {reference.name}")
    table.add_column("Metric", style="cyan")
    table.add_column("Delta", justify="right")
    for metric, value in deltas.items():
        style = "green" if value > 0 else "red" if value < 0 else "dim"
        table.add_row(metric.display_name, f"[{style}]{_format_delta(value, config)}[/{style}]")
    console.print(table)


@main.command()
@click.argument("tree_files", nargs=-1, required=True, type=click.Path(exists=True, dir_okay=False))
@click.option("--output", "-o", type=click.Path(dir_okay=False), help="Write the combined tree here")
@click.pass_context
def combine(ctx: click.Context, tree_files: tuple[str, ...], output: str | None) -> None:
    """Combine two or more module reports into one tree."""
    config = _get_config(ctx)
    if len(tree_files) < 2:
        console.print("[red]Error:[/red] combine needs at least two tree files")
        raise SystemExit(1)

    trees = [_load(path) for path in tree_files]
    result = combine_all(trees, group_name=config.group_name)
    if not result.success:
        console.print(f"[red]Error:[/red] {result.error}")
        raise SystemExit(1)

    if output:
        dump_tree(result.tree, Path(output))
        console.print(f"[green]Combined {len(trees)} reports into[/green] {output}")
    else:
        print(dump_tree(result.tree))


@main.command()
@click.argument("tree_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--output", "-o", type=click.Path(dir_okay=False), help="Write the split tree here")
def split(tree_file: str, output: str | None) -> None:
    """Split dotted package names into a package hierarchy."""
    tree = _load(tree_file)
    tree.split_packages()

    if output:
        dump_tree(tree, Path(output))
        console.print(f"[green]Wrote split tree to[/green] {output}")
    else:
        print(dump_tree(tree))


@main.command()
@click.argument("tree_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--metric", "-m", "metric_name", required=True, help="Metric of the node, e.g. CLASS")
@click.option("--name", "-n", required=True, help="Name of the node")
def find(tree_file: str, metric_name: str, name: str) -> None:
    """Find a node by metric and name and print its path."""
    try:
        metric = CoverageMetric.from_name(metric_name)
    except UnknownMetricError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise SystemExit(1)

    tree = _load(tree_file)
    node = tree.find(metric, name)
    if node is None:
        console.print(f"[red]Error:[/red] No {metric} node named '{name}'")
        raise SystemExit(1)
    print(node.get_path())


@main.group()
def config() -> None:
    """Configuration management."""
    pass


@config.command("show")
@click.pass_context
def config_show(ctx: click.Context) -> None:
    """Show effective configuration (merged from all sources)."""
    print(json.dumps(_get_config(ctx).to_dict(), indent=2))


@config.command("init")
@click.option("--path", "config_path", type=click.Path(dir_okay=False), help="Where to write the config")
@click.option("--force", "-f", is_flag=True, help="Overwrite existing config file")
def config_init(config_path: str | None, force: bool) -> None:
    """Write a config file template (default: ~/.covtree_config.json)."""
    path = Path(config_path) if config_path else get_global_config_path()

    if path.exists() and not force:
        console.print(f"[red]Error:[/red] Config file already exists: {path}")
        console.print("Use --force to overwrite")
        raise SystemExit(1)

    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(generate_config_template(), indent=2))
    console.print(f"[green]Created config file:[/green] {path}")


if __name__ == "__main__":
    main()
