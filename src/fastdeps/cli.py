"""CLI entrypoint for fastdeps."""

from __future__ import annotations

import asyncio
import dataclasses
import json
import sys
from enum import Enum
from pathlib import Path
from typing import Any

import click
import yaml

from fastdeps import __version__
from fastdeps.analyzer import DependencyAnalyzer
from fastdeps.config.loader import load_config
from fastdeps.config.modes import mode_overrides, resolve_modes
from fastdeps.config.schema import RangeOrder
from fastdeps.discovery.edges_file import load_edges
from fastdeps.errors import AnalyzerError
from fastdeps.utils.logger import setup_logging


@click.group()
@click.version_option(__version__, prog_name="fastdeps")
@click.option("--debug", is_flag=True, help="Enable debug logging")
@click.option("--json-logs", is_flag=True, help="Emit logs as JSON lines")
def main(debug: bool, json_logs: bool) -> None:
    """fastdeps - dependency tables and change-impact analysis."""
    setup_logging(debug=debug, json_output=json_logs)


def _graph_options(fn: Any) -> Any:
    options = [
        click.option("--config", "config_path", type=click.Path(dir_okay=False), default=None,
                     help="Config file (default: nearest fastdeps.yaml)"),
        click.option("--context", type=click.Path(file_okay=False), default=None,
                     help="Project root that node ids are relative to"),
        click.option("--entry", "entries", multiple=True, help="Entry file (repeatable)"),
        click.option("--tree/--no-tree", default=None, help="Build a nested dependency tree"),
        click.option("--reverse/--no-reverse", default=None, help="Key the table by dependency"),
        click.option("--relative/--absolute", "relative_path", default=None,
                     help="Emit ids relative to the context"),
    ]
    for option in reversed(options):
        fn = option(fn)
    return fn


def _overrides(
    context: str | None,
    entries: tuple[str, ...],
    tree: bool | None,
    reverse: bool | None,
    relative_path: bool | None,
) -> dict[str, Any]:
    overrides: dict[str, Any] = {}
    if context:
        overrides["context"] = str(Path(context).resolve())
    if entries:
        overrides["entry"] = list(entries)
    if tree is not None:
        overrides["tree"] = tree
    if reverse is not None:
        overrides["reverse"] = reverse
    if relative_path is not None:
        overrides["relative_path"] = relative_path
    return overrides


def _fail(exc: AnalyzerError) -> None:
    click.echo(f"Error: {exc}", err=True)
    sys.exit(1)


@main.command()
@click.argument("edges", type=click.Path(exists=True, dir_okay=False))
@_graph_options
@click.option("--output", "-o", default=None, help="Dependency table output path")
def run(
    edges: str,
    config_path: str | None,
    context: str | None,
    entries: tuple[str, ...],
    tree: bool | None,
    reverse: bool | None,
    relative_path: bool | None,
    output: str | None,
) -> None:
    """Build the dependency table from EDGES and write all configured outputs."""
    overrides = _overrides(context, entries, tree, reverse, relative_path)
    if output:
        overrides["output"] = {"dependencies": output}
    try:
        config = load_config(config_path, overrides=overrides)
        analyzer = DependencyAnalyzer(config)
        result = asyncio.run(analyzer.run(load_edges(edges)))
    except AnalyzerError as exc:
        _fail(exc)
        return

    graph = result.graph
    click.echo(f"{graph.mode} graph: {graph.nodes} node(s), {graph.edges} edge(s)")
    for name in result.written:
        click.echo(f"  wrote {name}")
    if result.report is not None:
        click.echo(f"  {len(result.report.impacted)} impacted target(s)")


@main.command()
@click.argument("edges", type=click.Path(exists=True, dir_okay=False))
@_graph_options
@click.option("--commit", "commits", multiple=True,
              help="Commit id; once for a single commit, twice for a range (default: HEAD)")
@click.option("--target", "targets", multiple=True,
              help="Target pattern, glob or 'entry' (repeatable, first match wins)")
@click.option("--range-order", type=click.Choice([o.value for o in RangeOrder]), default=None,
              help="How two --commit values map to base/head")
@click.option("--output", "-o", default=None, help="Also write the impact report to this path")
@click.option("--json", "as_json", is_flag=True, help="Print the full report as JSON")
def impact(
    edges: str,
    config_path: str | None,
    context: str | None,
    entries: tuple[str, ...],
    tree: bool | None,
    reverse: bool | None,
    relative_path: bool | None,
    commits: tuple[str, ...],
    targets: tuple[str, ...],
    range_order: str | None,
    output: str | None,
    as_json: bool,
) -> None:
    """List the targets affected by the files changed in a commit range."""
    overrides = _overrides(context, entries, tree, reverse, relative_path)
    git_info: dict[str, Any] = {"enable": True}
    if commits:
        git_info["commit_range"] = list(commits)
    if targets:
        git_info["target_files"] = list(targets)
    if range_order:
        git_info["range_order"] = range_order
    overrides["analyze_git_info"] = git_info
    overrides["output"] = {"dependencies": None, "analyze_git_result": output}
    try:
        config = load_config(config_path, overrides=overrides)
        analyzer = DependencyAnalyzer(config)
        result = asyncio.run(analyzer.run(load_edges(edges)))
    except AnalyzerError as exc:
        _fail(exc)
        return

    report = result.report
    if report is None:
        return
    if as_json:
        click.echo(json.dumps(report.to_detailed_dict(), indent=2))
        return
    for node in report.impacted:
        click.echo(node)


@main.command("config")
@_graph_options
def show_config(
    config_path: str | None,
    context: str | None,
    entries: tuple[str, ...],
    tree: bool | None,
    reverse: bool | None,
    relative_path: bool | None,
) -> None:
    """Print the effective configuration after mode precedence."""
    overrides = _overrides(context, entries, tree, reverse, relative_path)
    try:
        requested = load_config(config_path, overrides=overrides, resolve=False)
    except AnalyzerError as exc:
        _fail(exc)
        return
    effective = resolve_modes(requested)
    click.echo(yaml.safe_dump(_plain(effective), sort_keys=False).rstrip())
    for name, (before, after) in mode_overrides(requested, effective).items():
        click.echo(f"# override: {name} {before} -> {after}")


def _plain(value: Any) -> Any:
    if dataclasses.is_dataclass(value):
        return {f.name: _plain(getattr(value, f.name)) for f in dataclasses.fields(value)}
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, dict):
        return {str(k): _plain(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_plain(v) for v in value]
    if callable(value):
        return f"<handler {getattr(value, '__name__', type(value).__name__)}>"
    return value


if __name__ == "__main__":
    main()
