"""
Command-line interface for chunkgroups.
"""

import logging
import sys
from pathlib import Path
from typing import Any, Dict, Optional

import click
import yaml
from rich.console import Console

from chunkgroups import __version__
from chunkgroups.core.budget import check_budgets
from chunkgroups.core.config import (
    KB,
    AnalyzerConfig,
    get_default_config,
    load_config,
    save_config,
)
from chunkgroups.core.errors import ChunkGroupsError
from chunkgroups.core.frameworks import detect_framework, preset_config
from chunkgroups.core.naming import format_size
from chunkgroups.core.pipeline import analyze, analyze_packages
from chunkgroups.io.diff import calculate_diff, load_previous_groups, render_diff
from chunkgroups.io.ignore import load_ignore_patterns
from chunkgroups.io.reports import (
    create_analysis_result,
    format_json_report,
    format_text_report,
    generate_config_code,
    render_budget_report,
    render_text_report,
)
from chunkgroups.io.stats import build_graph, is_v2_stats, load_stats

console = Console()
logger = logging.getLogger(__name__)

DEFAULT_CONFIG_OUTPUT = "chunk-groups.config.ts"


@click.group()
@click.version_option(version=__version__)
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging")
@click.pass_context
def main(ctx: click.Context, verbose: bool) -> None:
    """chunkgroups - Suggest cache-friendly vendor chunk groups from bundle stats."""
    ctx.ensure_object(dict)

    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )

    ctx.obj["verbose"] = verbose


def _apply_overrides(config: AnalyzerConfig, **overrides: Any) -> AnalyzerConfig:
    """Return a validated copy of ``config`` with CLI overrides applied."""
    data = config.model_dump()
    budget = data["budget"]

    if overrides["threshold"] is not None:
        data["large_package_threshold"] = int(overrides["threshold"] * KB)
    if overrides["initial_chunk_max_size"] is not None:
        data["initial_chunk_max_size"] = overrides["initial_chunk_max_size"]

    data["ignore"] = load_ignore_patterns([*config.ignore, *overrides["ignore"]])

    for field_name, option in (
        ("total_size", "budget_total"),
        ("gzip_size", "budget_gzip"),
        ("brotli_size", "budget_brotli"),
        ("chunk_size", "budget_chunk"),
    ):
        if overrides[option] is not None:
            budget[field_name] = overrides[option]
    if overrides["fail_on_budget"]:
        budget["fail_on_exceed"] = True

    try:
        return AnalyzerConfig.model_validate(data)
    except ValueError as e:
        raise ChunkGroupsError(f"Invalid option: {e}") from e


@main.command("analyze")
@click.argument("stats", type=click.Path(exists=True, dir_okay=False))
@click.option("--config", "-c", type=click.Path(exists=True), help="Configuration file")
@click.option("--output", "-o", type=click.Path(), help="Write output to this file instead of stdout")
@click.option("--format", "output_format", type=click.Choice(["text", "json", "config"]), default="text", help="Output format")
@click.option("--threshold", type=float, default=None, help="Large package threshold in KB")
@click.option("--initial-chunk-max-size", type=click.IntRange(min=1), default=None, help="Default preserved chunk budget in gzipped bytes")
@click.option("--ignore", multiple=True, help="Ignore packages matching pattern (repeatable)")
@click.option("--budget-total", type=float, default=None, help="Total size budget in KB")
@click.option("--budget-gzip", type=float, default=None, help="Gzipped size budget in KB")
@click.option("--budget-brotli", type=float, default=None, help="Brotli size budget in KB")
@click.option("--budget-chunk", type=float, default=None, help="Per-chunk size budget in KB")
@click.option("--fail-on-budget", is_flag=True, help="Exit with code 1 when a budget is exceeded")
@click.option("--dry-run", is_flag=True, help="Show changes against the previous output without writing")
@click.option("--quiet", "-q", is_flag=True, help="Only print results and errors")
@click.pass_context
def analyze_command(
    ctx: click.Context,
    stats: str,
    config: Optional[str],
    output: Optional[str],
    output_format: str,
    quiet: bool,
    dry_run: bool,
    **overrides: Any,
) -> None:
    """Analyze a visualizer stats.json and suggest chunk groups."""
    if quiet:
        logging.getLogger().setLevel(logging.WARNING)

    try:
        base_config = load_config(config) if config else get_default_config()
        analyzer_config = _apply_overrides(base_config, **overrides)

        if not quiet:
            console.print(f"Reading: {stats}", style="dim", markup=False)

        payload = load_stats(stats)
        graph = build_graph(payload)
        if is_v2_stats(payload):
            outcome = analyze(graph, analyzer_config)
        else:
            if not quiet:
                console.print("Legacy stats without import data; graph clustering skipped", style="yellow")
            outcome = analyze_packages(graph, analyzer_config)

        budget_report = None
        if analyzer_config.budget.enabled:
            budget_report = check_budgets(outcome.groups, analyzer_config.budget)

        result = create_analysis_result(outcome, budget_report)

        if dry_run:
            previous_path = output or DEFAULT_CONFIG_OUTPUT
            previous = load_previous_groups(previous_path)
            if previous is None:
                console.print(f"No existing output at {previous_path}; every group is new", style="dim", markup=False)
                previous = []
            render_diff(calculate_diff(previous, outcome.groups), console)
            if budget_report is not None:
                render_budget_report(budget_report, console)
            return

        _write_output(result, output_format, output, quiet)

        if budget_report is not None:
            if output or output_format != "text":
                render_budget_report(budget_report, console)
            if not budget_report.passed and analyzer_config.budget.fail_on_exceed:
                console.print("❌ Budget exceeded", style="red")
                sys.exit(1)

    except ChunkGroupsError as e:
        console.print(f"\n❌ Analysis failed: {e}", style="red", markup=False)
        if ctx.obj["verbose"]:
            console.print_exception()
        sys.exit(1)


def _write_output(result, output_format: str, output: Optional[str], quiet: bool) -> None:
    """Render the result in the chosen format to a file or stdout."""
    if output_format == "json":
        rendered = format_json_report(result)
    elif output_format == "config":
        rendered = generate_config_code(result.suggested_groups, result.generated_at)
    elif output:
        rendered = format_text_report(result)
    else:
        render_text_report(result, console)
        return

    if not output:
        click.echo(rendered)
        return

    out_path = Path(output)
    try:
        out_path.parent.mkdir(parents=True, exist_ok=True)
        out_path.write_text(rendered, encoding="utf-8")
    except OSError as e:
        raise ChunkGroupsError(f"Failed to write output: {e}", {"path": output}) from e

    if not quiet:
        console.print(f"✅ Output saved to {out_path}", markup=False)


@main.command("init")
@click.argument("stats", type=click.Path(exists=True, dir_okay=False))
@click.option("--output", "-o", default="chunks-config.yml", help="Output configuration file")
def init_command(stats: str, output: str) -> None:
    """Create a starter configuration for the framework found in STATS."""
    try:
        graph = build_graph(load_stats(stats))
        framework = detect_framework(graph.names)
        config = preset_config(framework)
        save_config(config, output)
    except ChunkGroupsError as e:
        console.print(f"❌ Failed to create configuration: {e}", style="red", markup=False)
        sys.exit(1)

    console.print(f"🔎 Detected framework: {framework.display_name}")
    for chunk in config.preserved_chunks:
        console.print(
            f"   Preserved chunk '{chunk.name}': {len(chunk.patterns)} patterns, "
            f"max {format_size(chunk.max_size or config.initial_chunk_max_size)} gzipped, "
            f"{chunk.split_strategy} split",
            markup=False,
        )
    console.print(f"✅ Configuration saved to {output}", markup=False)
    console.print("Edit this file to customize your chunk groups.")


@main.command("print-default-config")
def print_default_config() -> None:
    """Print default configuration to stdout."""
    config_dict: Dict[str, Any] = get_default_config().model_dump(by_alias=True)
    yaml_output = yaml.safe_dump(config_dict, default_flow_style=False, sort_keys=True)

    click.echo("# Default chunkgroups configuration")
    click.echo(yaml_output)


@main.command("validate-config")
@click.option("--config", "-c", type=click.Path(exists=True), required=True, help="Configuration file")
def validate_config(config: str) -> None:
    """Validate a configuration file."""
    try:
        analyzer_config = load_config(config)
    except ChunkGroupsError as e:
        console.print(f"❌ Configuration validation failed: {e}", style="red", markup=False)
        sys.exit(1)

    console.print(f"✅ Configuration file {config} is valid", markup=False)

    console.print("\n📋 Configuration Summary:")
    console.print(f"Large package threshold: {format_size(analyzer_config.large_package_threshold)}")
    console.print(f"Initial chunk max size: {format_size(analyzer_config.initial_chunk_max_size)}")
    console.print(f"Preserved chunks: {len(analyzer_config.preserved_chunks)} configured")
    console.print(f"Custom groups: {len(analyzer_config.custom_groups)} configured")
    console.print(f"Ignore patterns: {len(analyzer_config.ignore)}")
    console.print(f"Budgets: {'enabled' if analyzer_config.budget.enabled else 'disabled'}")


if __name__ == "__main__":
    main()
