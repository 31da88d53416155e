"""
Report rendering: rich text report, JSON report, and bundler config code.
"""

import io
import json
import logging
import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from rich.console import Console
from rich.table import Table

from chunkgroups.core.budget import BudgetReport, BudgetSeverity
from chunkgroups.core.frameworks import Framework
from chunkgroups.core.models import ChunkGroup, Diagnostic
from chunkgroups.core.naming import format_size
from chunkgroups.core.pipeline import AnalysisOutcome

logger = logging.getLogger(__name__)

TOP_PACKAGES = 15

_SIZE_SUFFIX_RE = re.compile(r"\s*\([^)]*[KMG]?B\)\s*$")
_CHUNK_GROUPS_RE = re.compile(r"export const CHUNK_GROUPS[^=]*=\s*\[([\s\S]*?)\];")
_OBJECT_RE = re.compile(r"\{([^{}]*(?:\{[^{}]*\}[^{}]*)*)\}")
_NAME_RE = re.compile(r"name:\s*['\"]([^'\"]+)['\"]")
_PATTERNS_RE = re.compile(r"patterns:\s*\[([\s\S]*?)\](?:\s*,|\s*$)")
_QUOTED_RE = re.compile(r"['\"]([^'\"]+)['\"]")

MANUAL_CHUNKS_CODE = """\
export function createManualChunks(groups: ChunkGroup[] = CHUNK_GROUPS) {
  const includesAny = (id: string, patterns: string[]): boolean =>
    patterns.some((pattern) => id.includes(`node_modules/${pattern}`));

  return (id: string): string | undefined => {
    if (!id.includes('node_modules')) return;

    const matchedGroup = groups.find((group) => includesAny(id, group.patterns));
    if (matchedGroup) return matchedGroup.name;

    const match = id.match(/node_modules\\/((?:@[^/]+\\/)?[^/]+)/);
    return match ? `vendor/${match[1]}` : undefined;
  };
}"""


@dataclass
class PackageSummary:
    name: str
    total_size: int
    gzip_size: int
    brotli_size: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "total_size": self.total_size,
            "gzip_size": self.gzip_size,
            "brotli_size": self.brotli_size,
        }


@dataclass
class AnalysisSummary:
    total_size: int
    total_gzip_size: int
    total_brotli_size: int
    package_count: int
    group_count: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total_size": self.total_size,
            "total_gzip_size": self.total_gzip_size,
            "total_brotli_size": self.total_brotli_size,
            "package_count": self.package_count,
            "group_count": self.group_count,
        }


@dataclass
class AnalysisResult:
    """Everything a report renders, detached from the graph."""

    packages: List[PackageSummary]
    suggested_groups: List[ChunkGroup]
    summary: AnalysisSummary
    generated_at: str
    framework: Framework = Framework.UNKNOWN
    warnings: List[Diagnostic] = field(default_factory=list)
    ignored: List[str] = field(default_factory=list)
    budget: Optional[BudgetReport] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "generated_at": self.generated_at,
            "framework": self.framework.value,
            "summary": self.summary.to_dict(),
            "packages": [package.to_dict() for package in self.packages],
            "suggested_groups": [group.to_dict() for group in self.suggested_groups],
            "warnings": [warning.to_dict() for warning in self.warnings],
            "ignored": list(self.ignored),
        }
        if self.budget is not None:
            data["budget"] = self.budget.to_dict()
        return data


def create_analysis_result(
    outcome: AnalysisOutcome,
    budget: Optional[BudgetReport] = None,
    generated_at: Optional[str] = None,
) -> AnalysisResult:
    """
    Summarize a pipeline outcome for reporting.

    Args:
        outcome: Pipeline outcome
        budget: Budget report to include, if budgets were checked
        generated_at: ISO timestamp; defaults to now (UTC)

    Returns:
        Analysis result with packages sorted by descending size
    """
    nodes = sorted(outcome.graph.packages.values(), key=lambda node: node.total_size, reverse=True)
    packages = [
        PackageSummary(node.name, node.total_size, node.gzip_size, node.brotli_size) for node in nodes
    ]
    totals = outcome.graph.total_sizes()

    return AnalysisResult(
        packages=packages,
        suggested_groups=list(outcome.groups),
        summary=AnalysisSummary(
            total_size=totals.total_size,
            total_gzip_size=totals.gzip_size,
            total_brotli_size=totals.brotli_size,
            package_count=len(packages),
            group_count=len(outcome.groups),
        ),
        generated_at=generated_at or datetime.now(timezone.utc).isoformat(),
        framework=outcome.framework,
        warnings=outcome.warnings,
        ignored=list(outcome.ignored),
        budget=budget,
    )


def strip_size_from_reason(reason: str) -> str:
    """Drop a trailing size label such as ``(385.8KB)`` from a reason."""
    return _SIZE_SUFFIX_RE.sub("", reason).strip()


def format_size_with_compression(raw: int, gzip: int, brotli: int) -> str:
    parts = []
    if gzip > 0:
        parts.append(f"gzip: {format_size(gzip)}")
    if brotli > 0:
        parts.append(f"brotli: {format_size(brotli)}")
    if not parts:
        return format_size(raw)
    return f"{format_size(raw)} -> {' / '.join(parts)}"


def _config_size_comment(group: ChunkGroup) -> str:
    compressed = []
    if group.gzip_size > 0:
        compressed.append(f"gzip: {format_size(group.gzip_size)}")
    if group.brotli_size > 0:
        compressed.append(f"brotli: {format_size(group.brotli_size)}")
    comment = f"({format_size(group.estimated_size)})"
    if compressed:
        comment += f" ({', '.join(compressed)})"
    return comment


def _pattern_lines(patterns: List[str]) -> List[str]:
    if len(patterns) <= 3:
        quoted = ", ".join(f"'{pattern}'" for pattern in patterns)
        return [f"    patterns: [{quoted}],"]
    return ["    patterns: ["] + [f"      '{pattern}'," for pattern in patterns] + ["    ],"]


def _chunk_group_lines(groups: List[ChunkGroup]) -> List[str]:
    lines = []
    for group in groups:
        lines.append(f"  // {strip_size_from_reason(group.reason)} {_config_size_comment(group)}")
        lines.append("  {")
        lines.append(f"    name: '{group.name}',")
        lines.extend(_pattern_lines(group.patterns))
        lines.append("  },")
    return lines


def generate_config_code(groups: List[ChunkGroup], generated_at: Optional[str] = None) -> str:
    """
    Render groups as a TypeScript module for a bundler ``manualChunks`` setup.

    The module exports a ``ChunkGroup`` type, the ``CHUNK_GROUPS`` array and a
    ``createManualChunks`` helper.
    """
    timestamp = generated_at or datetime.now(timezone.utc).isoformat()
    lines = [
        "// Auto-generated by chunkgroups",
        f"// Generated at: {timestamp}",
        "",
        "export type ChunkGroup = { name: string; patterns: string[] };",
        "",
        "export const CHUNK_GROUPS: ChunkGroup[] = [",
    ]
    lines.extend(_chunk_group_lines(groups))
    lines.append("];")
    lines.append("")
    lines.append(MANUAL_CHUNKS_CODE)
    lines.append("")
    return "\n".join(lines)


def format_json_report(result: AnalysisResult) -> str:
    return json.dumps(result.to_dict(), indent=2)


def render_text_report(result: AnalysisResult, console: Console) -> None:
    """Print the human-readable report to a rich console."""
    summary = result.summary
    rule = "-" * 60

    console.print()
    console.rule("[bold cyan]Bundle Chunk Analysis Report")
    console.print()

    console.print("[bold]Summary[/bold]")
    console.print(rule, style="dim")
    sizes = format_size_with_compression(
        summary.total_size, summary.total_gzip_size, summary.total_brotli_size
    )
    console.print(f"  Total size:     {sizes}", highlight=False)
    console.print(f"  Packages:       [yellow]{summary.package_count}[/yellow]")
    console.print(f"  Chunk groups:   [yellow]{summary.group_count}[/yellow]")
    console.print(f"  Framework:      {result.framework.display_name}")
    if result.ignored:
        console.print(f"  Ignored:        {len(result.ignored)} packages")
    console.print()

    table = Table(title=f"Top {TOP_PACKAGES} Largest Packages", show_header=True, header_style="bold magenta")
    table.add_column("#", justify="right", style="dim")
    table.add_column("Package", style="cyan")
    table.add_column("Size", justify="right", style="yellow")
    table.add_column("Gzip", justify="right")
    table.add_column("Brotli", justify="right")
    table.add_column("Share", style="green")

    for rank, package in enumerate(result.packages[:TOP_PACKAGES], start=1):
        share = package.total_size / summary.total_size if summary.total_size else 0.0
        table.add_row(
            str(rank),
            package.name,
            format_size(package.total_size),
            format_size(package.gzip_size) if package.gzip_size else "-",
            format_size(package.brotli_size) if package.brotli_size else "-",
            "#" * max(1, round(share * 30)) if share else "",
        )
    console.print(table)
    console.print()

    console.print("[bold]Suggested CHUNK_GROUPS[/bold]")
    console.print(rule, style="dim")
    console.print("// vite.config.ts", style="dim", markup=False)
    code = "\n".join(["const CHUNK_GROUPS = ["] + _chunk_group_lines(result.suggested_groups) + ["];"])
    console.print(code, markup=False, highlight=False)
    console.print()
    console.print("// manualChunks helper", style="dim", markup=False)
    console.print(MANUAL_CHUNKS_CODE, style="dim", markup=False, highlight=False)
    console.print()

    if result.warnings:
        console.print("[bold yellow]Warnings[/bold yellow]")
        console.print(rule, style="dim")
        for warning in result.warnings:
            console.print(f"  [{warning.stage}] {warning.message}", style="yellow", markup=False)
        console.print()

    if result.budget is not None:
        render_budget_report(result.budget, console)

    console.print("[bold yellow]Notes[/bold yellow]")
    console.print(rule, style="dim")
    console.print("  * Do not combine splitVendorChunkPlugin() with manualChunks.")
    console.print("  * Keep framework core groups together to preserve module init order.")
    console.print("  * These groups are generated suggestions; adjust them to your project.")
    console.print()


_SEVERITY_STYLES = {
    BudgetSeverity.OK: "green",
    BudgetSeverity.WARNING: "yellow",
    BudgetSeverity.ERROR: "red",
}


def render_budget_report(report: BudgetReport, console: Console) -> None:
    table = Table(title="Size Budgets", show_header=True, header_style="bold magenta")
    table.add_column("Budget")
    table.add_column("Actual", justify="right")
    table.add_column("Limit", justify="right")
    table.add_column("Usage", justify="right")
    table.add_column("Status")

    for violation in report.violations:
        label = violation.type if violation.target is None else f"{violation.type}: {violation.target}"
        style = _SEVERITY_STYLES[violation.severity]
        table.add_row(
            label,
            format_size(violation.actual),
            format_size(violation.budget),
            f"{violation.percentage:.0%}",
            f"[{style}]{violation.severity.value}[/{style}]",
        )

    console.print(table)
    style = "green" if report.passed else "bold red"
    console.print(report.summary, style=style)
    console.print()


def format_text_report(result: AnalysisResult, width: int = 120) -> str:
    """Render the text report to a plain string."""
    console = Console(file=io.StringIO(), record=True, width=width, color_system=None)
    render_text_report(result, console)
    return console.export_text()


def parse_chunk_groups(content: str) -> Optional[List[ChunkGroup]]:
    """
    Extract ``CHUNK_GROUPS`` entries from generated config code.

    Sizes are not recoverable from the code and come back as zero.

    Returns:
        Parsed groups, or None when no ``CHUNK_GROUPS`` export is present
    """
    array_match = _CHUNK_GROUPS_RE.search(content)
    if not array_match:
        return None

    groups = []
    for object_match in _OBJECT_RE.finditer(array_match.group(1)):
        body = object_match.group(1)
        name_match = _NAME_RE.search(body)
        patterns_match = _PATTERNS_RE.search(body)
        if not name_match or not patterns_match:
            continue
        groups.append(
            ChunkGroup(
                name=name_match.group(1),
                patterns=_QUOTED_RE.findall(patterns_match.group(1)),
                estimated_size=0,
                gzip_size=0,
                brotli_size=0,
                reason="",
            )
        )
    return groups


def parse_existing_config(config_path: Union[str, Path]) -> Optional[List[ChunkGroup]]:
    """Read groups from a previously generated config file, if it exists."""
    path = Path(config_path)
    if not path.is_file():
        return None
    try:
        content = path.read_text(encoding="utf-8")
    except OSError as e:
        logger.warning(f"Cannot read existing config {path}: {e}")
        return None
    return parse_chunk_groups(content)
