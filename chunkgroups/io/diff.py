"""
Dry-run comparison of freshly suggested groups against a previous output.
"""

import io
import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Union

from rich.console import Console

from chunkgroups.core.models import ChunkGroup, group_from_dict
from chunkgroups.core.naming import format_size
from chunkgroups.io.reports import parse_existing_config

logger = logging.getLogger(__name__)

# Size changes at or below this many bytes are noise
SIZE_CHANGE_THRESHOLD = 1024


@dataclass
class GroupChange:
    name: str
    before: ChunkGroup
    after: ChunkGroup
    changes: List[str]


@dataclass
class DiffResult:
    added: List[ChunkGroup] = field(default_factory=list)
    removed: List[ChunkGroup] = field(default_factory=list)
    modified: List[GroupChange] = field(default_factory=list)
    unchanged: List[ChunkGroup] = field(default_factory=list)

    @property
    def has_changes(self) -> bool:
        return bool(self.added or self.removed or self.modified)


def _group_changes(before: ChunkGroup, after: ChunkGroup) -> List[str]:
    changes = []

    before_patterns = set(before.patterns)
    after_patterns = set(after.patterns)
    added = [pattern for pattern in after.patterns if pattern not in before_patterns]
    removed = [pattern for pattern in before.patterns if pattern not in after_patterns]

    if added:
        changes.append(f"+patterns: {', '.join(added)}")
    if removed:
        changes.append(f"-patterns: {', '.join(removed)}")

    # Groups read back from config code carry no sizes
    if before.estimated_size > 0 and after.estimated_size > 0:
        size_diff = after.estimated_size - before.estimated_size
        if abs(size_diff) > SIZE_CHANGE_THRESHOLD:
            sign = "+" if size_diff > 0 else ""
            changes.append(f"size: {sign}{format_size(size_diff)}")

    return changes


def calculate_diff(before: List[ChunkGroup], after: List[ChunkGroup]) -> DiffResult:
    """
    Compare two group lists by group name.

    Args:
        before: Groups from the previous output
        after: Freshly suggested groups

    Returns:
        Added, removed, modified and unchanged groups
    """
    before_map = {group.name: group for group in before}
    after_map = {group.name: group for group in after}
    result = DiffResult()

    result.added = [group for name, group in after_map.items() if name not in before_map]
    result.removed = [group for name, group in before_map.items() if name not in after_map]

    for name, before_group in before_map.items():
        after_group = after_map.get(name)
        if after_group is None:
            continue
        changes = _group_changes(before_group, after_group)
        if changes:
            result.modified.append(GroupChange(name, before_group, after_group, changes))
        else:
            result.unchanged.append(after_group)

    return result


def render_diff(diff: DiffResult, console: Console) -> None:
    console.print()
    console.print("[bold cyan]Dry-run Analysis Results[/bold cyan]")
    console.print("-" * 50, style="dim")
    console.print()

    if not diff.has_changes:
        console.print("No changes detected. Config is up to date.", style="green")
        console.print()
        return

    console.print("[bold]Changes detected:[/bold]")
    console.print()

    for group in diff.added:
        size_info = f" ({format_size(group.estimated_size)})" if group.estimated_size > 0 else ""
        console.print(
            f"  + {group.name}{size_info} - {group.reason or 'New group'}",
            style="green",
            markup=False,
            highlight=False,
        )
        if group.patterns:
            preview = ", ".join(group.patterns[:3])
            more = ", ..." if len(group.patterns) > 3 else ""
            console.print(f"      patterns: [{preview}{more}]", style="dim", markup=False, highlight=False)

    for group in diff.removed:
        console.print(f"  - {group.name} - Group removed", style="red", markup=False, highlight=False)

    for change in diff.modified:
        size_info = f" ({format_size(change.after.estimated_size)})" if change.after.estimated_size > 0 else ""
        console.print(f"  ~ {change.name}{size_info}", style="yellow", markup=False, highlight=False)
        for line in change.changes:
            console.print(f"      {line}", style="dim", markup=False, highlight=False)

    console.print()
    console.print("[bold]Summary:[/bold]")
    console.print(f"  Added:     [green]{len(diff.added)}[/green] groups")
    console.print(f"  Modified:  [yellow]{len(diff.modified)}[/yellow] groups")
    console.print(f"  Removed:   [red]{len(diff.removed)}[/red] groups")
    console.print(f"  Unchanged: [dim]{len(diff.unchanged)}[/dim] groups")
    console.print()
    console.print("Run without --dry-run to apply changes.", style="dim")
    console.print()


def format_diff(diff: DiffResult, width: int = 120) -> str:
    """Render a diff to a plain string."""
    console = Console(file=io.StringIO(), record=True, width=width, color_system=None)
    render_diff(diff, console)
    return console.export_text()


def load_previous_groups(path: Union[str, Path]) -> Optional[List[ChunkGroup]]:
    """
    Load the groups of a previous run's output file.

    JSON reports keep full group data; generated config code only keeps names
    and patterns. Returns None when the file is missing or unreadable.
    """
    output = Path(path)
    if output.suffix != ".json":
        return parse_existing_config(output)

    if not output.is_file():
        return None

    try:
        data = json.loads(output.read_text(encoding="utf-8"))
        return [group_from_dict(entry) for entry in data.get("suggested_groups", [])]
    except (OSError, ValueError, KeyError, AttributeError, TypeError) as e:
        logger.warning(f"Cannot read previous report {output}: {e}")
        return None
