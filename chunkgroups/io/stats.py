"""
Loading of rollup-plugin-visualizer ``stats.json`` payloads.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, Union

from chunkgroups.core.graph import DependencyGraph, build_dependency_graph, build_graph_from_tree
from chunkgroups.core.errors import StatsParseError

logger = logging.getLogger(__name__)


def parse_stats(text: str, source: str = "<string>") -> Dict[str, Any]:
    """
    Parse a stats payload from JSON text.

    Args:
        text: Raw JSON
        source: Label used in error messages

    Returns:
        Parsed payload

    Raises:
        StatsParseError: If the text is not a JSON object
    """
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise StatsParseError(
            source,
            "invalid JSON; generate stats with the visualizer's json output enabled",
            {"line": e.lineno, "column": e.colno},
        ) from e

    if not isinstance(data, dict):
        raise StatsParseError(source, f"expected a JSON object, got {type(data).__name__}")

    if not is_v2_stats(data) and not isinstance(data.get("tree"), dict):
        raise StatsParseError(source, "payload has neither nodeMetas/nodeParts nor a tree")

    return data


def load_stats(path: Union[str, Path]) -> Dict[str, Any]:
    """Read and parse a stats file."""
    stats_file = Path(path)
    try:
        text = stats_file.read_text(encoding="utf-8")
    except OSError as e:
        raise StatsParseError(str(path), f"cannot read file: {e}") from e

    stats = parse_stats(text, source=str(path))
    logger.debug(f"Loaded {'v2' if is_v2_stats(stats) else 'tree'} stats from {path}")
    return stats


def is_v2_stats(stats: Dict[str, Any]) -> bool:
    """Whether the payload uses the v2 schema with per-module import data."""
    return (
        stats.get("version") == 2
        and isinstance(stats.get("nodeParts"), dict)
        and isinstance(stats.get("nodeMetas"), dict)
    )


def build_graph(stats: Dict[str, Any]) -> DependencyGraph:
    """Build the package graph using the builder that fits the payload schema."""
    if is_v2_stats(stats):
        return build_dependency_graph(stats)
    return build_graph_from_tree(stats)
