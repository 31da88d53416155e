"""
``.chunkgroupignore`` support: gitignore-style patterns over package names.
"""

import logging
import re
from pathlib import Path
from typing import Iterable, List, Optional, Tuple, Union

import pathspec

logger = logging.getLogger(__name__)

IGNORE_FILE_NAME = ".chunkgroupignore"


def find_ignore_file(cwd: Union[str, Path, None] = None) -> Optional[Path]:
    """Return the ignore file in ``cwd`` (default: current directory), if any."""
    root = Path(cwd) if cwd is not None else Path.cwd()
    candidate = root / IGNORE_FILE_NAME
    return candidate if candidate.is_file() else None


def parse_ignore_file(file_path: Union[str, Path]) -> List[str]:
    """
    Read ignore patterns from a file.

    Blank lines and ``#`` comment lines are skipped, and anything after an
    inline ``#`` is dropped. A missing file yields no patterns.

    Args:
        file_path: Path to the ignore file

    Returns:
        Patterns in file order, negations (``!pattern``) included
    """
    path = Path(file_path)
    if not path.is_file():
        return []

    patterns = []
    for line in path.read_text(encoding="utf-8").splitlines():
        comment_index = line.find("#")
        if comment_index > 0:
            line = line[:comment_index]
        line = line.strip()
        if line and not line.startswith("#"):
            patterns.append(line)

    logger.debug(f"Loaded {len(patterns)} ignore patterns from {path}")
    return patterns


class PackageNamePattern(pathspec.RegexPattern):
    """
    Glob over a whole package name.

    ``*`` and ``?`` stay within one name segment, ``**`` spans segments and a
    leading ``!`` re-includes what earlier patterns excluded. Unlike
    gitwildmatch, ``react`` matches only ``react``: neither ``@emotion/react``
    nor anything below a matched name.
    """

    @classmethod
    def pattern_to_regex(cls, pattern: str) -> Tuple[Optional[str], Optional[bool]]:
        pattern = pattern.strip()
        include = True
        if pattern.startswith("!"):
            include = False
            pattern = pattern[1:]
        if not pattern:
            return None, None

        parts = ["^"]
        i = 0
        while i < len(pattern):
            if pattern.startswith("**/", i):
                parts.append("(?:.*/)?")
                i += 3
            elif pattern.startswith("**", i):
                parts.append(".*")
                i += 2
            elif pattern[i] == "*":
                parts.append("[^/]*")
                i += 1
            elif pattern[i] == "?":
                parts.append("[^/]")
                i += 1
            else:
                parts.append(re.escape(pattern[i]))
                i += 1
        parts.append("$")
        return "".join(parts), include


def build_ignore_spec(patterns: Iterable[str]) -> pathspec.PathSpec:
    return pathspec.PathSpec.from_lines(PackageNamePattern, patterns)


def should_ignore_package(package_name: str, patterns: List[str]) -> bool:
    """Whether the last pattern matching ``package_name`` excludes it."""
    if not patterns:
        return False
    return build_ignore_spec(patterns).match_file(package_name)


def filter_ignored(package_names: Iterable[str], patterns: List[str]) -> Tuple[List[str], List[str]]:
    """
    Split package names into kept and ignored, both in input order.

    Args:
        package_names: Candidate package names
        patterns: Ignore patterns, applied last-match-wins

    Returns:
        ``(kept, ignored)``
    """
    names = list(package_names)
    if not patterns:
        return names, []

    spec = build_ignore_spec(patterns)
    kept: List[str] = []
    ignored: List[str] = []
    for name in names:
        (ignored if spec.match_file(name) else kept).append(name)
    return kept, ignored


def load_ignore_patterns(extra: Iterable[str] = (), cwd: Union[str, Path, None] = None) -> List[str]:
    """Patterns from the ignore file in ``cwd`` followed by ``extra``."""
    ignore_file = find_ignore_file(cwd)
    file_patterns = parse_ignore_file(ignore_file) if ignore_file else []
    return file_patterns + list(extra)
