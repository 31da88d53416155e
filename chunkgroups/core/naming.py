"""
Package identity helpers: module path to package name, chunk-safe names, size labels.
"""

import re
from typing import Iterable, List, Optional

_NODE_MODULES_RE = re.compile(r"node_modules/((?:@[^/]+/)?[^/]+)")
_PNPM_DIR_RE = re.compile(r"node_modules/\.pnpm/([^/]+)")
_VERSION_SUFFIX_RE = re.compile(r"@[\d.]+(-[a-zA-Z0-9.-]+)?$")


def extract_package_name(module_path: str) -> Optional[str]:
    """
    Extract the canonical package name from a bundled module path.

    The innermost ``node_modules`` segment wins, so nested installs and the
    pnpm virtual store (``.pnpm/<dir>/node_modules/<name>``) resolve to the
    package that actually owns the module.

    Args:
        module_path: Module id as reported by the bundler

    Returns:
        Package name, or None when the path is not inside node_modules
    """
    if not module_path:
        return None

    path = module_path.replace("\\", "/")

    matches = [m for m in _NODE_MODULES_RE.findall(path) if not m.startswith(".")]
    if matches:
        return remove_version(matches[-1]) or None

    pnpm_match = _PNPM_DIR_RE.search(path)
    if pnpm_match:
        return decode_pnpm_directory(pnpm_match.group(1))

    return None


def decode_pnpm_directory(encoded: str) -> Optional[str]:
    """
    Decode a pnpm virtual store directory name.

    pnpm stores ``@scope/name@1.0.0`` with peers as
    ``@scope+name@1.0.0_peer@2.0.0``.
    """
    if not encoded:
        return None

    scoped = encoded.startswith("@")
    body = encoded[1:] if scoped else encoded

    # Everything after the first version separator is version and peer data
    name = body.split("@", 1)[0]
    if "@" not in body:
        name = name.split("_", 1)[0]
    name = name.replace("+", "/")

    if scoped:
        parts = name.split("/")
        if len(parts) < 2 or not parts[1]:
            return None
        return f"@{parts[0]}/{parts[1]}"

    return name.split("/")[0] or None


def remove_version(name: str) -> str:
    """Strip a trailing ``@<version>`` suffix from a package name."""
    return _VERSION_SUFFIX_RE.sub("", name)


def generate_safe_name(package_name: str) -> str:
    """
    Convert a package name into a chunk-safe name.

    ``@tanstack/react-query`` becomes ``tanstack-react-query`` and
    ``react.production`` becomes ``react-production``.
    """
    return re.sub(r"^@", "", package_name).replace("/", "-").replace(".", "-")


def pattern_matches(package_name: str, pattern: str) -> bool:
    """Whether a group pattern claims a package (exact or sub-path)."""
    return package_name == pattern or package_name.startswith(f"{pattern}/")


def match_packages(package_names: Iterable[str], patterns: List[str]) -> List[str]:
    """
    Find the packages claimed by any of the patterns.

    Args:
        package_names: Candidate package names, in graph order
        patterns: Group patterns such as ``["react", "lodash"]``

    Returns:
        Matching package names in the order they were given
    """
    return [
        name for name in package_names
        if any(pattern_matches(name, pattern) for pattern in patterns)
    ]


def format_size(num_bytes: float) -> str:
    """Format a byte count as a short human-readable label."""
    sign = "-" if num_bytes < 0 else ""
    value = abs(num_bytes)

    if value < 1024:
        return f"{sign}{int(value)}B"
    if value < 1024 * 1024:
        return f"{sign}{value / 1024:.1f}KB"
    return f"{sign}{value / (1024 * 1024):.2f}MB"
