"""
Framework detection and built-in framework group tables.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterable, List, Literal, Tuple

from chunkgroups.core.config import TCP_INITIAL_WINDOW_SIZE, AnalyzerConfig, PreservedChunkConfig
from chunkgroups.core.models import GroupPriority


class Framework(Enum):
    """Frontend frameworks with built-in core groups."""

    REACT = "react"
    VUE = "vue"
    SVELTE = "svelte"
    ANGULAR = "angular"
    UNKNOWN = "unknown"

    @property
    def display_name(self) -> str:
        return _DISPLAY_NAMES[self]


_DISPLAY_NAMES = {
    Framework.REACT: "React",
    Framework.VUE: "Vue 3",
    Framework.SVELTE: "Svelte",
    Framework.ANGULAR: "Angular",
    Framework.UNKNOWN: "Unknown (framework-agnostic)",
}


@dataclass(frozen=True)
class GroupDefinition:
    """A static group of packages that belong in one chunk."""

    patterns: Tuple[str, ...]
    description: str
    reason: str
    priority: GroupPriority


REACT_CORE_GROUPS: Dict[str, GroupDefinition] = {
    # scheduler, use-sidecar and friends are pulled in indirectly, which the
    # import graph alone does not reveal
    "react-core": GroupDefinition(
        patterns=(
            "react",
            "react-dom",
            "scheduler",
            "react-is",
            "react-fast-compare",
            "react-style-singleton",
            "use-callback-ref",
            "use-sidecar",
            "hoist-non-react-statics",
            "prop-types",
        ),
        description="React core runtime",
        reason="Framework core with internal dependencies - must be grouped for cache stability",
        priority=GroupPriority.CRITICAL,
    ),
}

VUE_CORE_GROUPS: Dict[str, GroupDefinition] = {
    "vue-core": GroupDefinition(
        patterns=(
            "vue",
            "@vue/runtime-dom",
            "@vue/runtime-core",
            "@vue/reactivity",
            "@vue/shared",
            "@vue/compiler-sfc",
            "@vue/compiler-dom",
            "@vue/compiler-core",
        ),
        description="Vue core runtime",
        reason="Framework core with tightly coupled packages - internal shared utilities",
        priority=GroupPriority.CRITICAL,
    ),
}

SVELTE_CORE_GROUPS: Dict[str, GroupDefinition] = {
    "svelte-core": GroupDefinition(
        patterns=(
            "svelte",
            "svelte/internal",
            "svelte/store",
            "svelte/animate",
            "svelte/transition",
            "svelte/easing",
            "svelte/motion",
        ),
        description="Svelte core runtime",
        reason="Framework core with internal modules - compiled component dependencies",
        priority=GroupPriority.CRITICAL,
    ),
}

ANGULAR_CORE_GROUPS: Dict[str, GroupDefinition] = {
    "angular-core": GroupDefinition(
        patterns=(
            "@angular/core",
            "@angular/common",
            "@angular/platform-browser",
            "@angular/platform-browser-dynamic",
            "@angular/compiler",
            "rxjs",
            "rxjs/operators",
            "tslib",
            "zone.js",
        ),
        description="Angular core runtime",
        reason="Framework core with RxJS integration - tightly coupled ecosystem",
        priority=GroupPriority.CRITICAL,
    ),
}

FRAMEWORK_GROUPS: Dict[Framework, Dict[str, GroupDefinition]] = {
    Framework.REACT: REACT_CORE_GROUPS,
    Framework.VUE: VUE_CORE_GROUPS,
    Framework.SVELTE: SVELTE_CORE_GROUPS,
    Framework.ANGULAR: ANGULAR_CORE_GROUPS,
}


def detect_framework(package_names: Iterable[str]) -> Framework:
    """
    Classify the application framework from its bundled package names.

    ``react`` alone may be React Native, so React needs ``react-dom``; Vue is
    detected through the Vue 3 runtime packages.
    """
    names = set(package_names)

    if "react-dom" in names:
        return Framework.REACT
    if any(name.startswith("@vue/runtime") for name in names):
        return Framework.VUE
    if "svelte" in names:
        return Framework.SVELTE
    if "@angular/core" in names:
        return Framework.ANGULAR
    return Framework.UNKNOWN


def get_groups_for_framework(framework: Framework) -> Dict[str, GroupDefinition]:
    """Core group definitions for the framework; empty when it has none."""
    return dict(FRAMEWORK_GROUPS.get(framework, {}))


def get_critical_groups(framework: Framework) -> List[str]:
    """Keys of the groups the framework-core stage claims."""
    return [
        key for key, definition in get_groups_for_framework(framework).items()
        if definition.priority is GroupPriority.CRITICAL
    ]


@dataclass(frozen=True)
class FrameworkPreset:
    patterns: Tuple[str, ...]
    split_strategy: Literal["auto", "manual"]
    reason: str


FRAMEWORK_PRESETS: Dict[Framework, FrameworkPreset] = {
    Framework.REACT: FrameworkPreset(
        patterns=REACT_CORE_GROUPS["react-core"].patterns,
        split_strategy="manual",
        reason="React has circular dependencies - react-dom depends on react internals. Splitting causes runtime errors.",
    ),
    Framework.VUE: FrameworkPreset(
        patterns=VUE_CORE_GROUPS["vue-core"].patterns,
        split_strategy="manual",
        reason="Vue runtime modules share internal utilities (@vue/shared). Tightly coupled packages must stay together.",
    ),
    Framework.SVELTE: FrameworkPreset(
        patterns=("svelte",),
        split_strategy="auto",
        reason="Svelte is a single package without circular dependencies. Safe to auto-split if size exceeds limit.",
    ),
    Framework.ANGULAR: FrameworkPreset(
        patterns=(
            "@angular/core",
            "@angular/common",
            "@angular/platform-browser",
            "@angular/platform-browser-dynamic",
            "@angular/forms",
            "@angular/router",
            "rxjs",
            "tslib",
        ),
        split_strategy="manual",
        reason="Angular modules have strong internal dependencies through dependency injection. Must be grouped together.",
    ),
}


def preset_config(framework: Framework) -> AnalyzerConfig:
    """Starter configuration with a ``vendor`` preserved chunk for the framework."""
    preset = FRAMEWORK_PRESETS.get(framework)
    preserved = []
    if preset:
        preserved.append(
            PreservedChunkConfig(
                name="vendor",
                patterns=list(preset.patterns),
                max_size=TCP_INITIAL_WINDOW_SIZE,
                split_strategy=preset.split_strategy,
                reason=preset.reason,
            )
        )
    return AnalyzerConfig(preserved_chunks=preserved, initial_chunk_max_size=TCP_INITIAL_WINDOW_SIZE)
