"""
Stage framework for the chunking pipeline.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, List, Optional, Set

from chunkgroups.core.config import AnalyzerConfig
from chunkgroups.core.errors import ChunkGroupsError
from chunkgroups.core.frameworks import Framework
from chunkgroups.core.graph import DependencyGraph
from chunkgroups.core.models import ChunkGroup, Diagnostic, DiagnosticLevel
from chunkgroups.core.naming import match_packages

logger = logging.getLogger(__name__)


@dataclass
class StageContext:
    """
    State shared by the stages of one pipeline run.

    ``assigned`` and ``groups`` are owned by the run and only ever grow.
    """

    graph: DependencyGraph
    config: AnalyzerConfig
    framework: Framework = Framework.UNKNOWN
    assigned: Set[str] = field(default_factory=set)
    groups: List[ChunkGroup] = field(default_factory=list)
    diagnostics: List[Diagnostic] = field(default_factory=list)

    def unassigned(self) -> List[str]:
        """Unassigned package names in graph order."""
        return [name for name in self.graph.names if name not in self.assigned]

    def claim(self, group: ChunkGroup) -> None:
        """Add a group and mark its packages assigned."""
        already = [name for name in group.patterns if name in self.assigned]
        if already:
            raise ChunkGroupsError(
                f"Group {group.name} re-claims assigned packages",
                {"packages": already},
            )
        self.groups.append(group)
        self.assigned.update(group.patterns)

    def emit(self, level: DiagnosticLevel, stage: str, message: str, **details: Any) -> None:
        self.diagnostics.append(Diagnostic(level=level, stage=stage, message=message, details=details))
        log_level = logging.WARNING if level is DiagnosticLevel.WARNING else logging.INFO
        logger.log(log_level, f"[{stage}] {message}")

    def info(self, stage: str, message: str, **details: Any) -> None:
        self.emit(DiagnosticLevel.INFO, stage, message, **details)

    def warn(self, stage: str, message: str, **details: Any) -> None:
        self.emit(DiagnosticLevel.WARNING, stage, message, **details)


class ChunkingStage(ABC):
    """Base class for pipeline stages."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Stage name used in diagnostics."""
        ...

    @abstractmethod
    def run(self, context: StageContext) -> None:
        """Claim packages by appending groups to the context."""
        ...

    def _claimable(self, context: StageContext, label: str, patterns: List[str]) -> Optional[List[str]]:
        """
        Resolve patterns to unassigned packages for a rule-based group.

        Emits a warning and returns None when the patterns match nothing or
        only packages claimed by an earlier group.
        """
        matched = match_packages(context.graph.names, patterns)
        if not matched:
            context.warn(self.name, f"No packages matched for {label}", group=label, patterns=list(patterns))
            return None

        unassigned = [name for name in matched if name not in context.assigned]
        if not unassigned:
            context.warn(
                self.name,
                f"All packages in {label} are already assigned to other groups",
                group=label,
                matched=matched,
            )
            return None

        return unassigned
