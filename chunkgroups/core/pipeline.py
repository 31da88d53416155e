"""
Pipeline orchestration for chunk group analysis.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from chunkgroups.core.config import AnalyzerConfig
from chunkgroups.core.frameworks import Framework, detect_framework
from chunkgroups.core.graph import DependencyGraph
from chunkgroups.core.models import ChunkGroup, Diagnostic
from chunkgroups.io.ignore import filter_ignored
from chunkgroups.stages import (
    ChunkingStage,
    CustomGroupsStage,
    FrameworkCoreStage,
    GraphClusteringStage,
    LargeIsolatedStage,
    PreservedChunksStage,
    RemainderStage,
    StageContext,
)

logger = logging.getLogger(__name__)


@dataclass
class AnalysisOutcome:
    """Result of one pipeline run."""

    groups: List[ChunkGroup]
    graph: DependencyGraph
    framework: Framework = Framework.UNKNOWN
    diagnostics: List[Diagnostic] = field(default_factory=list)
    ignored: List[str] = field(default_factory=list)

    @property
    def warnings(self) -> List[Diagnostic]:
        return [diagnostic for diagnostic in self.diagnostics if diagnostic.is_warning]


def default_stages() -> List[ChunkingStage]:
    """The full six-stage pipeline, in claim order."""
    return [
        CustomGroupsStage(),
        PreservedChunksStage(),
        FrameworkCoreStage(),
        LargeIsolatedStage(),
        GraphClusteringStage(),
        RemainderStage(),
    ]


def simple_stages() -> List[ChunkingStage]:
    """Stages usable without import edges."""
    return [CustomGroupsStage(), LargeIsolatedStage(), RemainderStage()]


class Pipeline:
    """
    Ordered, additive chunking pipeline.

    Every stage sees the packages claimed by the stages before it and only
    claims packages that are still unassigned; the remainder stage closes the
    partition so every non-ignored package ends up in exactly one group.
    """

    def __init__(
        self,
        config: Optional[AnalyzerConfig] = None,
        stages: Optional[Sequence[ChunkingStage]] = None,
    ) -> None:
        self.config = config or AnalyzerConfig()
        self.stages = list(stages) if stages is not None else default_stages()

    def run(self, graph: DependencyGraph) -> AnalysisOutcome:
        """
        Partition the packages of ``graph`` into chunk groups.

        Args:
            graph: Package dependency graph

        Returns:
            Groups stable-sorted by descending estimated size, with diagnostics
        """
        kept, ignored = filter_ignored(graph.names, self.config.ignore)
        if ignored:
            logger.info(f"Ignoring {len(ignored)} packages matched by ignore patterns")
            graph = graph.subgraph(kept)

        framework = detect_framework(graph.names)
        logger.info(f"Analyzing {len(graph)} packages (framework: {framework.display_name})")

        context = StageContext(graph=graph, config=self.config, framework=framework)

        for stage in self.stages:
            before = len(context.groups)
            stage.run(context)
            logger.debug(
                f"Stage {stage.name}: {len(context.groups) - before} groups, "
                f"{len(context.assigned)}/{len(graph)} packages assigned"
            )

        groups = sorted(context.groups, key=lambda group: group.estimated_size, reverse=True)

        return AnalysisOutcome(
            groups=groups,
            graph=graph,
            framework=framework,
            diagnostics=context.diagnostics,
            ignored=ignored,
        )


def analyze(graph: DependencyGraph, config: Optional[AnalyzerConfig] = None) -> AnalysisOutcome:
    """
    Run the full chunking pipeline over a dependency graph.

    Args:
        graph: Package dependency graph
        config: Analysis configuration; defaults apply when omitted

    Returns:
        Analysis outcome
    """
    return Pipeline(config).run(graph)


def analyze_packages(graph: DependencyGraph, config: Optional[AnalyzerConfig] = None) -> AnalysisOutcome:
    """Run the reduced pipeline for graphs built without import edges."""
    return Pipeline(config, stages=simple_stages()).run(graph)
