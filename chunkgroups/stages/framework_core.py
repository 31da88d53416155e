"""
Framework core groups for the detected framework.
"""

from chunkgroups.core.frameworks import get_critical_groups, get_groups_for_framework
from chunkgroups.core.models import ChunkGroup, ChunkMetadata, ClusteringMethod
from chunkgroups.stages.base import ChunkingStage, StageContext


class FrameworkCoreStage(ChunkingStage):
    """Claims the critical core group of the detected framework."""

    @property
    def name(self) -> str:
        return "framework-core"

    def run(self, context: StageContext) -> None:
        definitions = get_groups_for_framework(context.framework)

        for group_key in get_critical_groups(context.framework):
            definition = definitions[group_key]
            packages = self._claimable(context, f"framework group {group_key}", list(definition.patterns))
            if not packages:
                continue

            context.claim(
                ChunkGroup.from_sizes(
                    name=f"vendor/{group_key}",
                    patterns=packages,
                    sizes=context.graph.sizes_of(packages),
                    reason=definition.reason,
                    metadata=ChunkMetadata(
                        clustering_method=ClusteringMethod.FRAMEWORK_CORE,
                        priority=definition.priority,
                        description=definition.description,
                    ),
                )
            )
