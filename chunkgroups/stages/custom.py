"""
User-defined custom groups, claimed before every other stage.
"""

from chunkgroups.core.models import ChunkGroup, ChunkMetadata, ClusteringMethod
from chunkgroups.stages.base import ChunkingStage, StageContext


class CustomGroupsStage(ChunkingStage):
    """Claims the packages listed under ``custom_groups``."""

    @property
    def name(self) -> str:
        return "custom"

    def run(self, context: StageContext) -> None:
        custom_groups = context.config.custom_groups
        if not custom_groups:
            return

        context.info(self.name, f"Processing {len(custom_groups)} custom groups")

        for group_name, patterns in custom_groups.items():
            packages = self._claimable(context, f"custom group {group_name}", patterns)
            if not packages:
                continue

            context.claim(
                ChunkGroup.from_sizes(
                    name=group_name,
                    patterns=packages,
                    sizes=context.graph.sizes_of(packages),
                    reason="User-defined custom group",
                    metadata=ChunkMetadata(clustering_method=ClusteringMethod.CUSTOM),
                )
            )
            context.info(self.name, f"{group_name}: {len(packages)} packages", group=group_name)
