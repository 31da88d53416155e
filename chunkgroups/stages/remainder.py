"""
Catch-all group for every package no earlier stage claimed.
"""

from chunkgroups.core.models import ChunkGroup, ChunkMetadata, ClusteringMethod
from chunkgroups.core.naming import format_size
from chunkgroups.stages.base import ChunkingStage, StageContext

MISC_CHUNK_NAME = "vendor/misc"


class RemainderStage(ChunkingStage):
    @property
    def name(self) -> str:
        return "remainder"

    def run(self, context: StageContext) -> None:
        remaining = context.unassigned()
        if not remaining:
            return

        sizes = context.graph.sizes_of(remaining)
        context.claim(
            ChunkGroup.from_sizes(
                name=MISC_CHUNK_NAME,
                patterns=remaining,
                sizes=sizes,
                reason=f"Miscellaneous {len(remaining)} packages ({format_size(sizes.total_size)})",
                metadata=ChunkMetadata(clustering_method=ClusteringMethod.MISC),
            )
        )
