"""
Isolation of large, weakly shared packages into chunks of their own.
"""

from chunkgroups.core.models import ChunkGroup, ChunkMetadata, ClusteringMethod
from chunkgroups.core.naming import format_size, generate_safe_name
from chunkgroups.stages.base import ChunkingStage, StageContext


class LargeIsolatedStage(ChunkingStage):
    """
    Gives large packages their own ``vendor/<name>`` chunk.

    A candidate at or above ``large_package_threshold`` is isolated when few
    unassigned packages import it, or unconditionally when it is at or above
    the very-large threshold. Candidates are visited largest first and the
    importer count reflects packages isolated earlier in the same pass.
    """

    @property
    def name(self) -> str:
        return "large-isolated"

    def run(self, context: StageContext) -> None:
        graph = context.graph
        clustering = context.config.clustering
        threshold = context.config.large_package_threshold

        candidates = [
            graph.packages[name] for name in context.unassigned()
            if graph.packages[name].total_size >= threshold
        ]
        candidates.sort(key=lambda node: node.total_size, reverse=True)

        for node in candidates:
            importers = [name for name in sorted(node.imported_by) if name not in context.assigned]
            very_large = node.total_size >= clustering.very_large_package_threshold

            if len(importers) > clustering.max_isolated_importers and not very_large:
                context.info(
                    self.name,
                    f"Keeping {node.name} shared: {len(importers)} unassigned importers",
                    package=node.name,
                )
                continue

            context.claim(
                ChunkGroup.from_sizes(
                    name=f"vendor/{generate_safe_name(node.name)}",
                    patterns=[node.name],
                    sizes=node.sizes,
                    reason=f"Large package ({format_size(node.total_size)})",
                    metadata=ChunkMetadata(clustering_method=ClusteringMethod.LARGE_ISOLATED),
                )
            )
