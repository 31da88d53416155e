"""
Dynamic co-import clustering of the packages left after the rule stages.
"""

from chunkgroups.core.clustering import find_central_package, find_co_import_clusters
from chunkgroups.core.models import ChunkGroup, ChunkMetadata, ClusteringMethod
from chunkgroups.core.naming import format_size, generate_safe_name
from chunkgroups.stages.base import ChunkingStage, StageContext


class GraphClusteringStage(ChunkingStage):
    """Turns accepted co-import clusters into ``vendor/<central>`` chunks."""

    @property
    def name(self) -> str:
        return "graph-based"

    def run(self, context: StageContext) -> None:
        unassigned = context.unassigned()
        if not unassigned:
            return

        clustering = context.config.clustering
        clusters = find_co_import_clusters(
            context.graph,
            set(unassigned),
            min_co_import_count=clustering.min_co_import_count,
            min_cohesion=clustering.min_cohesion,
        )

        for cluster in clusters:
            sizes = context.graph.sizes_of(cluster.packages)
            if sizes.total_size < clustering.min_cluster_size:
                context.info(
                    self.name,
                    f"Discarding cluster of {len(cluster.packages)} packages "
                    f"({format_size(sizes.total_size)}) below minimum size",
                    packages=list(cluster.packages),
                )
                continue

            central = find_central_package(context.graph, cluster.packages)
            context.claim(
                ChunkGroup.from_sizes(
                    name=f"vendor/{generate_safe_name(central)}",
                    patterns=cluster.packages,
                    sizes=sizes,
                    reason=(
                        f"Co-imported cluster (cohesion: {cluster.cohesion:.2f}, "
                        f"avg freq: {cluster.co_import_frequency:.1f}x)"
                    ),
                    metadata=ChunkMetadata(
                        clustering_method=ClusteringMethod.GRAPH_BASED,
                        cohesion=cluster.cohesion,
                        co_import_frequency=cluster.co_import_frequency,
                        central_package=central,
                    ),
                )
            )
