"""
Preserved chunks: groups that must ship with the initial HTML within a
gzipped byte budget.
"""

import logging
from typing import List

from chunkgroups.core.binpack import pack_by_size
from chunkgroups.core.config import PreservedChunkConfig
from chunkgroups.core.models import ChunkGroup, ChunkMetadata, ClusteringMethod
from chunkgroups.core.naming import format_size
from chunkgroups.stages.base import ChunkingStage, StageContext

logger = logging.getLogger(__name__)


class PreservedChunksStage(ChunkingStage):
    """
    Claims declared preserved chunks.

    A chunk over its budget is either kept whole and flagged for a manual
    split, or split into ``<name>-<n>`` sub-chunks by size.
    """

    @property
    def name(self) -> str:
        return "preserved"

    def run(self, context: StageContext) -> None:
        preserved_chunks = context.config.preserved_chunks
        if not preserved_chunks:
            return

        context.info(self.name, f"Processing {len(preserved_chunks)} preserved chunks")

        for chunk in preserved_chunks:
            self._process_chunk(context, chunk)

    def _process_chunk(self, context: StageContext, chunk: PreservedChunkConfig) -> None:
        packages = self._claimable(context, f"preserved chunk {chunk.name}", chunk.patterns)
        if not packages:
            return

        logger.debug(f"Preserved chunk {chunk.name} matched {len(packages)} packages")

        sizes = context.graph.sizes_of(packages)
        max_size = chunk.max_size if chunk.max_size is not None else context.config.initial_chunk_max_size

        if sizes.gzip_size <= max_size:
            context.claim(
                ChunkGroup.from_sizes(
                    name=chunk.name,
                    patterns=packages,
                    sizes=sizes,
                    reason=chunk.reason or "Preserved chunk",
                    metadata=ChunkMetadata(clustering_method=ClusteringMethod.PRESERVED),
                )
            )
            return

        message = (
            f"{chunk.name} ({format_size(sizes.gzip_size)} gzipped) "
            f"exceeds maxSize {format_size(max_size)}"
        )

        if chunk.split_strategy == "auto":
            context.warn(self.name, message, chunk=chunk.name, gzip_size=sizes.gzip_size, max_size=max_size)
            self._auto_split(context, chunk.name, packages, max_size)
            return

        context.warn(
            self.name,
            f"{message}; split it manually into chunks under {format_size(max_size)}",
            chunk=chunk.name,
            gzip_size=sizes.gzip_size,
            max_size=max_size,
        )
        context.claim(
            ChunkGroup.from_sizes(
                name=chunk.name,
                patterns=packages,
                sizes=sizes,
                reason=chunk.reason or "Preserved chunk (manual)",
                metadata=ChunkMetadata(
                    clustering_method=ClusteringMethod.PRESERVED,
                    needs_manual_split=True,
                ),
            )
        )

    def _auto_split(self, context: StageContext, base_name: str, packages: List[str], max_size: int) -> None:
        buckets = pack_by_size(context.graph, packages, max_size)

        for index, bucket in enumerate(buckets, start=1):
            context.claim(
                ChunkGroup.from_sizes(
                    name=f"{base_name}-{index}",
                    patterns=bucket.packages,
                    sizes=bucket.sizes,
                    reason=f"Auto-split from {base_name} (TCP optimization)",
                    metadata=ChunkMetadata(
                        clustering_method=ClusteringMethod.PRESERVED,
                        split_index=index,
                        original_chunk_name=base_name,
                    ),
                )
            )
            context.info(
                self.name,
                f"{base_name}-{index}: {', '.join(bucket.packages)} "
                f"({format_size(bucket.sizes.gzip_size)} gzipped)",
                chunk=base_name,
                split_index=index,
            )
