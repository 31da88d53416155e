"""
Pipeline stages, in the order they claim packages.
"""

from chunkgroups.stages.base import ChunkingStage, StageContext
from chunkgroups.stages.custom import CustomGroupsStage
from chunkgroups.stages.framework_core import FrameworkCoreStage
from chunkgroups.stages.graph_based import GraphClusteringStage
from chunkgroups.stages.large_isolated import LargeIsolatedStage
from chunkgroups.stages.preserved import PreservedChunksStage
from chunkgroups.stages.remainder import MISC_CHUNK_NAME, RemainderStage

__all__ = [
    "ChunkingStage",
    "StageContext",
    "CustomGroupsStage",
    "PreservedChunksStage",
    "FrameworkCoreStage",
    "LargeIsolatedStage",
    "GraphClusteringStage",
    "RemainderStage",
    "MISC_CHUNK_NAME",
]
