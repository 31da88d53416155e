"""
chunkgroups: vendor chunk grouping for bundled web applications.

Reads bundler analysis output, builds a package dependency graph, and assigns
every third-party package to a named chunk group through an ordered pipeline
of rule-based, size-based and co-import clustering stages.
"""

__version__ = "0.1.0"

from chunkgroups.core.config import AnalyzerConfig
from chunkgroups.core.graph import DependencyGraph, build_dependency_graph
from chunkgroups.core.models import ChunkGroup
from chunkgroups.core.pipeline import AnalysisOutcome, Pipeline, analyze, analyze_packages

__all__ = [
    "AnalyzerConfig",
    "AnalysisOutcome",
    "ChunkGroup",
    "DependencyGraph",
    "Pipeline",
    "analyze",
    "analyze_packages",
    "build_dependency_graph",
    "__version__",
]
