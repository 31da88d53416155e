"""
Greedy size-bounded splitting of an oversized preserved chunk.
"""

from dataclasses import dataclass, field
from typing import List

from chunkgroups.core.graph import DependencyGraph
from chunkgroups.core.models import SizeTotals


@dataclass
class SizeBucket:
    """Packages packed into one sub-chunk."""

    packages: List[str] = field(default_factory=list)
    sizes: SizeTotals = field(default_factory=SizeTotals)

    def add(self, name: str, sizes: SizeTotals) -> None:
        self.packages.append(name)
        self.sizes = self.sizes + sizes


def pack_by_size(graph: DependencyGraph, packages: List[str], max_gzip_size: int) -> List[SizeBucket]:
    """
    Split packages into buckets whose gzip size stays within the budget.

    Packages are taken largest first. A bucket is closed when the next package
    would push it over budget; a package larger than the budget on its own
    still gets a bucket of its own.

    Args:
        graph: Graph providing package sizes
        packages: Package names to pack; unknown names are skipped
        max_gzip_size: Gzipped byte budget per bucket

    Returns:
        Buckets in fill order
    """
    known = [graph.packages[name] for name in packages if name in graph.packages]
    ordered = sorted(known, key=lambda node: node.gzip_size, reverse=True)

    buckets: List[SizeBucket] = []
    current = SizeBucket()

    for node in ordered:
        if current.packages and current.sizes.gzip_size + node.gzip_size > max_gzip_size:
            buckets.append(current)
            current = SizeBucket()
        current.add(node.name, node.sizes)

    if current.packages:
        buckets.append(current)

    return buckets
