"""
Package-level dependency graph built from bundle analysis stats.
"""

import logging
from dataclasses import dataclass, field
from functools import cached_property
from typing import Any, Dict, Iterable, List, Mapping, Optional, Set

import networkx as nx

from chunkgroups.core.models import SizeTotals
from chunkgroups.core.naming import extract_package_name

logger = logging.getLogger(__name__)


@dataclass
class PackageNode:
    """A third-party package aggregated from its bundled modules."""

    name: str
    total_size: int = 0
    gzip_size: int = 0
    brotli_size: int = 0
    imports: Set[str] = field(default_factory=set)
    imported_by: Set[str] = field(default_factory=set)
    modules: List[str] = field(default_factory=list)

    @property
    def sizes(self) -> SizeTotals:
        return SizeTotals(self.total_size, self.gzip_size, self.brotli_size)


class DependencyGraph:
    """
    Name-keyed package graph.

    ``packages`` is the authoritative store; edges live as name sets on each
    node. The networkx view is derived from it on first use and the graph is
    treated as read-only once built.
    """

    def __init__(self, packages: Optional[Dict[str, PackageNode]] = None) -> None:
        self.packages: Dict[str, PackageNode] = packages if packages is not None else {}

    def __contains__(self, name: object) -> bool:
        return name in self.packages

    def __len__(self) -> int:
        return len(self.packages)

    @property
    def names(self) -> List[str]:
        """Package names in insertion order."""
        return list(self.packages)

    @property
    def edges(self) -> Dict[str, Set[str]]:
        """Package name -> names of the packages it imports."""
        return {name: node.imports for name, node in self.packages.items()}

    @cached_property
    def digraph(self) -> nx.DiGraph:
        """Directed networkx view; an edge ``a -> b`` means ``a`` imports ``b``."""
        graph = nx.DiGraph()
        graph.add_nodes_from(self.packages)
        for name, node in self.packages.items():
            graph.add_edges_from((name, target) for target in sorted(node.imports))
        return graph

    def get(self, name: str) -> Optional[PackageNode]:
        return self.packages.get(name)

    def sizes_of(self, names: Iterable[str]) -> SizeTotals:
        """Summed sizes of the named packages; unknown names count as zero."""
        return SizeTotals.sum(
            self.packages[name].sizes for name in names if name in self.packages
        )

    def total_sizes(self) -> SizeTotals:
        return self.sizes_of(self.packages)

    def in_degree(self, name: str) -> int:
        """Number of packages importing ``name`` (its centrality)."""
        if name not in self.packages:
            return 0
        return self.digraph.in_degree(name)

    def subgraph(self, names: Iterable[str]) -> "DependencyGraph":
        """
        Restrict the graph to the given packages.

        Nodes are copied with edges pruned to the kept names, so the result
        never shares mutable state with this graph.
        """
        wanted = set(names)
        keep = [name for name in self.packages if name in wanted]
        keep_set = set(keep)
        restricted: Dict[str, PackageNode] = {}

        for name in keep:
            node = self.packages[name]
            restricted[name] = PackageNode(
                name=name,
                total_size=node.total_size,
                gzip_size=node.gzip_size,
                brotli_size=node.brotli_size,
                imports={target for target in node.imports if target in keep_set},
                imported_by={source for source in node.imported_by if source in keep_set},
                modules=list(node.modules),
            )

        return DependencyGraph(restricted)


def build_dependency_graph(stats: Mapping[str, Any]) -> DependencyGraph:
    """
    Build a package dependency graph from v2 visualizer stats.

    Modules outside ``node_modules`` and modules whose package identity cannot
    be extracted are skipped. Malformed size parts count as zero.

    Args:
        stats: Parsed stats payload with ``nodeParts`` and ``nodeMetas``

    Returns:
        Package-level dependency graph
    """
    node_parts = stats.get("nodeParts") or {}
    node_metas = stats.get("nodeMetas") or {}

    packages: Dict[str, PackageNode] = {}
    module_to_package: Dict[str, str] = {}

    # Pass 1: group node_modules modules by package and sum their sizes
    for uid, meta in node_metas.items():
        if not isinstance(meta, Mapping):
            continue

        module_id = meta.get("id")
        if not isinstance(module_id, str) or "node_modules" not in module_id:
            continue

        package_name = extract_package_name(module_id)
        if not package_name:
            continue

        module_to_package[uid] = package_name
        node = packages.get(package_name)
        if node is None:
            node = packages[package_name] = PackageNode(name=package_name)

        node.modules.append(uid)
        sizes = _collect_module_sizes(meta, node_parts)
        node.total_size += sizes.total_size
        node.gzip_size += sizes.gzip_size
        node.brotli_size += sizes.brotli_size

    # Pass 2: lift module edges to package edges
    for uid, meta in node_metas.items():
        source = module_to_package.get(uid)
        if source is None:
            continue

        for target_uid in _edge_uids(meta.get("imported")):
            _link(packages, source, module_to_package.get(target_uid))

        for importer_uid in _edge_uids(meta.get("importedBy")):
            _link(packages, module_to_package.get(importer_uid), source)

    logger.debug(
        f"Built dependency graph: {len(packages)} packages from "
        f"{len(module_to_package)} node_modules modules"
    )

    return DependencyGraph(packages)


def build_graph_from_tree(stats: Mapping[str, Any]) -> DependencyGraph:
    """
    Build an edge-less package graph from the legacy v1 tree schema.

    Only leaves that carry a ``value`` below a ``node_modules`` path count.
    """
    packages: Dict[str, PackageNode] = {}
    tree = stats.get("tree")
    if not isinstance(tree, Mapping):
        return DependencyGraph(packages)

    stack = [(tree, "")]
    while stack:
        node, parent_path = stack.pop()
        name = node.get("name", "")
        full_path = f"{parent_path}/{name}" if parent_path else str(name)

        value = node.get("value")
        if "node_modules" in full_path and isinstance(value, (int, float)):
            package_name = extract_package_name(full_path)
            if package_name:
                package = packages.get(package_name)
                if package is None:
                    package = packages[package_name] = PackageNode(name=package_name)
                package.total_size += int(value)
                package.gzip_size += _as_int(node.get("gzipSize"))
                package.brotli_size += _as_int(node.get("brotliSize"))
                package.modules.append(full_path)

        children = node.get("children") or []
        # Reversed so children are visited in document order
        for child in reversed(children):
            if isinstance(child, Mapping):
                stack.append((child, full_path))

    return DependencyGraph(packages)


def _collect_module_sizes(meta: Mapping[str, Any], node_parts: Mapping[str, Any]) -> SizeTotals:
    """Sum rendered and compressed lengths over a module's parts."""
    module_parts = meta.get("moduleParts")
    if not isinstance(module_parts, Mapping):
        return SizeTotals()

    totals = SizeTotals()
    for part_uid in module_parts.values():
        part = node_parts.get(part_uid) if isinstance(part_uid, str) else None
        if not isinstance(part, Mapping):
            continue
        totals = totals + SizeTotals(
            total_size=_as_int(part.get("renderedLength")),
            gzip_size=_as_int(part.get("gzipLength")),
            brotli_size=_as_int(part.get("brotliLength")),
        )
    return totals


def _edge_uids(entries: Any) -> List[str]:
    if not isinstance(entries, list):
        return []
    return [
        entry["uid"] for entry in entries
        if isinstance(entry, Mapping) and isinstance(entry.get("uid"), str)
    ]


def _link(packages: Dict[str, PackageNode], source: Optional[str], target: Optional[str]) -> None:
    """Record ``source`` importing ``target`` on both endpoints."""
    if source is None or target is None or source == target:
        return
    packages[source].imports.add(target)
    packages[target].imported_by.add(source)


def _as_int(value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return 0
    return int(value)
