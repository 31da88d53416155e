"""
Co-import clustering over the unassigned part of the dependency graph.

Packages that are repeatedly imported together by the same importers are
candidates for a shared chunk. A candidate is accepted only when it is
cohesive: most of its members' outgoing imports stay inside the candidate.
"""

import logging
from dataclasses import dataclass
from typing import Dict, List, Set

from chunkgroups.core.graph import DependencyGraph

logger = logging.getLogger(__name__)

CoImportMatrix = Dict[str, Dict[str, int]]


@dataclass
class CoImportCluster:
    """An accepted cluster prior to size filtering."""

    packages: List[str]
    cohesion: float
    co_import_frequency: float


def build_co_import_matrix(graph: DependencyGraph, unassigned: Set[str]) -> CoImportMatrix:
    """
    Count how often each pair of unassigned packages shares an importer.

    For every unassigned package ``p``, each importer of ``p`` (taken from the
    full graph) contributes one count to every other unassigned package that
    importer also imports.

    Args:
        graph: Full dependency graph
        unassigned: Packages still available for clustering

    Returns:
        ``p -> (q -> frequency)`` in graph order, partners in first-seen order
    """
    digraph = graph.digraph
    matrix: CoImportMatrix = {}

    for name in graph.names:
        if name not in unassigned:
            continue

        row: Dict[str, int] = {}
        for importer in sorted(digraph.predecessors(name)):
            for partner in sorted(digraph.successors(importer)):
                if partner == name or partner not in unassigned:
                    continue
                row[partner] = row.get(partner, 0) + 1

        matrix[name] = row

    return matrix


def calculate_cohesion(subgraph: DependencyGraph, members: List[str]) -> float:
    """
    Ratio of internal to total outgoing import edges of the members.

    A member set without any outgoing edge has no structural evidence of
    belonging together, so it scores 0.0 rather than dividing by zero.
    """
    member_set = set(members)
    internal = 0
    external = 0

    for name in members:
        node = subgraph.get(name)
        if node is None:
            continue
        for target in node.imports:
            if target in member_set:
                internal += 1
            else:
                external += 1

    total = internal + external
    if total == 0:
        return 0.0
    return internal / total


def find_co_import_clusters(
    graph: DependencyGraph,
    unassigned: Set[str],
    min_co_import_count: int = 3,
    min_cohesion: float = 0.5,
) -> List[CoImportCluster]:
    """
    Discover cohesive co-import clusters among unassigned packages.

    Candidates are formed in matrix order from each unvisited package and its
    unvisited partners at or above ``min_co_import_count``. Rejected
    candidates leave their members free for later candidates; accepted
    members are visited for the rest of the pass.

    Args:
        graph: Full dependency graph
        unassigned: Packages still available for clustering
        min_co_import_count: Minimum shared-importer count for a partner
        min_cohesion: Minimum cohesion for acceptance

    Returns:
        Accepted clusters in discovery order
    """
    matrix = build_co_import_matrix(graph, unassigned)
    subgraph = graph.subgraph(unassigned)
    visited: Set[str] = set()
    clusters: List[CoImportCluster] = []

    for name, row in matrix.items():
        if name in visited:
            continue

        partners = [
            partner for partner, frequency in row.items()
            if frequency >= min_co_import_count and partner not in visited
        ]
        if not partners:
            continue

        members = [name] + partners
        cohesion = calculate_cohesion(subgraph, members)
        if cohesion < min_cohesion:
            logger.debug(f"Rejected co-import candidate around {name}: cohesion {cohesion:.2f}")
            continue

        visited.update(members)
        frequency = sum(row[partner] for partner in partners) / len(partners)
        clusters.append(
            CoImportCluster(packages=members, cohesion=cohesion, co_import_frequency=frequency)
        )

    logger.debug(f"Found {len(clusters)} co-import clusters among {len(unassigned)} packages")
    return clusters


def find_central_package(graph: DependencyGraph, members: List[str]) -> str:
    """Member with the highest in-degree; the first seen wins ties."""
    central = members[0]
    best = -1
    for name in members:
        centrality = graph.in_degree(name)
        if centrality > best:
            best = centrality
            central = name
    return central
