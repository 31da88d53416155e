"""Tests for co-import clustering."""

from chunkgroups.core.clustering import (
    build_co_import_matrix,
    calculate_cohesion,
    find_central_package,
    find_co_import_clusters,
)

KB = 1024


class TestCoImportMatrix:
    def test_counts_shared_importers(self, graph_factory, co_import_sizes, co_import_edges):
        graph = graph_factory(co_import_sizes, co_import_edges)
        matrix = build_co_import_matrix(graph, set(graph.names))

        assert matrix["pkg-a"] == {"pkg-b": 4, "pkg-c": 4}
        assert matrix["app-1"] == {}

    def test_partners_restricted_to_unassigned(self, graph_factory, co_import_sizes, co_import_edges):
        graph = graph_factory(co_import_sizes, co_import_edges)
        unassigned = set(graph.names) - {"pkg-b"}
        matrix = build_co_import_matrix(graph, unassigned)

        assert "pkg-b" not in matrix
        assert matrix["pkg-a"] == {"pkg-c": 4}


class TestCohesion:
    def test_fully_internal(self, graph_factory):
        graph = graph_factory({"a": 1, "b": 1}, [("a", "b"), ("b", "a")])
        assert calculate_cohesion(graph, ["a", "b"]) == 1.0

    def test_mixed_edges(self, graph_factory):
        graph = graph_factory({"a": 1, "b": 1, "x": 1}, [("a", "b"), ("a", "x")])
        assert calculate_cohesion(graph, ["a", "b"]) == 0.5

    def test_no_outgoing_edges_scores_zero(self, graph_factory):
        graph = graph_factory({"a": 1, "b": 1})
        assert calculate_cohesion(graph, ["a", "b"]) == 0.0


class TestFindCoImportClusters:
    def test_mutually_co_imported_packages_form_one_cluster(
        self, graph_factory, co_import_sizes, co_import_edges
    ):
        graph = graph_factory(co_import_sizes, co_import_edges)
        clusters = find_co_import_clusters(graph, set(graph.names))

        assert len(clusters) == 1
        cluster = clusters[0]
        assert cluster.packages == ["pkg-a", "pkg-b", "pkg-c"]
        assert cluster.cohesion == 1.0
        assert cluster.co_import_frequency == 4.0

    def test_infrequent_co_imports_are_not_clustered(self, graph_factory):
        sizes = {"app-1": 1, "app-2": 1, "a": 1, "b": 1}
        edges = [("app-1", "a"), ("app-1", "b"), ("app-2", "a"), ("app-2", "b"), ("a", "b")]
        graph = graph_factory(sizes, edges)

        assert find_co_import_clusters(graph, set(graph.names), min_co_import_count=3) == []
        assert len(find_co_import_clusters(graph, set(graph.names), min_co_import_count=2)) == 1

    def test_incohesive_candidates_are_rejected(self, graph_factory):
        """Co-imported packages whose imports all leave the candidate are rejected."""
        sizes = {f"app-{i}": 1 for i in range(3)}
        sizes.update({"a": 1, "b": 1, "x": 1, "y": 1})
        edges = [(f"app-{i}", target) for i in range(3) for target in ("a", "b")]
        edges += [("a", "x"), ("b", "y")]
        graph = graph_factory(sizes, edges)

        assert find_co_import_clusters(graph, set(graph.names)) == []

    def test_candidate_without_edges_is_rejected(self, graph_factory):
        sizes = {f"app-{i}": 1 for i in range(3)}
        sizes.update({"a": 1, "b": 1})
        edges = [(f"app-{i}", target) for i in range(3) for target in ("a", "b")]
        graph = graph_factory(sizes, edges)

        assert find_co_import_clusters(graph, set(graph.names)) == []

    def test_every_member_meets_frequency(self, graph_factory, co_import_sizes, co_import_edges):
        graph = graph_factory(co_import_sizes, co_import_edges)
        unassigned = set(graph.names)
        matrix = build_co_import_matrix(graph, unassigned)

        for cluster in find_co_import_clusters(graph, unassigned):
            assert cluster.cohesion >= 0.5
            for member in cluster.packages:
                partners = [other for other in cluster.packages if other != member]
                assert any(matrix[member].get(other, 0) >= 3 for other in partners)

    def test_clusters_are_disjoint(self, graph_factory, co_import_sizes, co_import_edges):
        graph = graph_factory(co_import_sizes, co_import_edges)
        members = [
            name
            for cluster in find_co_import_clusters(graph, set(graph.names), min_co_import_count=1, min_cohesion=0.0)
            for name in cluster.packages
        ]
        assert len(members) == len(set(members))


class TestCentralPackage:
    def test_highest_in_degree(self, graph_factory):
        graph = graph_factory({"a": 1, "b": 1, "c": 1}, [("a", "b"), ("c", "b")])
        assert find_central_package(graph, ["a", "b", "c"]) == "b"

    def test_first_seen_wins_ties(self, graph_factory):
        graph = graph_factory({"a": 1, "b": 1})
        assert find_central_package(graph, ["b", "a"]) == "b"
