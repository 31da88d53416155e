"""Tests for individual pipeline stages."""

import pytest

from chunkgroups.core.config import AnalyzerConfig, PreservedChunkConfig
from chunkgroups.core.errors import ChunkGroupsError
from chunkgroups.core.frameworks import Framework
from chunkgroups.core.models import ChunkGroup, ClusteringMethod, GroupPriority
from chunkgroups.stages import (
    CustomGroupsStage,
    FrameworkCoreStage,
    GraphClusteringStage,
    LargeIsolatedStage,
    PreservedChunksStage,
    RemainderStage,
    StageContext,
)

KB = 1024


def _context(graph, framework=Framework.UNKNOWN, **config):
    return StageContext(graph=graph, config=AnalyzerConfig(**config), framework=framework)


class TestStageContext:
    def test_claim_rejects_double_assignment(self, graph_factory):
        context = _context(graph_factory({"a": 1}))
        group = ChunkGroup(name="g", patterns=["a"], estimated_size=1, gzip_size=0, brotli_size=0, reason="")
        context.claim(group)

        with pytest.raises(ChunkGroupsError):
            context.claim(group)

    def test_unassigned_in_graph_order(self, graph_factory):
        context = _context(graph_factory({"c": 1, "a": 1, "b": 1}))
        context.assigned.add("a")
        assert context.unassigned() == ["c", "b"]


class TestCustomGroupsStage:
    def test_claims_matching_packages(self, graph_factory):
        graph = graph_factory({"date-fns": 10, "dayjs": 5, "lodash": 7})
        context = _context(graph, custom_groups={"dates": ["date-fns", "dayjs"]})
        CustomGroupsStage().run(context)

        assert len(context.groups) == 1
        group = context.groups[0]
        assert group.name == "dates"
        assert group.patterns == ["date-fns", "dayjs"]
        assert group.estimated_size == 15
        assert group.reason == "User-defined custom group"
        assert group.clustering_method is ClusteringMethod.CUSTOM
        assert context.assigned == {"date-fns", "dayjs"}

    def test_unmatched_group_warns(self, graph_factory):
        context = _context(graph_factory({"lodash": 7}), custom_groups={"charts": ["recharts"]})
        CustomGroupsStage().run(context)

        assert context.groups == []
        assert [w.message for w in context.diagnostics if w.is_warning] == [
            "No packages matched for custom group charts"
        ]

    def test_overlapping_groups_never_duplicate(self, graph_factory):
        graph = graph_factory({"a": 1, "b": 1})
        context = _context(graph, custom_groups={"first": ["a", "b"], "second": ["b"]})
        CustomGroupsStage().run(context)

        assert [group.name for group in context.groups] == ["first"]
        assert any("already assigned" in d.message for d in context.diagnostics)


class TestPreservedChunksStage:
    def _graph(self, graph_factory):
        sizes = {name: (gzip * 3, gzip, gzip) for name, gzip in
                 {"p1": 8 * KB, "p2": 6 * KB, "p3": 4 * KB, "p4": 2 * KB, "other": KB}.items()}
        return graph_factory(sizes)

    def test_within_budget(self, graph_factory):
        chunk = PreservedChunkConfig(name="vendor", patterns=["p3", "p4"])
        context = _context(self._graph(graph_factory), preserved_chunks=[chunk])
        PreservedChunksStage().run(context)

        assert [group.name for group in context.groups] == ["vendor"]
        assert context.groups[0].reason == "Preserved chunk"
        assert context.groups[0].metadata.needs_manual_split is False

    def test_auto_split_into_ordered_sub_chunks(self, graph_factory):
        chunk = PreservedChunkConfig(
            name="vendor", patterns=["p1", "p2", "p3", "p4"], max_size=14 * KB, split_strategy="auto"
        )
        context = _context(self._graph(graph_factory), preserved_chunks=[chunk])
        PreservedChunksStage().run(context)

        assert [group.name for group in context.groups] == ["vendor-1", "vendor-2"]
        first, second = context.groups
        assert first.patterns == ["p1", "p2"]
        assert first.gzip_size == 14 * KB
        assert second.patterns == ["p3", "p4"]
        assert first.metadata.split_index == 1
        assert second.metadata.split_index == 2
        assert second.metadata.original_chunk_name == "vendor"
        assert first.reason == "Auto-split from vendor (TCP optimization)"
        assert "other" not in context.assigned

    def test_manual_oversized_chunk_is_flagged(self, graph_factory):
        chunk = PreservedChunkConfig(name="vendor", patterns=["p1", "p2", "p3", "p4"])
        context = _context(self._graph(graph_factory), preserved_chunks=[chunk])
        PreservedChunksStage().run(context)

        assert len(context.groups) == 1
        group = context.groups[0]
        assert group.metadata.needs_manual_split is True
        assert group.reason == "Preserved chunk (manual)"
        assert len([d for d in context.diagnostics if d.is_warning]) == 1

    def test_budget_defaults_to_initial_chunk_max_size(self, graph_factory):
        chunk = PreservedChunkConfig(name="vendor", patterns=["p1", "p2"], split_strategy="auto")
        context = _context(self._graph(graph_factory), preserved_chunks=[chunk], initial_chunk_max_size=8 * KB)
        PreservedChunksStage().run(context)

        assert [group.patterns for group in context.groups] == [["p1"], ["p2"]]


class TestFrameworkCoreStage:
    def test_claims_critical_group(self, graph_factory):
        graph = graph_factory({"react": 10, "lodash": 5, "react-dom": 100, "scheduler": 3, "styled-components": 20})
        context = _context(graph, framework=Framework.REACT)
        FrameworkCoreStage().run(context)

        assert len(context.groups) == 1
        group = context.groups[0]
        assert group.name == "vendor/react-core"
        assert group.patterns == ["react", "react-dom", "scheduler"]
        assert group.metadata.priority is GroupPriority.CRITICAL
        assert group.metadata.description == "React core runtime"
        assert "styled-components" not in context.assigned

    def test_unknown_framework_claims_nothing(self, graph_factory):
        context = _context(graph_factory({"lodash": 5}))
        FrameworkCoreStage().run(context)
        assert context.groups == []

    def test_already_claimed_packages_warn(self, graph_factory):
        graph = graph_factory({"react": 10, "react-dom": 100})
        context = _context(graph, framework=Framework.REACT)
        context.assigned.update({"react", "react-dom"})
        FrameworkCoreStage().run(context)

        assert context.groups == []
        assert context.diagnostics[-1].message == (
            "All packages in framework group react-core are already assigned to other groups"
        )


class TestLargeIsolatedStage:
    def test_isolation_depends_on_unassigned_importers(self, graph_factory):
        sizes = {"pkg-x": 150 * KB, "pkg-y": 150 * KB}
        sizes.update({f"imp-{i}": KB for i in range(10)})
        edges = [(f"imp-{i}", "pkg-y") for i in range(10)] + [("imp-0", "pkg-x")]
        context = _context(graph_factory(sizes, edges))
        LargeIsolatedStage().run(context)

        assert [group.name for group in context.groups] == ["vendor/pkg-x"]
        assert context.groups[0].patterns == ["pkg-x"]
        assert context.groups[0].reason == "Large package (150.0KB)"
        assert "pkg-y" not in context.assigned

    def test_very_large_packages_are_always_isolated(self, graph_factory):
        sizes = {"huge": 300 * KB}
        sizes.update({f"imp-{i}": KB for i in range(10)})
        context = _context(graph_factory(sizes, [(f"imp-{i}", "huge") for i in range(10)]))
        LargeIsolatedStage().run(context)

        assert [group.name for group in context.groups] == ["vendor/huge"]

    def test_importer_count_shrinks_as_packages_are_isolated(self, graph_factory):
        sizes = {"big": 130 * KB, "shared": 120 * KB, "b": KB, "c": KB}
        edges = [("big", "shared"), ("b", "shared"), ("c", "shared")]
        context = _context(graph_factory(sizes, edges))
        LargeIsolatedStage().run(context)

        assert [group.name for group in context.groups] == ["vendor/big", "vendor/shared"]

    def test_safe_names(self, graph_factory):
        context = _context(graph_factory({"@scope/big.lib": 120 * KB}))
        LargeIsolatedStage().run(context)

        assert context.groups[0].name == "vendor/scope-big-lib"


class TestGraphClusteringStage:
    def test_materializes_cluster(self, graph_factory, co_import_sizes, co_import_edges):
        context = _context(graph_factory(co_import_sizes, co_import_edges))
        GraphClusteringStage().run(context)

        assert len(context.groups) == 1
        group = context.groups[0]
        assert group.name == "vendor/pkg-a"
        assert group.patterns == ["pkg-a", "pkg-b", "pkg-c"]
        assert group.estimated_size == 30 * KB
        assert group.reason == "Co-imported cluster (cohesion: 1.00, avg freq: 4.0x)"
        assert group.metadata.central_package == "pkg-a"
        assert group.metadata.cohesion == 1.0

    def test_small_clusters_are_discarded(self, graph_factory, co_import_edges):
        sizes = {f"app-{i}": KB for i in range(1, 5)}
        sizes.update({"pkg-a": KB, "pkg-b": KB, "pkg-c": KB})
        context = _context(graph_factory(sizes, co_import_edges))
        GraphClusteringStage().run(context)

        assert context.groups == []
        assert context.assigned == set()


class TestRemainderStage:
    def test_collects_unassigned_in_graph_order(self, graph_factory):
        context = _context(graph_factory({"b": 2048, "a": 1024, "c": 512}))
        context.assigned.add("a")
        RemainderStage().run(context)

        group = context.groups[0]
        assert group.name == "vendor/misc"
        assert group.patterns == ["b", "c"]
        assert group.reason == "Miscellaneous 2 packages (2.5KB)"

    def test_nothing_left(self, graph_factory):
        context = _context(graph_factory({"a": 1}))
        context.assigned.add("a")
        RemainderStage().run(context)
        assert context.groups == []
