"""
Pytest configuration and shared builders for chunkgroups tests.
"""

import json
from pathlib import Path
from typing import Callable, Dict, Iterable, Tuple, Union

import pytest

from chunkgroups.core.graph import DependencyGraph, PackageNode

KB = 1024

SizeSpec = Union[int, Tuple[int, int, int]]


def _sizes(spec: SizeSpec) -> Tuple[int, int, int]:
    if isinstance(spec, tuple):
        return spec
    return spec, spec // 3, spec // 4


@pytest.fixture
def graph_factory() -> Callable[..., DependencyGraph]:
    """
    Build a DependencyGraph directly from sizes and package edges.

    Sizes are either a raw byte count (gzip and brotli derived from it) or a
    ``(total, gzip, brotli)`` tuple.
    """

    def build(sizes: Dict[str, SizeSpec], edges: Iterable[Tuple[str, str]] = ()) -> DependencyGraph:
        packages: Dict[str, PackageNode] = {}
        for name, spec in sizes.items():
            total, gzip, brotli = _sizes(spec)
            packages[name] = PackageNode(
                name=name,
                total_size=total,
                gzip_size=gzip,
                brotli_size=brotli,
                modules=[f"/app/node_modules/{name}/index.js"],
            )
        for source, target in edges:
            packages[source].imports.add(target)
            packages[target].imported_by.add(source)
        return DependencyGraph(packages)

    return build


@pytest.fixture
def stats_factory() -> Callable[..., dict]:
    """
    Build a v2 visualizer stats payload with one module per package.

    An ``/app/src/main.ts`` module importing every package is included so the
    payload also carries non-package modules.
    """

    def build(sizes: Dict[str, SizeSpec], edges: Iterable[Tuple[str, str]] = ()) -> dict:
        node_parts: dict = {}
        node_metas: dict = {}

        app_uid = "app-main"
        node_metas[app_uid] = {
            "id": "/app/src/main.ts",
            "moduleParts": {"main.js": "part-app"},
            "imported": [],
            "importedBy": [],
        }
        node_parts["part-app"] = {"renderedLength": 500, "gzipLength": 200, "brotliLength": 150}

        for name, spec in sizes.items():
            total, gzip, brotli = _sizes(spec)
            uid = f"mod-{name}"
            part_uid = f"part-{name}"
            node_parts[part_uid] = {"renderedLength": total, "gzipLength": gzip, "brotliLength": brotli}
            node_metas[uid] = {
                "id": f"/app/node_modules/{name}/index.js",
                "moduleParts": {"vendor.js": part_uid},
                "imported": [],
                "importedBy": [{"uid": app_uid}],
            }
            node_metas[app_uid]["imported"].append({"uid": uid})

        for source, target in edges:
            node_metas[f"mod-{source}"]["imported"].append({"uid": f"mod-{target}"})
            node_metas[f"mod-{target}"]["importedBy"].append({"uid": f"mod-{source}"})

        return {
            "version": 2,
            "tree": {"name": "root", "children": []},
            "nodeParts": node_parts,
            "nodeMetas": node_metas,
        }

    return build


@pytest.fixture
def co_import_sizes() -> Dict[str, SizeSpec]:
    """Three 10KB packages imported together by four small importers."""
    sizes: Dict[str, SizeSpec] = {f"app-{i}": 1 * KB for i in range(1, 5)}
    sizes.update({"pkg-a": 10 * KB, "pkg-b": 10 * KB, "pkg-c": 10 * KB})
    return sizes


@pytest.fixture
def co_import_edges() -> list:
    """Every importer imports pkg-a/b/c, which import each other in a ring."""
    edges = [
        (f"app-{i}", target)
        for i in range(1, 5)
        for target in ("pkg-a", "pkg-b", "pkg-c")
    ]
    edges += [("pkg-a", "pkg-b"), ("pkg-b", "pkg-c"), ("pkg-c", "pkg-a")]
    return edges


@pytest.fixture
def write_stats(tmp_path: Path) -> Callable[[dict], Path]:
    """Write a stats payload to ``tmp_path/stats.json``."""

    def write(stats: dict, name: str = "stats.json") -> Path:
        path = tmp_path / name
        path.write_text(json.dumps(stats), encoding="utf-8")
        return path

    return write


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )
