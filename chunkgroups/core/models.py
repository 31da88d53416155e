"""
Output model: chunk groups, their metadata, and run diagnostics.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, List, Mapping, Optional


class ClusteringMethod(Enum):
    """Pipeline stage that produced a chunk group."""

    CUSTOM = "custom"
    PRESERVED = "preserved"
    FRAMEWORK_CORE = "framework-core"
    LARGE_ISOLATED = "large-isolated"
    GRAPH_BASED = "graph-based"
    MISC = "misc"


class GroupPriority(Enum):
    """Priority of a built-in framework group."""

    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class DiagnosticLevel(Enum):
    """Severity of a diagnostic event."""

    INFO = "info"
    WARNING = "warning"


@dataclass(frozen=True)
class SizeTotals:
    """Raw and compressed byte totals for a set of packages."""

    total_size: int = 0
    gzip_size: int = 0
    brotli_size: int = 0

    def __add__(self, other: "SizeTotals") -> "SizeTotals":
        return SizeTotals(
            total_size=self.total_size + other.total_size,
            gzip_size=self.gzip_size + other.gzip_size,
            brotli_size=self.brotli_size + other.brotli_size,
        )

    @classmethod
    def sum(cls, totals: Iterable["SizeTotals"]) -> "SizeTotals":
        result = cls()
        for item in totals:
            result = result + item
        return result


@dataclass
class ChunkMetadata:
    """Structured metadata describing how a chunk group was formed."""

    clustering_method: ClusteringMethod

    # graph-based
    cohesion: Optional[float] = None
    co_import_frequency: Optional[float] = None
    central_package: Optional[str] = None

    # framework-core
    priority: Optional[GroupPriority] = None
    description: Optional[str] = None

    # preserved
    split_index: Optional[int] = None
    original_chunk_name: Optional[str] = None
    needs_manual_split: bool = False

    def to_dict(self) -> Dict[str, Any]:
        """Serialize, leaving out fields the producing stage did not set."""
        data: Dict[str, Any] = {"clustering_method": self.clustering_method.value}

        optional_fields = {
            "cohesion": self.cohesion,
            "co_import_frequency": self.co_import_frequency,
            "central_package": self.central_package,
            "priority": self.priority.value if self.priority else None,
            "description": self.description,
            "split_index": self.split_index,
            "original_chunk_name": self.original_chunk_name,
        }
        data.update({key: value for key, value in optional_fields.items() if value is not None})

        if self.needs_manual_split:
            data["needs_manual_split"] = True

        return data


@dataclass
class ChunkGroup:
    """A suggested output chunk and the packages it claims."""

    name: str
    patterns: List[str]
    estimated_size: int
    gzip_size: int
    brotli_size: int
    reason: str
    metadata: Optional[ChunkMetadata] = None

    @classmethod
    def from_sizes(
        cls,
        name: str,
        patterns: List[str],
        sizes: SizeTotals,
        reason: str,
        metadata: Optional[ChunkMetadata] = None,
    ) -> "ChunkGroup":
        return cls(
            name=name,
            patterns=list(patterns),
            estimated_size=sizes.total_size,
            gzip_size=sizes.gzip_size,
            brotli_size=sizes.brotli_size,
            reason=reason,
            metadata=metadata,
        )

    @property
    def clustering_method(self) -> Optional[ClusteringMethod]:
        return self.metadata.clustering_method if self.metadata else None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "name": self.name,
            "patterns": list(self.patterns),
            "estimated_size": self.estimated_size,
            "gzip_size": self.gzip_size,
            "brotli_size": self.brotli_size,
            "reason": self.reason,
        }
        if self.metadata:
            data["metadata"] = self.metadata.to_dict()
        return data


@dataclass
class Diagnostic:
    """A structured event emitted by a pipeline stage."""

    level: DiagnosticLevel
    stage: str
    message: str
    details: Dict[str, Any] = field(default_factory=dict)

    @property
    def is_warning(self) -> bool:
        return self.level is DiagnosticLevel.WARNING

    def to_dict(self) -> Dict[str, Any]:
        return {
            "level": self.level.value,
            "stage": self.stage,
            "message": self.message,
            "details": dict(self.details),
        }


def group_from_dict(data: Mapping[str, Any]) -> ChunkGroup:
    """Rebuild a ChunkGroup from its ``to_dict`` form."""
    metadata = None
    raw_meta = data.get("metadata")
    if raw_meta:
        priority = raw_meta.get("priority")
        metadata = ChunkMetadata(
            clustering_method=ClusteringMethod(raw_meta["clustering_method"]),
            cohesion=raw_meta.get("cohesion"),
            co_import_frequency=raw_meta.get("co_import_frequency"),
            central_package=raw_meta.get("central_package"),
            priority=GroupPriority(priority) if priority else None,
            description=raw_meta.get("description"),
            split_index=raw_meta.get("split_index"),
            original_chunk_name=raw_meta.get("original_chunk_name"),
            needs_manual_split=bool(raw_meta.get("needs_manual_split", False)),
        )

    return ChunkGroup(
        name=data["name"],
        patterns=list(data.get("patterns", [])),
        estimated_size=int(data.get("estimated_size", 0)),
        gzip_size=int(data.get("gzip_size", 0)),
        brotli_size=int(data.get("brotli_size", 0)),
        reason=data.get("reason", ""),
        metadata=metadata,
    )
