"""
Configuration models for chunkgroups using Pydantic v2.
"""

import json
from pathlib import Path
from typing import Literal, Optional, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from chunkgroups.core.errors import ConfigurationError

KB = 1024

# Payload deliverable in the first TCP congestion window (IW10)
TCP_INITIAL_WINDOW_SIZE = 14 * KB


class _ConfigModel(BaseModel):
    """Accept both snake_case and the camelCase keys of chunks-config.json."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class PreservedChunkConfig(_ConfigModel):
    """A chunk that must ship with the initial HTML."""

    name: str = Field(description="Chunk name")
    patterns: list[str] = Field(description="Package patterns claimed by the chunk")
    max_size: Optional[int] = Field(
        default=None,
        gt=0,
        description="Gzipped byte budget; falls back to initial_chunk_max_size",
    )
    split_strategy: Literal["auto", "manual"] = Field(
        default="manual",
        description="What to do when the chunk exceeds its budget",
    )
    reason: Optional[str] = Field(default=None)

    @field_validator("patterns")
    @classmethod
    def validate_patterns(cls, v: list[str]) -> list[str]:
        """Reject empty pattern lists and blank patterns."""
        if not v:
            raise ValueError("patterns must not be empty")
        if any(not pattern.strip() for pattern in v):
            raise ValueError("patterns must not contain blank entries")
        return v


class ClusteringConfig(_ConfigModel):
    """Tunables for the large-package and co-import clustering stages."""

    min_co_import_count: int = Field(default=3, ge=1, description="Minimum shared importers")
    min_cohesion: float = Field(default=0.5, ge=0.0, le=1.0)
    min_cluster_size: int = Field(default=20 * KB, ge=0, description="Smallest cluster in bytes")
    very_large_package_threshold: int = Field(
        default=250 * KB,
        ge=0,
        description="Packages at or above this size are isolated regardless of importers",
    )
    max_isolated_importers: int = Field(default=2, ge=0)


class BudgetConfig(_ConfigModel):
    """Size budgets checked after analysis. Limits are in KB."""

    total_size: Optional[float] = Field(default=None, gt=0)
    gzip_size: Optional[float] = Field(default=None, gt=0)
    brotli_size: Optional[float] = Field(default=None, gt=0)
    chunk_size: Optional[float] = Field(default=None, gt=0)
    warn_threshold: float = Field(default=0.9, gt=0.0, le=1.0)
    fail_on_exceed: bool = Field(default=False)

    @property
    def enabled(self) -> bool:
        return any(
            limit is not None
            for limit in (self.total_size, self.gzip_size, self.brotli_size, self.chunk_size)
        )


class AnalyzerConfig(_ConfigModel):
    """Main configuration model for chunkgroups."""

    large_package_threshold: int = Field(default=100 * KB, ge=0)
    initial_chunk_max_size: int = Field(
        default=TCP_INITIAL_WINDOW_SIZE,
        gt=0,
        description="Default gzipped budget for preserved chunks",
    )
    preserved_chunks: list[PreservedChunkConfig] = Field(default_factory=list)
    custom_groups: dict[str, list[str]] = Field(default_factory=dict)
    ignore: list[str] = Field(default_factory=list)
    clustering: ClusteringConfig = Field(default_factory=ClusteringConfig)
    budget: BudgetConfig = Field(default_factory=BudgetConfig)

    @model_validator(mode="after")
    def validate_config(self) -> "AnalyzerConfig":
        """Cross-field validation."""
        names = [chunk.name for chunk in self.preserved_chunks]
        duplicates = sorted({name for name in names if names.count(name) > 1})
        if duplicates:
            raise ValueError(f"Duplicate preserved chunk names: {', '.join(duplicates)}")

        clash = sorted(set(names) & set(self.custom_groups))
        if clash:
            raise ValueError(f"Names used by both custom groups and preserved chunks: {', '.join(clash)}")
        return self


def load_config(config_path: Union[str, Path]) -> AnalyzerConfig:
    """
    Load configuration from a YAML or JSON file.

    Args:
        config_path: Path to configuration file

    Returns:
        Parsed configuration

    Raises:
        ConfigurationError: If configuration is invalid
    """
    config_file = Path(config_path)
    if not config_file.exists():
        raise ConfigurationError(f"Configuration file not found: {config_path}")

    try:
        with config_file.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f)

        if not data:
            data = {}
        if not isinstance(data, dict):
            raise ValueError("top-level value must be a mapping")

        return AnalyzerConfig.model_validate(data)

    except (yaml.YAMLError, ValueError) as e:
        raise ConfigurationError(f"Invalid configuration: {e}", {"path": str(config_path)}) from e


def save_config(config: AnalyzerConfig, config_path: Union[str, Path]) -> None:
    """
    Save configuration to a YAML file, or JSON when the suffix is ``.json``.

    Args:
        config: Configuration to save
        config_path: Output path
    """
    try:
        config_file = Path(config_path)
        config_file.parent.mkdir(parents=True, exist_ok=True)
        data = config.model_dump(by_alias=True, exclude_defaults=True)

        with config_file.open("w", encoding="utf-8") as f:
            if config_file.suffix == ".json":
                json.dump(data, f, indent=2)
                f.write("\n")
            else:
                yaml.safe_dump(data, f, default_flow_style=False, sort_keys=True)
    except OSError as e:
        raise ConfigurationError(f"Failed to save configuration: {e}") from e


def get_default_config() -> AnalyzerConfig:
    """Get default configuration."""
    return AnalyzerConfig()
