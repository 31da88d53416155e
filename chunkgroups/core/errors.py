"""
Core exception classes for chunkgroups.
"""

from typing import Any, Optional


class ChunkGroupsError(Exception):
    """Base exception for all chunkgroups errors."""
    
    def __init__(self, message: str, details: Optional[dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ConfigurationError(ChunkGroupsError):
    """Raised when configuration is invalid or missing."""
    pass


class StatsParseError(ChunkGroupsError):
    """Raised when a bundle stats payload cannot be parsed."""
    
    def __init__(self, source: str, message: str, details: Optional[dict[str, Any]] = None) -> None:
        super().__init__(f"Failed to parse stats from {source}: {message}", details)
        self.source = source
