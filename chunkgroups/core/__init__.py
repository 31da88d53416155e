"""Core chunkgroups components."""
