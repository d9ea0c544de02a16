"""Core services: range resolution, dedup, storage backends, metadata extraction."""
from audiovault.core.library import AudioLibrary
from audiovault.core.ranges import resolve_range

__all__ = ["AudioLibrary", "resolve_range"]
