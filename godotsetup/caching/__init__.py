"""Persistent artifact cache shared between CI jobs."""

from .store import ArtifactCache, get_default_cache_dir

__all__ = ["ArtifactCache", "get_default_cache_dir"]
