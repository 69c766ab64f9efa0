"""Caches backing the incremental graph."""

from .artifact_store import ArtifactStore, StoredArtifact
from .memo_cache import CacheEntry, MemoCache

__all__ = ["ArtifactStore", "CacheEntry", "MemoCache", "StoredArtifact"]
