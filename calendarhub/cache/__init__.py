"""Occurrence cache and sync-status persistence."""

from .database import DatabaseManager
from .manager import CacheManager
from .models import CachedEvent

__all__ = ["CacheManager", "CachedEvent", "DatabaseManager"]
