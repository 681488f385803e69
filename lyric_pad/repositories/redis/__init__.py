"""
Redis repositories package.
"""

from .library_repo import LibraryRepoRedis

__all__ = ["LibraryRepoRedis"]
