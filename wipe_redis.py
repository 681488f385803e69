#!/usr/bin/env python3
"""
Wipe the stored lyric library from Redis.

Deletes the snapshot key and announces the change, so any running API
process drops its in-memory songs as well.
"""

import sys

import redis

from lyric_pad.core.config import settings
from lyric_pad.repositories.redis.library_repo import LibraryRepoRedis


def wipe_redis_data():
    """Delete the library snapshot key."""
    try:
        repo = LibraryRepoRedis(settings.REDIS_URL, settings.CHANGES_CHANNEL)
        repo.redis_client.ping()
        print("✓ Connected to Redis")

        raw = repo.get(settings.STORAGE_KEY)
        if raw is None:
            print(f"✓ Nothing stored under {settings.STORAGE_KEY} (already empty)")
            return

        print(f"Found library snapshot under {settings.STORAGE_KEY} ({len(raw)} bytes)")
        print()
        response = input("Delete every song and version? (yes/no): ").strip().lower()

        if response != 'yes':
            print("✗ Cancelled")
            return

        repo.delete(settings.STORAGE_KEY)
        print("✓ Library wiped!")

    except redis.ConnectionError:
        print("✗ Error: Cannot connect to Redis")
        print(f"  URL: {settings.REDIS_URL}")
        print("  Make sure Redis is running: docker run -p 6379:6379 redis")
        sys.exit(1)
    except redis.RedisError as e:
        print(f"✗ Error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    print("=" * 70)
    print("WIPE LYRIC LIBRARY")
    print("=" * 70)
    print()

    if not settings.USE_REDIS:
        print("⚠ WARNING: USE_REDIS is False")
        print("  The API keeps songs in memory; this only clears Redis")
        print()
        response = input("Continue anyway? (yes/no): ").strip().lower()
        if response != 'yes':
            print("✗ Cancelled")
            sys.exit(0)
        print()

    wipe_redis_data()
