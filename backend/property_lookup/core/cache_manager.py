"""
Cache Management Utilities
Command-line tools for property cache administration

Usage:
    python -m property_lookup.core.cache_manager stats
    python -m property_lookup.core.cache_manager sweep --older-than-days 90
"""

import argparse
import asyncio
import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from property_lookup.core.config import get_settings
from property_lookup.database.connection import ConnectionPoolManager, ensure_schema
from property_lookup.services.repositories.property_cache_repository import (
    PostgresPropertyCache,
    PropertyCacheStore,
)

logger = logging.getLogger(__name__)


class CacheManager:
    """Command-line cache management utilities."""

    def __init__(self, cache: Optional[PropertyCacheStore] = None):
        self.cache = cache
        self.initialized = cache is not None

    async def initialize(self) -> None:
        """Connect to the database-backed cache."""
        if self.initialized:
            return
        if not get_settings().database_url:
            raise RuntimeError("DATABASE_URL is not configured")

        await ensure_schema()
        self.cache = PostgresPropertyCache()
        self.initialized = True
        logger.info("Cache manager initialized successfully")

    def _ensure_initialized(self):
        if not self.initialized or self.cache is None:
            raise RuntimeError("Cache manager not initialized. Call initialize() first.")

    async def get_stats(self) -> Dict[str, Any]:
        """Get cache statistics."""
        self._ensure_initialized()

        stats = await self.cache.stats()
        if stats is None:
            raise RuntimeError("Cache statistics unavailable")

        return {
            "total_entries": stats.total_entries,
            "avg_access_count": stats.avg_access_count,
            "oldest_entry": stats.oldest_entry.isoformat() if stats.oldest_entry else None,
            "newest_entry": stats.newest_entry.isoformat() if stats.newest_entry else None,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }

    async def sweep(self, older_than_days: int) -> int:
        """Delete entries not refreshed within ``older_than_days``."""
        self._ensure_initialized()

        deleted = await self.cache.sweep(older_than_days)
        logger.info(f"Cache sweep completed: {deleted} entries deleted")
        return deleted

    async def close(self) -> None:
        await ConnectionPoolManager.close()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Property Lookup Cache Management Utilities")
    parser.add_argument("command", choices=["stats", "sweep"], help="Command to execute")
    parser.add_argument(
        "--older-than-days",
        type=int,
        default=None,
        help="Retention age for sweep (default: CACHE_RETENTION_DAYS)",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable verbose logging")
    return parser


async def main(argv=None, cache_manager: Optional[CacheManager] = None) -> int:
    """Main CLI interface for cache management."""
    args = build_parser().parse_args(argv)

    log_level = logging.INFO if args.verbose else logging.WARNING
    logging.basicConfig(level=log_level, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")

    cache_manager = cache_manager or CacheManager()
    try:
        await cache_manager.initialize()
    except Exception as e:
        print(f"Failed to initialize cache manager: {str(e)}")
        return 1

    try:
        if args.command == "stats":
            result = await cache_manager.get_stats()
            print("=== Cache Statistics ===")
            print(f"Timestamp: {result['timestamp']}")
            print(f"Total entries: {result['total_entries']}")
            print(f"Average access count: {result['avg_access_count']:.2f}")
            print(f"Oldest entry: {result['oldest_entry'] or '-'}")
            print(f"Newest entry: {result['newest_entry'] or '-'}")

        elif args.command == "sweep":
            days = args.older_than_days
            if days is None:
                days = get_settings().cache_retention_days
            if days < 1:
                print("--older-than-days must be at least 1")
                return 2
            deleted = await cache_manager.sweep(days)
            print("=== Cache Sweep Results ===")
            print(f"Entries older than {days} days deleted: {deleted}")

    except Exception as e:
        print(f"Command failed: {str(e)}")
        if args.verbose:
            import traceback

            traceback.print_exc()
        return 1
    finally:
        await cache_manager.close()

    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
