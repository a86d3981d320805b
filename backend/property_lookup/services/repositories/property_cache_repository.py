"""
Property Cache Repository - persisted cache of transformed provider records

One row per normalized address. Reads and writes are single statements so
concurrent requests for the same address never lose access-count updates.
Every storage failure is absorbed here: reads degrade to a miss, writes and
maintenance report failure through their return value.
"""

import asyncio
import copy
import json
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, replace
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, Optional

from property_lookup.clients.base.exceptions import PropertyCacheError
from property_lookup.core.address import normalize_address
from property_lookup.database.connection import get_service_connection

logger = logging.getLogger(__name__)

DEFAULT_MAX_AGE_HOURS = 24
DEFAULT_RETENTION_DAYS = 90


@dataclass(frozen=True)
class CachedProperty:
    """A cached property row"""
    key: str
    payload: Dict[str, Any]
    created_at: datetime
    updated_at: datetime
    last_accessed_at: datetime
    access_count: int


@dataclass(frozen=True)
class CacheStats:
    """Aggregate cache statistics"""
    total_entries: int
    avg_access_count: float
    oldest_entry: Optional[datetime] = None
    newest_entry: Optional[datetime] = None


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _as_aware(value: datetime) -> datetime:
    """Naive timestamps are UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def is_cache_fresh(
    updated_at: datetime,
    max_age_hours: float = DEFAULT_MAX_AGE_HOURS,
    now: Optional[datetime] = None,
) -> bool:
    """
    Check if cached data is still fresh.

    Args:
        updated_at: When the entry was last written
        max_age_hours: Age at which the entry becomes stale (exclusive)
        now: Reference time, defaults to the current wall clock

    Returns:
        True if the entry is younger than ``max_age_hours``
    """
    now = _as_aware(now) if now is not None else _utcnow()
    age = now - _as_aware(updated_at)
    return age < timedelta(hours=max_age_hours)


class PropertyCacheStore(ABC):
    """Keyed store of transformed property payloads with access statistics."""

    @abstractmethod
    async def get(self, address: str) -> Optional[CachedProperty]:
        """Look up an entry and record the access. Returns None on miss or failure."""

    @abstractmethod
    async def put(self, address: str, payload: Dict[str, Any]) -> bool:
        """Upsert an entry. Returns False if it could not be stored."""

    @abstractmethod
    async def sweep(self, older_than_days: int = DEFAULT_RETENTION_DAYS) -> int:
        """Delete entries not refreshed within ``older_than_days``. Returns rows removed."""

    @abstractmethod
    async def stats(self) -> Optional[CacheStats]:
        """Aggregate statistics, or None when the store is unavailable."""

    async def health_check(self) -> Dict[str, Any]:
        stats = await self.stats()
        return {
            "status": "healthy" if stats is not None else "unavailable",
            "backend": self.backend_name,
            "total_entries": stats.total_entries if stats else None,
        }

    @property
    def backend_name(self) -> str:
        return self.__class__.__name__


class PostgresPropertyCache(PropertyCacheStore):
    """Cache store over the ``properties`` table."""

    backend_name = "postgres"

    _SELECT_COLUMNS = (
        "address, property_data, created_at, updated_at, last_accessed_at, access_count"
    )

    @staticmethod
    def _decode_payload(raw: Any) -> Optional[Dict[str, Any]]:
        # asyncpg returns JSONB as text unless a codec is registered
        if isinstance(raw, str):
            raw = json.loads(raw)
        return raw if isinstance(raw, dict) else None

    def _row_to_entry(self, row) -> Optional[CachedProperty]:
        payload = self._decode_payload(row["property_data"])
        if payload is None:
            return None
        return CachedProperty(
            key=row["address"],
            payload=payload,
            created_at=row["created_at"],
            updated_at=row["updated_at"],
            last_accessed_at=row["last_accessed_at"],
            access_count=row["access_count"],
        )

    async def get(self, address: str) -> Optional[CachedProperty]:
        key = normalize_address(address)
        query = f"""
            UPDATE properties
            SET last_accessed_at = CURRENT_TIMESTAMP,
                access_count = access_count + 1
            WHERE address = $1
            RETURNING {self._SELECT_COLUMNS}
        """
        try:
            async with get_service_connection() as conn:
                row = await conn.fetchrow(query, key)
            if not row:
                return None
            return self._row_to_entry(row)
        except Exception as e:
            error = PropertyCacheError("Error fetching property from cache", original_error=e)
            logger.error(str(error), extra={"cache_key": key})
            return None

    async def put(self, address: str, payload: Dict[str, Any]) -> bool:
        key = normalize_address(address)
        query = """
            INSERT INTO properties (address, property_data, access_count)
            VALUES ($1, $2::jsonb, 1)
            ON CONFLICT (address)
            DO UPDATE SET
                property_data = EXCLUDED.property_data,
                updated_at = CURRENT_TIMESTAMP,
                last_accessed_at = CURRENT_TIMESTAMP,
                access_count = properties.access_count + 1
        """
        try:
            document = json.dumps(payload, default=str)
            async with get_service_connection() as conn:
                await conn.execute(query, key, document)
            return True
        except Exception as e:
            error = PropertyCacheError("Error saving property to cache", original_error=e)
            logger.error(str(error), extra={"cache_key": key})
            return False

    async def sweep(self, older_than_days: int = DEFAULT_RETENTION_DAYS) -> int:
        query = """
            DELETE FROM properties
            WHERE updated_at < NOW() - make_interval(days => $1::int)
        """
        try:
            async with get_service_connection() as conn:
                result = await conn.execute(query, older_than_days)
            # asyncpg returns the command tag, e.g. "DELETE 3"
            deleted = int(result.split()[-1])
            logger.info(
                "Swept stale property cache entries",
                extra={"deleted": deleted, "older_than_days": older_than_days},
            )
            return deleted
        except Exception as e:
            error = PropertyCacheError("Error sweeping property cache", original_error=e)
            logger.error(str(error))
            return 0

    async def stats(self) -> Optional[CacheStats]:
        query = """
            SELECT
                COUNT(*) AS total_entries,
                COALESCE(AVG(access_count), 0) AS avg_access_count,
                MIN(created_at) AS oldest_entry,
                MAX(created_at) AS newest_entry
            FROM properties
        """
        try:
            async with get_service_connection() as conn:
                row = await conn.fetchrow(query)
            if not row:
                return None
            return CacheStats(
                total_entries=int(row["total_entries"]),
                avg_access_count=float(row["avg_access_count"]),
                oldest_entry=row["oldest_entry"],
                newest_entry=row["newest_entry"],
            )
        except Exception as e:
            error = PropertyCacheError("Error getting cache stats", original_error=e)
            logger.error(str(error))
            return None


class InMemoryPropertyCache(PropertyCacheStore):
    """Process-local cache store with the same semantics as the table.

    Used when no database is configured. Payloads are copied on the way in
    and out so callers cannot mutate stored entries.
    """

    backend_name = "memory"

    def __init__(self, clock: Optional[Callable[[], datetime]] = None):
        self._entries: Dict[str, CachedProperty] = {}
        self._lock = asyncio.Lock()
        self._clock = clock or _utcnow

    @staticmethod
    def _copy_payload(payload: Dict[str, Any]) -> Dict[str, Any]:
        # Mirror JSONB storage: what comes back is what JSON can represent
        return json.loads(json.dumps(payload, default=str))

    async def get(self, address: str) -> Optional[CachedProperty]:
        key = normalize_address(address)
        async with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            entry = replace(
                entry,
                last_accessed_at=self._clock(),
                access_count=entry.access_count + 1,
            )
            self._entries[key] = entry
        return replace(entry, payload=copy.deepcopy(entry.payload))

    async def put(self, address: str, payload: Dict[str, Any]) -> bool:
        key = normalize_address(address)
        try:
            document = self._copy_payload(payload)
        except (TypeError, ValueError) as e:
            error = PropertyCacheError("Error saving property to cache", original_error=e)
            logger.error(str(error), extra={"cache_key": key})
            return False

        async with self._lock:
            now = self._clock()
            existing = self._entries.get(key)
            if existing is None:
                self._entries[key] = CachedProperty(
                    key=key,
                    payload=document,
                    created_at=now,
                    updated_at=now,
                    last_accessed_at=now,
                    access_count=1,
                )
            else:
                self._entries[key] = replace(
                    existing,
                    payload=document,
                    updated_at=now,
                    last_accessed_at=now,
                    access_count=existing.access_count + 1,
                )
        return True

    async def sweep(self, older_than_days: int = DEFAULT_RETENTION_DAYS) -> int:
        async with self._lock:
            cutoff = self._clock() - timedelta(days=older_than_days)
            stale = [
                key for key, entry in self._entries.items() if entry.updated_at < cutoff
            ]
            for key in stale:
                del self._entries[key]
        if stale:
            logger.info(
                "Swept stale property cache entries",
                extra={"deleted": len(stale), "older_than_days": older_than_days},
            )
        return len(stale)

    async def stats(self) -> Optional[CacheStats]:
        async with self._lock:
            entries = list(self._entries.values())
        if not entries:
            return CacheStats(total_entries=0, avg_access_count=0.0)
        return CacheStats(
            total_entries=len(entries),
            avg_access_count=sum(e.access_count for e in entries) / len(entries),
            oldest_entry=min(e.created_at for e in entries),
            newest_entry=max(e.created_at for e in entries),
        )
