"""TTL disk cache for upstream API responses.

One JSON file per key under the cache root:

    {"data": <payload>, "timestamp": "<ISO-8601 UTC>", "ttl_minutes": <int>}

Expired entries are deleted lazily on read, or in bulk via cleanup_expired().
No locking: concurrent writers to the same key race and the last replace wins.
Writes go through a temp file + os.replace so readers never see partial JSON.
"""

import hashlib
import logging
import os
import re
import tempfile
from collections.abc import Callable
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ValidationError, field_validator

logger = logging.getLogger(__name__)

T = TypeVar("T")

ENTRY_SUFFIX = ".json"

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9_-]")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CacheError(Exception):
    """Base class for cache failures that are not plain I/O errors."""


class CacheCorruptedError(CacheError):
    """A cache file exists and is readable but is not a valid entry."""

    def __init__(self, key: str, path: Path, reason: str):
        super().__init__(f"Corrupted cache entry for key {key!r} ({path.name}): {reason}")
        self.key = key
        self.path = path


class CacheEntry(BaseModel, Generic[T]):
    data: T
    timestamp: datetime
    ttl_minutes: int

    @field_validator("timestamp")
    @classmethod
    def _assume_utc(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    def is_expired(self, now: datetime) -> bool:
        # Plain number comparison: timestamp + ttl may not fit in a datetime.
        return (now - self.timestamp).total_seconds() > self.ttl_minutes * 60

    def age_minutes(self, now: datetime) -> int:
        return int((now - self.timestamp).total_seconds() // 60)


class DiskCache:
    """File-per-key cache with entry-specific TTLs.

    Safe to share across request handlers: the only state held is the root
    path and the clock. Every operation does blocking file I/O.
    """

    def __init__(self, root: str | os.PathLike, clock: Callable[[], datetime] = utcnow):
        self.root = Path(root)
        self._clock = clock
        if not self.root.is_dir():
            self.root.mkdir(parents=True, exist_ok=True)
            logger.info("Created cache directory: %s", self.root)

    def path_for(self, key: str) -> Path:
        """Map a key to its entry file.

        The sanitized key keeps the filename readable; the digest of the raw
        key keeps "a/b" and "a?b" from landing in the same file.
        """
        sanitized = _UNSAFE_CHARS.sub("_", key)
        digest = hashlib.sha256(key.encode("utf-8")).hexdigest()[:12]
        return self.root / f"{sanitized}-{digest}{ENTRY_SUFFIX}"

    def get(self, key: str, schema: Any = None) -> Any | None:
        """Return the cached payload for `key`, or None on miss/expiry.

        `schema` is the expected payload type (a pydantic model, or anything
        TypeAdapter accepts). Without it the raw JSON payload is returned.

        Raises:
            OSError: the entry file exists but cannot be read.
            CacheCorruptedError: the file is not a valid entry for `schema`.
        """
        path = self.path_for(key)
        try:
            content = path.read_bytes()
        except FileNotFoundError:
            logger.debug("Cache miss: %s (file does not exist)", key)
            return None

        entry_type = CacheEntry[schema] if schema is not None else CacheEntry[Any]
        try:
            entry = entry_type.model_validate_json(content)
        except ValidationError as e:
            raise CacheCorruptedError(key, path, f"{e.error_count()} validation error(s)") from e

        now = self._clock()
        if entry.is_expired(now):
            logger.debug(
                "Cache expired: %s (age: %d minutes, ttl: %d minutes)",
                key, entry.age_minutes(now), entry.ttl_minutes,
            )
            try:
                path.unlink(missing_ok=True)
            except OSError as e:
                logger.warning("Failed to remove expired cache file %s: %s", path, e)
            return None

        logger.debug(
            "Cache hit: %s (age: %d minutes, ttl: %d minutes)",
            key, entry.age_minutes(now), entry.ttl_minutes,
        )
        return entry.data

    def set(self, key: str, data: Any, ttl_minutes: int) -> None:
        """Store `data` under `key`, replacing any previous entry."""
        entry = CacheEntry[Any](data=data, timestamp=self._clock(), ttl_minutes=ttl_minutes)
        content = entry.model_dump_json(by_alias=True)
        path = self.path_for(key)

        fd, tmp_name = tempfile.mkstemp(dir=self.root, prefix=".", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(content)
            os.replace(tmp_name, path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

        logger.debug("Cached data for key: %s (ttl: %d minutes)", key, ttl_minutes)

    def delete(self, key: str) -> None:
        path = self.path_for(key)
        try:
            path.unlink()
        except FileNotFoundError:
            return
        logger.debug("Deleted cache entry: %s", key)

    def clear(self) -> int:
        """Remove every entry regardless of validity. Returns the number removed."""
        count = 0
        for path in self._entry_files():
            try:
                path.unlink()
            except FileNotFoundError:
                # Removed concurrently by another handler or process.
                continue
            count += 1

        logger.info("Cleared %d cache entries", count)
        return count

    def cleanup_expired(self) -> int:
        """Delete expired entries. Unreadable or malformed files are skipped."""
        count = 0
        now = self._clock()
        for path in self._entry_files():
            try:
                entry = CacheEntry[Any].model_validate_json(path.read_bytes())
            except (OSError, ValidationError):
                continue
            if not entry.is_expired(now):
                continue
            try:
                path.unlink()
            except OSError as e:
                logger.error("Failed to remove expired cache file %s: %s", path, e)
                continue
            count += 1

        if count > 0:
            logger.info("Cleaned up %d expired cache entries", count)
        return count

    def entry_count(self) -> int:
        return sum(1 for _ in self._entry_files())

    def _entry_files(self) -> list[Path]:
        if not self.root.is_dir():
            return []
        return [p for p in self.root.iterdir() if p.suffix == ENTRY_SUFFIX and p.is_file()]
