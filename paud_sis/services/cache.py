"""In-process read cache with tag-based invalidation.

Read views register each cached value under one or more tags
(``student-development-assessments``, ``development-assessments``...). A write
invalidates the tags it touches, and every entry registered under any of them
is dropped, so the next read reloads from the database.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Hashable, Iterable
from typing import Any, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

_MISSING = object()


class CacheTag:
    """Tag names shared by read views and write paths."""

    DEVELOPMENT_ASSESSMENT = "development-assessment"
    DEVELOPMENT_ASSESSMENTS = "development-assessments"
    STUDENT_DEVELOPMENT_ASSESSMENTS = "student-development-assessments"
    STUDENT = "student"
    STUDENTS = "students"
    ACADEMIC_YEAR = "academicYear"
    ACADEMIC_YEARS = "academicYears"


# Every assessment write makes all of these views stale.
ASSESSMENT_WRITE_TAGS: tuple[str, ...] = (
    CacheTag.DEVELOPMENT_ASSESSMENT,
    CacheTag.DEVELOPMENT_ASSESSMENTS,
    CacheTag.STUDENT_DEVELOPMENT_ASSESSMENTS,
    CacheTag.STUDENT,
    CacheTag.STUDENTS,
)


class TagCache:
    """Dictionary cache whose entries are grouped by tag.

    Args:
        enabled: When False every lookup misses and nothing is stored, which
            keeps call sites identical whether caching is on or off.
    """

    def __init__(self, enabled: bool = True) -> None:
        self.enabled = enabled
        self._entries: dict[Hashable, Any] = {}
        self._tags: dict[str, set[Hashable]] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, key: Hashable, default: Any = None) -> Any:
        return self._entries.get(key, default)

    def set(self, key: Hashable, value: Any, tags: Iterable[str]) -> None:
        if not self.enabled:
            return
        self._entries[key] = value
        for tag in tags:
            self._tags.setdefault(tag, set()).add(key)

    async def get_or_load(
        self,
        key: Hashable,
        tags: Iterable[str],
        loader: Callable[[], Awaitable[T]],
    ) -> T:
        """Return the cached value for ``key`` or await ``loader`` and store it.

        ``None`` results are cached too; a missing record stays missing until
        a write invalidates one of its tags.
        """
        cached = self._entries.get(key, _MISSING) if self.enabled else _MISSING
        if cached is not _MISSING:
            return cached
        value = await loader()
        self.set(key, value, tags)
        return value

    def invalidate(self, *tags: str) -> int:
        """Drop every entry registered under any of ``tags``.

        Returns:
            Number of entries removed.
        """
        removed = 0
        for tag in tags:
            for key in self._tags.pop(tag, set()):
                if self._entries.pop(key, _MISSING) is not _MISSING:
                    removed += 1
        if removed:
            logger.debug("Cache invalidated tags=%s entries=%d", tags, removed)
        return removed

    def clear(self) -> None:
        self._entries.clear()
        self._tags.clear()


_cache_instance: TagCache | None = None


def get_tag_cache() -> TagCache:
    """Return the process-wide cache, created on first use from settings."""
    global _cache_instance
    if _cache_instance is None:
        from paud_sis.config import get_settings

        _cache_instance = TagCache(enabled=get_settings().cache_enabled)
    return _cache_instance
