"""Unit tests for the tag-invalidated read cache (paud_sis/services/cache.py)."""

from __future__ import annotations

from unittest.mock import AsyncMock

from paud_sis.services.cache import ASSESSMENT_WRITE_TAGS, CacheTag, TagCache


async def test_get_or_load_calls_loader_once():
    """The second lookup is served from memory without awaiting the loader."""
    cache = TagCache()
    loader = AsyncMock(return_value=["row"])

    first = await cache.get_or_load("k", [CacheTag.STUDENTS], loader)
    second = await cache.get_or_load("k", [CacheTag.STUDENTS], loader)

    assert first == second == ["row"]
    assert loader.await_count == 1, f"Loader awaited {loader.await_count} times"


async def test_none_results_are_cached_until_invalidated():
    cache = TagCache()
    loader = AsyncMock(return_value=None)

    await cache.get_or_load("missing", [CacheTag.STUDENT], loader)
    await cache.get_or_load("missing", [CacheTag.STUDENT], loader)
    assert loader.await_count == 1

    cache.invalidate(CacheTag.STUDENT)
    await cache.get_or_load("missing", [CacheTag.STUDENT], loader)
    assert loader.await_count == 2


def test_invalidate_drops_entries_under_any_given_tag():
    cache = TagCache()
    cache.set("list", 1, [CacheTag.DEVELOPMENT_ASSESSMENTS])
    cache.set("report", 2, [CacheTag.STUDENT, CacheTag.STUDENT_DEVELOPMENT_ASSESSMENTS])
    cache.set("years", 3, [CacheTag.ACADEMIC_YEARS])

    removed = cache.invalidate(*ASSESSMENT_WRITE_TAGS)

    assert removed == 2, f"Expected 2 entries removed, got {removed}"
    assert cache.get("list") is None
    assert cache.get("report") is None
    assert cache.get("years") == 3


def test_invalidate_unknown_tag_is_a_noop():
    cache = TagCache()
    cache.set("list", 1, [CacheTag.STUDENTS])

    assert cache.invalidate("no-such-tag") == 0
    assert len(cache) == 1


async def test_disabled_cache_always_reloads():
    cache = TagCache(enabled=False)
    loader = AsyncMock(return_value="fresh")

    await cache.get_or_load("k", [CacheTag.STUDENTS], loader)
    await cache.get_or_load("k", [CacheTag.STUDENTS], loader)

    assert loader.await_count == 2
    assert len(cache) == 0


def test_clear_empties_everything():
    cache = TagCache()
    cache.set("a", 1, [CacheTag.STUDENTS])
    cache.clear()

    assert len(cache) == 0
    assert cache.invalidate(CacheTag.STUDENTS) == 0


def test_assessment_writes_touch_assessment_and_student_views_only():
    assert set(ASSESSMENT_WRITE_TAGS) == {
        "development-assessment",
        "development-assessments",
        "student-development-assessments",
        "student",
        "students",
    }
