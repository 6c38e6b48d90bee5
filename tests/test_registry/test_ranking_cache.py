"""
Unit tests for the Ranking Cache.
"""

from dataclasses import replace
from datetime import timedelta

import pytest

from feedrank.models.viewer import FeedFilters, ViewerCapabilities
from feedrank.registry.ranking_cache import RankingCache, content_fingerprint


@pytest.fixture
def cache():
    return RankingCache(ttl_seconds=5, max_entries=2)


def test_fingerprint_changes_with_content(make_clip):
    clips = [make_clip("a", listens_count=1), make_clip("b")]
    updated = [replace(clips[0], listens_count=2), clips[1]]

    assert content_fingerprint(clips) == content_fingerprint(list(clips))
    assert content_fingerprint(clips) != content_fingerprint(updated)
    assert content_fingerprint(clips) != content_fingerprint(clips[:1])


def test_key_depends_on_viewer_and_filters(cache, now):
    viewer = ViewerCapabilities()
    key = cache.make_key(FeedFilters(), viewer, "fp", now)

    assert key == cache.make_key(FeedFilters(), ViewerCapabilities(), "fp", now)
    assert key != cache.make_key(FeedFilters(mode="top"), viewer, "fp", now)
    assert key != cache.make_key(FeedFilters(), ViewerCapabilities(sensitive_content_allowed=True), "fp", now)
    assert key != cache.make_key(FeedFilters(), viewer, "other", now)


def test_get_and_set(cache, make_clip, now):
    ranked = [make_clip("a")]

    assert cache.get("key", now) is None
    cache.set("key", ranked, now)

    assert cache.get("key", now) == ranked
    assert cache.stats()["hits"] == 1
    assert cache.stats()["misses"] == 1


def test_entries_expire_with_time_bucket(cache, make_clip, now):
    cache.set("key", [make_clip("a")], now)
    assert cache.get("key", now + timedelta(seconds=10)) is None


def test_eviction_keeps_size_bound(cache, now):
    cache.set("first", [], now)
    cache.set("second", [], now)
    cache.set("third", [], now)

    assert cache.stats()["cached_rankings"] == 2
    assert cache.get("first", now) is None
    assert cache.get("third", now) == []


def test_clear(cache, now):
    cache.set("key", [], now)
    assert cache.clear() == 1
    assert cache.stats()["cached_rankings"] == 0


def test_invalid_configuration():
    with pytest.raises(ValueError, match="ttl_seconds"):
        RankingCache(ttl_seconds=0)
    with pytest.raises(ValueError, match="max_entries"):
        RankingCache(max_entries=0)
