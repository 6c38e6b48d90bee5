"""
Integration tests for the Feed Orchestrator.
"""

from datetime import timedelta

import pytest

from feedrank.engines.pagination import FeedWindow
from feedrank.models.activity import FollowEdge, ListenEvent
from feedrank.models.viewer import FeedFilters, ViewerCapabilities
from feedrank.orchestrator import FeedOrchestrator
from feedrank.registry.ranking_cache import RankingCache


@pytest.fixture
def snapshot(make_clip):
    return [
        make_clip("popular", hours_ago=3, listens_count=500, topic_id="t1", creator_id="alice"),
        make_clip("fresh", hours_ago=0.2, listens_count=2, topic_id="t1", creator_id="bob"),
        make_clip("reply", hours_ago=1, parent_clip_id="popular", creator_id="cara"),
        make_clip("sensitive", hours_ago=1, listens_count=900, content_rating="sensitive"),
        make_clip("blocked", hours_ago=1, creator_id="troll"),
        make_clip("rejected", hours_ago=1, moderation={"decision": "reject"}),
        make_clip("hidden", hours_ago=1, status="hidden"),
    ]


@pytest.fixture
def viewer():
    return ViewerCapabilities(blocked_creator_ids=frozenset({"troll"}))


def _ids(clips):
    return [c.clip_id for c in clips]


def test_rank_full_pipeline(snapshot, viewer, now):
    ranked = FeedOrchestrator().rank(snapshot, viewer, FeedFilters(mode="top"), now)

    assert _ids(ranked) == ["popular", "fresh"]
    assert ranked[0].reply_count == 1


def test_rank_applies_narrowing_filters(snapshot, viewer, now):
    filters = FeedFilters(mode="hot", topic_id="t1")
    ranked = FeedOrchestrator().rank(snapshot, viewer, filters, now)

    assert set(_ids(ranked)) == {"popular", "fresh"}


def test_rank_uses_cache(snapshot, viewer, now):
    cache = RankingCache()
    orchestrator = FeedOrchestrator(cache=cache)

    first = orchestrator.rank(snapshot, viewer, FeedFilters(), now)
    second = orchestrator.rank(snapshot, viewer, FeedFilters(), now)

    assert _ids(first) == _ids(second)
    assert cache.stats()["hits"] == 1


def test_cache_misses_after_content_change(snapshot, viewer, now, make_clip):
    cache = RankingCache()
    orchestrator = FeedOrchestrator(cache=cache)

    orchestrator.rank(snapshot, viewer, FeedFilters(), now)
    updated = orchestrator.rank(snapshot + [make_clip("new", hours_ago=0)], viewer, FeedFilters(), now)

    assert "new" in _ids(updated)
    assert cache.stats()["hits"] == 0


def test_rank_feed_resets_window_on_new_criteria(snapshot, viewer, now):
    orchestrator = FeedOrchestrator()
    hot = FeedFilters(mode="hot")
    window = FeedWindow(criteria=hot.criteria_key(), page_size=1)

    first = orchestrator.rank_feed(snapshot, viewer, hot, now, window)
    grown = orchestrator.rank_feed(snapshot, viewer, hot, now, window.next())
    switched = orchestrator.rank_feed(snapshot, viewer, FeedFilters(mode="top"), now, window.next())

    assert len(first.items) == 1 and first.has_more
    assert len(grown.items) == 2 and not grown.has_more
    assert len(switched.items) == 1


def test_today_surface_uses_snapshot_metrics(make_topic, make_clip, now):
    topics = [make_topic("today"), make_topic("busy", days_ago=3), make_topic("quiet", days_ago=3)]
    clips = [make_clip(f"c{i}", topic_id="busy", listens_count=50) for i in range(5)]

    result = FeedOrchestrator().today_surface(topics, clips, now)

    assert result.spotlight.topic_id == "today"
    assert [t.topic_id for t in result.secondary] == ["busy", "quiet"]


def test_recommendations_hide_invisible_clips(make_clip, viewer, now):
    pool = [
        make_clip("heard", topic_id="t1", creator_id="alice"),
        make_clip("good", topic_id="t1", creator_id="bob"),
        make_clip("nsfw", topic_id="t1", creator_id="bob", content_rating="sensitive"),
        make_clip("from-troll", topic_id="t1", creator_id="troll"),
        make_clip("a-reply", topic_id="t1", creator_id="bob", parent_clip_id="heard"),
    ]
    history = [ListenEvent(viewer_id="v", clip_id="heard", listened_at=now - timedelta(minutes=5))]

    result = FeedOrchestrator().recommendations(history, pool, viewer, now)

    assert _ids(result.you_might_like) == ["good"]
    assert _ids(result.similar_voices) == ["good"]


def test_recommendations_resolve_history_of_hidden_clip(make_clip, now):
    viewer = ViewerCapabilities(blocked_creator_ids=frozenset({"alice"}))
    pool = [
        make_clip("heard", topic_id="t1", creator_id="alice"),
        make_clip("other", topic_id="t1", creator_id="bob"),
    ]
    history = [ListenEvent(viewer_id="v", clip_id="heard", listened_at=now)]

    result = FeedOrchestrator().recommendations(history, pool, viewer, now)

    assert _ids(result.you_might_like) == ["other"]


def test_cache_misses_after_text_change(viewer, now, make_clip):
    orchestrator = FeedOrchestrator(cache=RankingCache())
    music = FeedFilters(category="music")

    first = orchestrator.rank([make_clip("a", title="a new song")], viewer, music, now)
    second = orchestrator.rank([make_clip("a", title="breaking news")], viewer, music, now)

    assert _ids(first) == ["a"]
    assert second == []


def test_recommendations_suggest_profiles(make_clip, now):
    viewer = ViewerCapabilities(viewer_id="v", blocked_creator_ids=frozenset({"z"}))
    edges = [
        FollowEdge(follower_id="v", followee_id="a"),
        FollowEdge(follower_id="a", followee_id="x"),
        FollowEdge(follower_id="a", followee_id="z"),
        FollowEdge(follower_id="b", followee_id="z"),
    ]

    result = FeedOrchestrator().recommendations([], [make_clip("c1")], viewer, now, edges)

    assert result.suggested_profiles == ["x"]
    assert FeedOrchestrator().recommendations([], [], viewer, now).suggested_profiles == []
