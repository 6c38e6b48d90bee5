"""
Unit tests for the visibility filter and feed filters.
"""

from datetime import datetime, timezone

import pytest

from feedrank.classification.classifier import KeywordClassifier
from feedrank.engines.visibility import apply_feed_filters, filter_visible
from feedrank.models.viewer import FeedFilters, ViewerCapabilities


@pytest.fixture
def viewer():
    return ViewerCapabilities(
        sensitive_content_allowed=False,
        city="Lagos",
        blocked_creator_ids=frozenset({"blocked-creator"})
    )


def _ids(clips):
    return [c.clip_id for c in clips]


def test_blocked_creator_excluded(make_clip, viewer):
    clips = [
        make_clip("a", creator_id="blocked-creator"),
        make_clip("b", creator_id="friend"),
        make_clip("anon", creator_id=None),
    ]
    assert _ids(filter_visible(clips, viewer)) == ["b", "anon"]


def test_hidden_and_removed_excluded(make_clip, viewer):
    clips = [
        make_clip("live", status="live"),
        make_clip("processing", status="processing"),
        make_clip("hidden", status="hidden"),
        make_clip("removed", status="removed"),
    ]
    assert _ids(filter_visible(clips, viewer)) == ["live", "processing"]


def test_moderation_decision_excluded(make_clip, viewer):
    clips = [
        make_clip("blocked", moderation={"decision": "blocked"}),
        make_clip("reject-status", moderation={"status": "reject"}),
        make_clip("decision-wins", moderation={"decision": "approve", "status": "reject"}),
        make_clip("non-string", moderation={"decision": 7}),
    ]
    assert _ids(filter_visible(clips, viewer)) == ["decision-wins", "non-string"]


def test_high_risk_flagged_excluded(make_clip, viewer):
    clips = [
        make_clip("flagged-high", moderation={"flag": True, "risk": 0.7}),
        make_clip("flagged-legacy", moderation={"flag": True, "risk": 8}),
        make_clip("flagged-low", moderation={"flag": True, "risk": 0.69}),
        make_clip("unflagged-high", moderation={"flag": False, "risk": 0.95}),
    ]
    assert _ids(filter_visible(clips, viewer)) == ["flagged-low", "unflagged-high"]


def test_sensitive_requires_capability(make_clip, viewer):
    clips = [
        make_clip("general"),
        make_clip("sensitive", content_rating="sensitive"),
    ]
    allowed = ViewerCapabilities(sensitive_content_allowed=True)

    assert _ids(filter_visible(clips, viewer)) == ["general"]
    assert _ids(filter_visible(clips, allowed)) == ["general", "sensitive"]


def test_filter_is_idempotent(make_clip, viewer):
    clips = [
        make_clip("a", creator_id="blocked-creator"),
        make_clip("b", status="hidden"),
        make_clip("c", content_rating="sensitive"),
        make_clip("d", moderation={"flag": True, "risk": 0.9}),
        make_clip("e"),
        make_clip("f", status="processing"),
    ]
    once = filter_visible(clips, viewer)
    assert filter_visible(once, viewer) == once


def test_local_scope_uses_viewer_city(make_clip, viewer):
    clips = [
        make_clip("same", city="lagos"),
        make_clip("other", city="Abuja"),
        make_clip("none", city=None),
    ]

    local = apply_feed_filters(clips, FeedFilters(city_scope="local"), viewer)
    everywhere = apply_feed_filters(clips, FeedFilters(), viewer)
    no_city = apply_feed_filters(clips, FeedFilters(city_scope="local"), ViewerCapabilities())

    assert _ids(local) == ["same"]
    assert _ids(everywhere) == ["same", "other", "none"]
    assert _ids(no_city) == ["same", "other", "none"]


def test_explicit_city_overrides_scope(make_clip, viewer):
    clips = [make_clip("lagos", city="Lagos"), make_clip("abuja", city="ABUJA")]
    filters = FeedFilters(city_scope="local", city="abuja")

    assert _ids(apply_feed_filters(clips, filters, viewer)) == ["abuja"]


def test_topic_mood_and_duration_filters(make_clip, viewer):
    clips = [
        make_clip("match", topic_id="t1", mood_emoji="😊", duration_seconds=20),
        make_clip("wrong-topic", topic_id="t2", mood_emoji="😊", duration_seconds=20),
        make_clip("wrong-mood", topic_id="t1", mood_emoji="😢", duration_seconds=20),
        make_clip("too-long", topic_id="t1", mood_emoji="😊", duration_seconds=90),
    ]
    filters = FeedFilters(topic_id="t1", mood_emoji="😊", duration_min=10, duration_max=30)

    assert _ids(apply_feed_filters(clips, filters, viewer)) == ["match"]


def test_date_to_includes_whole_day(make_clip, viewer):
    # conftest NOW is 2024-06-15 12:00 UTC
    clips = [
        make_clip("today", hours_ago=1),
        make_clip("yesterday", hours_ago=20),
        make_clip("last-week", hours_ago=24 * 7),
    ]
    filters = FeedFilters(
        date_from=datetime(2024, 6, 14, tzinfo=timezone.utc),
        date_to=datetime(2024, 6, 15, tzinfo=timezone.utc)
    )

    assert _ids(apply_feed_filters(clips, filters, viewer)) == ["today", "yesterday"]


def test_category_filter_uses_classifier(make_clip, viewer):
    clips = [
        make_clip("joke", title="My funniest joke"),
        make_clip("song", tags=["song"]),
        make_clip("plain", title="Morning thoughts"),
    ]
    classifier = KeywordClassifier({"comedy": ["joke"], "music": ["song"]})

    result = apply_feed_filters(clips, FeedFilters(category="music"), viewer, classifier)
    assert _ids(result) == ["song"]
