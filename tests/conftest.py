"""
Shared fixtures for feedrank tests.
"""

from datetime import datetime, timedelta, timezone

import pytest

from feedrank.models.clip import Clip, ModerationVerdict
from feedrank.models.topic import Topic

NOW = datetime(2024, 6, 15, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def make_clip():
    """Factory for clips created `hours_ago` before NOW."""
    def _make(clip_id, hours_ago=1.0, moderation=None, **kwargs):
        if isinstance(moderation, dict):
            moderation = ModerationVerdict(raw=moderation)
        return Clip(
            clip_id=clip_id,
            created_at=NOW - timedelta(hours=hours_ago),
            moderation=moderation,
            **kwargs
        )
    return _make


@pytest.fixture
def make_topic():
    """Factory for topics dated `days_ago` days before NOW's date."""
    def _make(topic_id, days_ago=0, **kwargs):
        date = (NOW.date() - timedelta(days=days_ago)).isoformat()
        kwargs.setdefault("title", f"Topic {topic_id}")
        return Topic(topic_id=topic_id, date=date, **kwargs)
    return _make
