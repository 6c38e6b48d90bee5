"""
Topic Curation Engine.

Selects today's spotlight topic and a bounded, engagement-aware list of
secondary topics.
"""

import logging
import math
from dataclasses import dataclass
from datetime import datetime
from typing import Dict, Iterable, List, Optional, Sequence

import pandas as pd

import config.settings as settings
from feedrank.models.clip import Clip
from feedrank.models.topic import CurationResult, Topic, TopicMetrics
from feedrank.utils.timeutils import days_since_date, parse_date, parse_timestamp, today_iso

logger = logging.getLogger(__name__)


@dataclass
class ScoredTopic:
    topic: Topic
    score: float
    has_activity: bool
    age_days: float


def build_topic_metrics(
    clips: Iterable[Clip],
    topic_ids: Optional[Iterable[str]] = None
) -> Dict[str, TopicMetrics]:
    """
    Aggregate post and listen totals per topic.

    Only live and processing clips count. Replies count as posts, matching
    the content store's own aggregation.

    Args:
        clips: Clip snapshot
        topic_ids: Restrict the result to these topics (default: all)

    Returns:
        topic_id -> TopicMetrics for topics with at least one counted clip
    """
    rows = [
        {"topic_id": clip.topic_id, "listens": clip.listens_count or 0}
        for clip in clips
        if clip.topic_id and clip.status in settings.TOPIC_METRIC_STATUSES
    ]

    if not rows:
        return {}

    df = pd.DataFrame(rows)
    if topic_ids is not None:
        df = df[df["topic_id"].isin(set(topic_ids))]

    grouped = df.groupby("topic_id")["listens"].agg(["count", "sum"])

    metrics = {
        str(topic_id): TopicMetrics(posts=int(row["count"]), listens=int(row["sum"]))
        for topic_id, row in grouped.iterrows()
    }

    logger.debug(f"Built metrics for {len(metrics)} topics from {len(rows)} clips")
    return metrics


def score_topic(topic: Topic, metric: TopicMetrics, now: datetime) -> ScoredTopic:
    """Composite recency/engagement score for a non-spotlight topic."""
    age_days = days_since_date(topic.date, now)
    recency_score = math.exp(-age_days / settings.TOPIC_RECENCY_DAYS)
    engagement_signal = metric.posts + metric.listens / settings.TOPIC_LISTENS_PER_POST
    engagement_score = 1 - math.exp(-engagement_signal)
    has_activity = metric.has_activity

    base = (
        settings.TOPIC_RECENCY_WEIGHT * recency_score
        + settings.TOPIC_ENGAGEMENT_WEIGHT * engagement_score
    )
    activity_adjustment = settings.TOPIC_ACTIVITY_BONUS if has_activity else -settings.TOPIC_INACTIVITY_PENALTY
    quality_penalty = settings.TOPIC_INACTIVE_PENALTY if not topic.is_active else 0.0

    return ScoredTopic(
        topic=topic,
        score=base + activity_adjustment - quality_penalty,
        has_activity=has_activity,
        age_days=age_days
    )


def _newest_first(topics: Sequence[Topic]) -> List[Topic]:
    return sorted(topics, key=lambda t: t.date, reverse=True)


def curate_topics(
    topics: Sequence[Topic],
    metrics: Dict[str, TopicMetrics],
    now: datetime
) -> CurationResult:
    """
    Pick the spotlight topic and up to six secondary topics.

    The spotlight is the active topic dated today (UTC calendar date of
    `now`); it is None when there is none. Secondary topics are ranked by
    score and accepted greedily when they have activity, are at most three
    days old, or fewer than three have been accepted. Remaining slots are
    backfilled in rank order.

    Args:
        topics: Candidate topics
        metrics: topic_id -> TopicMetrics (missing means no activity)
        now: Reference time

    Returns:
        CurationResult with spotlight and secondary topics
    """
    if not topics:
        return CurationResult()

    now = parse_timestamp(now)
    today = today_iso(now)
    ordered = _newest_first(topics)

    spotlight = next(
        (topic for topic in ordered if topic.date == today and topic.is_active),
        None
    )
    remainder = [
        topic for topic in ordered
        if spotlight is None or topic.topic_id != spotlight.topic_id
    ]

    prioritized = [
        score_topic(topic, metrics.get(topic.topic_id) or TopicMetrics(), now)
        for topic in remainder
    ]
    prioritized.sort(key=lambda entry: entry.score, reverse=True)

    limit = settings.SECONDARY_TOPIC_LIMIT
    curated: List[Topic] = []

    for entry in prioritized:
        if len(curated) >= limit:
            break
        if (
            entry.has_activity
            or entry.age_days <= settings.TOPIC_FRESH_DAYS
            or len(curated) < settings.SECONDARY_TOPIC_MINIMUM
        ):
            curated.append(entry.topic)

    if len(curated) < limit:
        chosen = {topic.topic_id for topic in curated}
        for entry in prioritized:
            if len(curated) >= limit:
                break
            if entry.topic.topic_id not in chosen:
                curated.append(entry.topic)
                chosen.add(entry.topic.topic_id)

    if spotlight is None:
        logger.info(f"No spotlight topic for {today}; curated {len(curated)} secondary topics")
    else:
        logger.info(f"Spotlight topic {spotlight.topic_id}; curated {len(curated)} secondary topics")

    return CurationResult(spotlight=spotlight, secondary=curated)


def display_fallback_topic(topics: Sequence[Topic], now: datetime) -> Optional[Topic]:
    """
    Topic to show when there is no spotlight.

    Most recent topic dated at or before `now`, else the newest topic.
    This is a presentation fallback, not part of the curation result.
    """
    if not topics:
        return None

    now = parse_timestamp(now)
    ordered = _newest_first(topics)
    return next((t for t in ordered if parse_date(t.date) <= now), ordered[0])
