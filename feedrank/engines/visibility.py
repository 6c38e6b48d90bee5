"""
Visibility Filter.

Removes clips a viewer must never see, then applies the viewer's own
narrowing filters (city, topic, mood, duration, date range, category).
"""

import logging
from datetime import timedelta
from typing import Callable, List, Optional, Sequence

import config.settings as settings
from feedrank.classification.classifier import ClipClassifier, KeywordClassifier
from feedrank.models.clip import Clip
from feedrank.models.viewer import FeedFilters, ViewerCapabilities

logger = logging.getLogger(__name__)

VisibilityRule = Callable[[Clip, ViewerCapabilities], bool]


def is_blocked_creator(clip: Clip, viewer: ViewerCapabilities) -> bool:
    return clip.creator_id is not None and clip.creator_id in viewer.blocked_creator_ids


def is_withdrawn(clip: Clip, viewer: ViewerCapabilities) -> bool:
    return clip.status in ("hidden", "removed")


def is_rejected_by_moderation(clip: Clip, viewer: ViewerCapabilities) -> bool:
    if clip.moderation is None:
        return False
    return clip.moderation.decision() in settings.BLOCKING_DECISIONS


def is_high_risk(clip: Clip, viewer: ViewerCapabilities) -> bool:
    if clip.moderation is None or not clip.moderation.flagged():
        return False
    return clip.moderation.normalized_risk() >= settings.MODERATION_RISK_THRESHOLD


def is_restricted_sensitive(clip: Clip, viewer: ViewerCapabilities) -> bool:
    return clip.content_rating == "sensitive" and not viewer.sensitive_content_allowed


# Applied in order; a clip matching any rule is excluded
EXCLUSION_RULES: Sequence[VisibilityRule] = (
    is_blocked_creator,
    is_withdrawn,
    is_rejected_by_moderation,
    is_high_risk,
    is_restricted_sensitive,
)


def filter_visible(clips: Sequence[Clip], viewer: ViewerCapabilities) -> List[Clip]:
    """
    Return the clips visible to this viewer, preserving input order.

    Idempotent: filtering an already filtered list returns it unchanged.

    Args:
        clips: Candidate clips
        viewer: Viewer capabilities (sensitive flag, blocked creators)

    Returns:
        Visible subset of clips
    """
    visible = [
        clip for clip in clips
        if not any(rule(clip, viewer) for rule in EXCLUSION_RULES)
    ]

    if len(visible) < len(clips):
        logger.debug(f"Visibility filter removed {len(clips) - len(visible)} of {len(clips)} clips")

    return visible


def _same_city(a: Optional[str], b: Optional[str]) -> bool:
    return bool(a) and bool(b) and a.lower() == b.lower()


def apply_feed_filters(
    clips: Sequence[Clip],
    filters: FeedFilters,
    viewer: ViewerCapabilities,
    classifier: Optional[ClipClassifier] = None
) -> List[Clip]:
    """
    Narrow a visible clip list by the viewer's feed configuration.

    An explicit `filters.city` takes precedence over the local scope. The
    local scope is ignored when the viewer has no city. `date_to` is
    inclusive through the end of that day.

    Args:
        clips: Visible clips
        filters: Feed configuration
        viewer: Viewer capabilities (city for the local scope)
        classifier: Category classifier (default: KeywordClassifier)

    Returns:
        Filtered clips, input order preserved
    """
    filtered = list(clips)

    if filters.city:
        filtered = [c for c in filtered if _same_city(c.city, filters.city)]
    elif filters.city_scope == "local" and viewer.city:
        filtered = [c for c in filtered if _same_city(c.city, viewer.city)]

    if filters.topic_id:
        filtered = [c for c in filtered if c.topic_id == filters.topic_id]

    if filters.mood_emoji:
        filtered = [c for c in filtered if c.mood_emoji == filters.mood_emoji]

    if filters.duration_min is not None:
        filtered = [c for c in filtered if c.duration_seconds >= filters.duration_min]
    if filters.duration_max is not None:
        filtered = [c for c in filtered if c.duration_seconds <= filters.duration_max]

    if filters.date_from is not None:
        filtered = [c for c in filtered if c.created_at >= filters.date_from]
    if filters.date_to is not None:
        end_of_day = filters.date_to + timedelta(days=1) - timedelta(milliseconds=1)
        filtered = [c for c in filtered if c.created_at <= end_of_day]

    if filters.category:
        classifier = classifier or KeywordClassifier()
        filtered = [c for c in filtered if classifier.classify(c) == filters.category]

    logger.debug(f"Feed filters kept {len(filtered)} of {len(clips)} clips")
    return filtered
