"""
Scoring Engine.

Computes a rank score for each clip under one of five modes and returns
the clips in descending score order.
"""

import logging
import math
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any, Callable, Dict, List, Optional, Sequence

import config.settings as settings
from feedrank.models.clip import Clip
from feedrank.models.topic import TopicMetrics
from feedrank.utils.timeutils import hours_old, parse_timestamp

logger = logging.getLogger(__name__)


@dataclass
class ScoringParams:
    """
    Mode parameters and per-request context.

    `time_window` only applies to "top"; topic metrics and viewer city only
    apply to "hot".
    """
    time_window: str = "all"  # "all", "week", or "month"
    topic_metrics: Dict[str, TopicMetrics] = field(default_factory=dict)
    viewer_city: Optional[str] = None

    def __post_init__(self):
        if self.time_window not in settings.TOP_TIME_WINDOWS:
            raise ValueError(
                f"Invalid time_window: {self.time_window}. Must be 'all', 'week', or 'month'"
            )


@dataclass
class ScoredClip:
    clip: Clip
    score: float


def deterministic_jitter(seed: str, amplitude: float = settings.JITTER_AMPLITUDE) -> float:
    """
    Stable pseudo-random offset in [-amplitude, amplitude) derived from `seed`.

    Rolling hash with multiplier 31 over UTF-16 code units, wrapped to an
    unsigned 32-bit integer, reduced modulo 1000.
    """
    data = seed.encode("utf-16-le")
    hash_value = 0
    for i in range(0, len(data), 2):
        code_unit = data[i] | (data[i + 1] << 8)
        hash_value = (31 * hash_value + code_unit) & 0xFFFFFFFF

    normalized = (hash_value % 1000) / 1000
    return (normalized - 0.5) * 2 * amplitude


def _coerce_count(value: Any) -> float:
    """Reaction value as a finite number; anything else counts as 0."""
    try:
        numeric = float(value)
    except (TypeError, ValueError):
        return 0.0
    return numeric if math.isfinite(numeric) else 0.0


def reaction_counts(clip: Clip) -> List[float]:
    return [_coerce_count(v) for v in (clip.reactions or {}).values()]


def reaction_total(clip: Clip) -> float:
    return sum(reaction_counts(clip))


def completion_score(clip: Clip) -> float:
    rate = clip.completion_rate
    if isinstance(rate, bool) or not isinstance(rate, (int, float)) or math.isnan(rate):
        rate = settings.DEFAULT_COMPLETION_RATE
    return min(max(float(rate), 0.0), 1.0)


def _listens(clip: Clip) -> float:
    return float(clip.listens_count or 0)


def topic_boost(clip: Clip, topic_metrics: Dict[str, TopicMetrics]) -> float:
    metric = topic_metrics.get(clip.topic_id) if clip.topic_id else None
    if metric is None:
        return 0.0
    boost = (
        math.log1p(max(metric.posts, 0)) * settings.HOT_TOPIC_POSTS_WEIGHT
        + math.log1p(max(metric.listens, 0)) * settings.HOT_TOPIC_LISTENS_WEIGHT
    )
    return min(settings.HOT_TOPIC_BOOST_CAP, boost)


def score_hot(clip: Clip, now: datetime, params: ScoringParams) -> float:
    age = hours_old(clip.created_at, now)
    weights = settings.HOT_WEIGHTS

    freshness = math.exp(-age / settings.HOT_FRESHNESS_HOURS)
    reaction_score = math.sqrt(reaction_total(clip) + 1)
    listen_score = math.sqrt(_listens(clip) + 1)

    local_boost = 0.0
    if params.viewer_city and clip.city and clip.city.lower() == params.viewer_city.lower():
        local_boost = settings.HOT_LOCAL_BOOST

    sensitive_penalty = settings.HOT_SENSITIVE_PENALTY if clip.content_rating == "sensitive" else 0.0
    risk = clip.moderation.normalized_risk() if clip.moderation else 0.0
    moderation_penalty = risk * settings.HOT_MODERATION_PENALTY
    processing_penalty = settings.HOT_PROCESSING_PENALTY if clip.status == "processing" else 0.0

    return (
        weights["freshness"] * freshness
        + weights["reactions"] * reaction_score
        + weights["listens"] * listen_score
        + weights["completion"] * completion_score(clip)
        + topic_boost(clip, params.topic_metrics)
        + local_boost
        + deterministic_jitter(clip.clip_id)
        - processing_penalty
        - moderation_penalty
        - sensitive_penalty
    )


def score_top(clip: Clip, now: datetime, params: ScoringParams) -> Optional[float]:
    window_hours = settings.TOP_TIME_WINDOWS[params.time_window]
    if window_hours is not None and clip.created_at < now - timedelta(hours=window_hours):
        return None

    return (
        reaction_total(clip) * settings.TOP_REACTION_WEIGHT
        + _listens(clip) * settings.TOP_LISTEN_WEIGHT
        + completion_score(clip) * settings.TOP_COMPLETION_WEIGHT
    )


def score_controversial(clip: Clip, now: datetime, params: ScoringParams) -> float:
    counts = reaction_counts(clip)
    total = sum(counts)

    variance = 0.0
    if len(counts) > 1:
        mean = total / len(counts)
        variance = sum((count - mean) ** 2 for count in counts) / len(counts)

    engagement = math.log1p(total + _listens(clip))
    diversity_bonus = min(len(counts) * settings.CONTROVERSIAL_DIVERSITY_STEP,
                          settings.CONTROVERSIAL_DIVERSITY_CAP)
    variance_bonus = min(math.sqrt(variance) * settings.CONTROVERSIAL_VARIANCE_STEP,
                         settings.CONTROVERSIAL_VARIANCE_CAP)
    freshness = math.exp(-hours_old(clip.created_at, now) / settings.CONTROVERSIAL_FRESHNESS_HOURS)

    return engagement * (1 + diversity_bonus + variance_bonus) * (0.7 + 0.3 * freshness)


def score_rising(clip: Clip, now: datetime, params: ScoringParams) -> Optional[float]:
    age = hours_old(clip.created_at, now)
    if age > settings.RISING_MAX_AGE_HOURS:
        return None

    total = reaction_total(clip)
    listens = _listens(clip)
    age_weight = max(0.0, 1 - age / settings.RISING_MAX_AGE_HOURS)
    performance_ratio = (total + listens) / max(1.0, age)

    base = (
        math.sqrt(total + 1)
        + math.sqrt(listens + 1)
        + completion_score(clip) * settings.RISING_COMPLETION_WEIGHT
    )
    return base * age_weight * (1 + math.log1p(max(performance_ratio, 0.0)))


def score_trending(clip: Clip, now: datetime, params: ScoringParams) -> float:
    # Precomputed server-side; no local adjustment
    score = clip.trending_score
    if score is None:
        return 0.0
    return _coerce_count(score)


SCORERS: Dict[str, Callable[[Clip, datetime, ScoringParams], Optional[float]]] = {
    "hot": score_hot,
    "top": score_top,
    "controversial": score_controversial,
    "rising": score_rising,
    "trending": score_trending,
}


def _validate_mode(mode: str) -> None:
    if mode not in SCORERS:
        raise ValueError(f"Invalid mode: {mode}. Must be one of {', '.join(SCORERS)}")


def score_clip(
    clip: Clip,
    mode: str,
    now: datetime,
    params: Optional[ScoringParams] = None
) -> Optional[float]:
    """
    Score a single clip.

    Returns:
        The score, or None when the mode excludes the clip
        ("top" outside its window, "rising" older than 48 hours)

    Raises:
        ValueError: If mode is unknown
    """
    _validate_mode(mode)
    return SCORERS[mode](clip, parse_timestamp(now), params or ScoringParams())


def score_and_sort_with_scores(
    clips: Sequence[Clip],
    mode: str,
    params: Optional[ScoringParams],
    now: datetime
) -> List[ScoredClip]:
    """
    Score clips and sort descending, keeping the scores.

    Replies are never ranking candidates and are skipped. The sort is
    stable, so ties keep their input order.

    Raises:
        ValueError: If mode is unknown
    """
    _validate_mode(mode)
    params = params or ScoringParams()
    now = parse_timestamp(now)
    scorer = SCORERS[mode]

    scored = []
    excluded = 0
    replies = 0
    for clip in clips:
        if clip.is_reply:
            replies += 1
            continue
        score = scorer(clip, now, params)
        if score is None:
            excluded += 1
            continue
        scored.append(ScoredClip(clip=clip, score=score))

    scored.sort(key=lambda entry: entry.score, reverse=True)

    logger.debug(
        f"Scored {len(scored)} clips in {mode} mode "
        f"({excluded} excluded by mode, {replies} replies skipped)"
    )
    return scored


def score_and_sort(
    clips: Sequence[Clip],
    mode: str,
    params: Optional[ScoringParams],
    now: datetime
) -> List[Clip]:
    """
    Rank clips under a mode.

    Args:
        clips: Visible top-level clips
        mode: "hot", "top", "controversial", "rising", or "trending"
        params: Mode parameters (default: ScoringParams())
        now: Reference time for all age computations

    Returns:
        Clips ordered by descending score, mode-excluded clips dropped

    Raises:
        ValueError: If mode is unknown
    """
    return [entry.clip for entry in score_and_sort_with_scores(clips, mode, params, now)]
