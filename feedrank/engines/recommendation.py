"""
Recommendation Engine.

Derives "you might like" clips and "similar voices" clips from a viewer's
listening history, and suggested profiles from the follow graph. Every
empty intermediate result degrades to an empty recommendation list.
"""

import logging
from collections import Counter
from dataclasses import dataclass
from datetime import datetime
from typing import Dict, Iterable, List, Optional, Sequence, Set

import config.settings as settings
from feedrank.models.activity import FollowEdge, ListenEvent
from feedrank.models.clip import Clip
from feedrank.utils.timeutils import hours_old, parse_timestamp

logger = logging.getLogger(__name__)


@dataclass
class ListeningProfile:
    """Signals extracted from the clips a viewer recently listened to."""
    listened_clip_ids: Set[str]
    topic_ids: Set[str]
    tags: Set[str]
    creator_ids: Set[str]


def recency_bonus(clip: Clip, now: datetime) -> float:
    """Linear decay from 1 to 0 over one week."""
    return max(0.0, 1 - hours_old(clip.created_at, now) / settings.RECOMMENDATION_RECENCY_HOURS)


def _recent_listens(history: Sequence[ListenEvent], limit: int) -> List[ListenEvent]:
    return sorted(history, key=lambda e: e.listened_at, reverse=True)[:limit]


def _live_newest_first(clips: Sequence[Clip]) -> List[Clip]:
    return sorted(
        (clip for clip in clips if clip.status == "live"),
        key=lambda c: c.created_at,
        reverse=True
    )


def _top_ranked(scored: List[tuple], limit: int) -> List[Clip]:
    scored.sort(key=lambda entry: entry[1], reverse=True)
    return [clip for clip, _ in scored[:limit]]


def build_listening_profile(
    history: Sequence[ListenEvent],
    clips_by_id: Dict[str, Clip]
) -> Optional[ListeningProfile]:
    """
    Resolve listened clips into topic, tag and creator sets.

    Returns:
        ListeningProfile, or None if no listened clip is live in the pool
    """
    listened_ids = {event.clip_id for event in history if event.clip_id}
    listened = [
        clips_by_id[clip_id] for clip_id in listened_ids
        if clip_id in clips_by_id and clips_by_id[clip_id].status == "live"
    ]

    if not listened:
        return None

    return ListeningProfile(
        listened_clip_ids=listened_ids,
        topic_ids={c.topic_id for c in listened if c.topic_id},
        tags={tag for c in listened for tag in c.tags},
        creator_ids={c.creator_id for c in listened if c.creator_id}
    )


def recommend_content(
    listen_history: Sequence[ListenEvent],
    candidate_pool: Sequence[Clip],
    now: datetime,
    limit: int = settings.RECOMMENDATION_LIMIT
) -> List[Clip]:
    """
    "You might like": unheard live clips sharing topics or creators with
    recent listens.

    Scoring: +3 topic match, +2 per shared tag, +2 known creator, plus a
    recency bonus decaying over one week.

    Args:
        listen_history: The viewer's listen events (any order)
        candidate_pool: Clip snapshot covering listened and candidate clips
        now: Reference time
        limit: Maximum number of clips returned

    Returns:
        Up to `limit` clips, best first
    """
    now = parse_timestamp(now)
    recent = _recent_listens(listen_history, settings.CONTENT_HISTORY_LIMIT)
    if not recent:
        logger.debug("No listening history, skipping content recommendations")
        return []

    clips_by_id = {clip.clip_id: clip for clip in candidate_pool}
    profile = build_listening_profile(recent, clips_by_id)
    if profile is None:
        logger.debug("Listened clips not found in pool, skipping content recommendations")
        return []

    candidates = [
        clip for clip in _live_newest_first(candidate_pool)
        if clip.clip_id not in profile.listened_clip_ids
        and (
            (clip.topic_id is not None and clip.topic_id in profile.topic_ids)
            or (clip.creator_id is not None and clip.creator_id in profile.creator_ids)
        )
    ]

    if not candidates:
        logger.debug("No content recommendation candidates")
        return []

    scored = []
    for clip in candidates:
        score = 0.0
        if clip.topic_id in profile.topic_ids:
            score += settings.CONTENT_TOPIC_MATCH_POINTS
        score += settings.CONTENT_TAG_MATCH_POINTS * sum(1 for tag in clip.tags if tag in profile.tags)
        if clip.creator_id in profile.creator_ids:
            score += settings.CONTENT_CREATOR_MATCH_POINTS
        score += recency_bonus(clip, now)
        scored.append((clip, score))

    recommended = _top_ranked(scored, limit)
    logger.info(f"Recommended {len(recommended)} clips from {len(candidates)} candidates")
    return recommended


def favorite_creators(
    history: Sequence[ListenEvent],
    clips_by_id: Dict[str, Clip],
    limit: int = settings.FAVORITE_CREATOR_LIMIT
) -> List[str]:
    """Creators with the most plays among live listened clips, most played first."""
    plays = Counter()
    for event in history:
        clip = clips_by_id.get(event.clip_id)
        if clip is not None and clip.status == "live" and clip.creator_id:
            plays[clip.creator_id] += 1
    return [creator_id for creator_id, _ in plays.most_common(limit)]


def recommend_creators(
    listen_history: Sequence[ListenEvent],
    candidate_pool: Sequence[Clip],
    now: datetime,
    limit: int = settings.RECOMMENDATION_LIMIT
) -> List[Clip]:
    """
    "Similar voices": unheard clips from creators who publish on the same
    topics as the viewer's favorite creators.

    Scoring: +3 per tag shared with the favorites, +2 topic overlap, plus a
    recency bonus decaying over one week.

    Args:
        listen_history: The viewer's listen events (any order)
        candidate_pool: Clip snapshot covering listened and candidate clips
        now: Reference time
        limit: Maximum number of clips returned

    Returns:
        Up to `limit` clips, best first
    """
    now = parse_timestamp(now)
    recent = _recent_listens(listen_history, settings.CREATOR_HISTORY_LIMIT)
    if not recent:
        logger.debug("No listening history, skipping similar voices")
        return []

    clips_by_id = {clip.clip_id: clip for clip in candidate_pool}
    favorites = favorite_creators(recent, clips_by_id)
    if not favorites:
        logger.debug("No favorite creators found, skipping similar voices")
        return []

    live_clips = _live_newest_first(candidate_pool)
    favorite_set = set(favorites)

    favorite_sample = [c for c in live_clips if c.creator_id in favorite_set][:settings.FAVORITE_CLIP_SAMPLE]
    favorite_topics = {c.topic_id for c in favorite_sample if c.topic_id}
    favorite_tags = {tag for c in favorite_sample for tag in c.tags}
    if not favorite_topics:
        logger.debug("Favorite creators have no topics, skipping similar voices")
        return []

    similar_pool = [
        c for c in live_clips
        if c.creator_id and c.creator_id not in favorite_set and c.topic_id in favorite_topics
    ][:settings.SIMILAR_CREATOR_POOL]

    similar_counts = Counter(c.creator_id for c in similar_pool)
    similar_creators = {creator_id for creator_id, _ in similar_counts.most_common(settings.SIMILAR_CREATOR_LIMIT)}
    if not similar_creators:
        logger.debug("No similar creators found")
        return []

    listened_ids = {event.clip_id for event in recent}
    candidates = [
        c for c in live_clips
        if c.creator_id in similar_creators and c.clip_id not in listened_ids
    ]
    if not candidates:
        logger.debug("Similar creators have no unheard clips")
        return []

    scored = []
    for clip in candidates:
        score = settings.CREATOR_TAG_MATCH_POINTS * sum(1 for tag in clip.tags if tag in favorite_tags)
        if clip.topic_id in favorite_topics:
            score += settings.CREATOR_TOPIC_MATCH_POINTS
        score += recency_bonus(clip, now)
        scored.append((clip, score))

    recommended = _top_ranked(scored, limit)
    logger.info(
        f"Recommended {len(recommended)} similar-voice clips from {len(similar_creators)} creators"
    )
    return recommended


def recommend_profiles(
    follow_edges: Sequence[FollowEdge],
    viewer_id: str,
    limit: int = settings.PROFILE_RECOMMENDATION_LIMIT,
    excluded_ids: Optional[Iterable[str]] = None
) -> List[str]:
    """
    Suggested profiles to follow, by social proximity then popularity.

    1. Friends of friends: profiles followed by the people the viewer
       follows, ranked by how many of them follow it.
    2. Popular profiles: everyone else ranked by follower count.

    The viewer, profiles they already follow and `excluded_ids` are never
    suggested. Duplicate edges count once.

    Args:
        follow_edges: Follow graph snapshot
        viewer_id: Profile the suggestions are for
        limit: Maximum number of profile ids returned
        excluded_ids: Profiles to leave out (e.g. blocked creators)

    Returns:
        Profile ids, friends of friends first
    """
    if not viewer_id:
        return []

    edges = list(dict.fromkeys((e.follower_id, e.followee_id) for e in follow_edges))
    following = {followee for follower, followee in edges if follower == viewer_id}
    seen = {viewer_id} | following | set(excluded_ids or ())

    proximity = Counter(
        followee for follower, followee in edges
        if follower in following and followee not in seen
    )
    friends_of_friends = [pid for pid, _ in proximity.most_common(settings.FRIENDS_OF_FRIENDS_LIMIT)]
    seen.update(friends_of_friends)

    popularity = Counter(followee for _, followee in edges if followee not in seen)
    popular = [pid for pid, _ in popularity.most_common(settings.POPULAR_PROFILE_LIMIT)]

    suggested = (friends_of_friends + popular)[:limit]
    logger.info(
        f"Suggested {len(suggested)} profiles for {viewer_id} "
        f"({len(friends_of_friends)} friends of friends, {len(popular)} popular)"
    )
    return suggested
