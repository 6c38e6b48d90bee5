"""
Ranking Cache - optional memoization of ranked feeds.

Keys cover everything a ranking depends on: the feed criteria, the
viewer's filter parameters, a time bucket and a fingerprint of the content
snapshot. Entries are only reused within a few seconds.
"""

import hashlib
import logging
from datetime import datetime
from typing import Dict, List, Optional, Sequence, Tuple

import config.settings as settings
from feedrank.models.clip import Clip
from feedrank.models.viewer import FeedFilters, ViewerCapabilities
from feedrank.utils.timeutils import parse_timestamp

logger = logging.getLogger(__name__)


def content_fingerprint(clips: Sequence[Clip]) -> str:
    """
    Hash of the fields that influence ranking, in snapshot order.
    Any insert, update or delete upstream changes the fingerprint.
    """
    digest = hashlib.md5()
    for clip in clips:
        moderation = clip.moderation.to_dict() if clip.moderation else None
        digest.update(repr((
            clip.clip_id,
            clip.created_at.isoformat(),
            clip.creator_id,
            clip.status,
            clip.listens_count,
            sorted((str(k), repr(v)) for k, v in (clip.reactions or {}).items()),
            clip.completion_rate,
            clip.topic_id,
            tuple(clip.tags),
            clip.content_rating,
            sorted((str(k), repr(v)) for k, v in (moderation or {}).items()),
            clip.parent_clip_id,
            clip.remix_of_clip_id,
            clip.trending_score,
            clip.city,
            clip.mood_emoji,
            clip.duration_seconds,
            clip.title,
            clip.captions,
            clip.summary,
        )).encode("utf-8"))
    return digest.hexdigest()


class RankingCache:
    """
    In-memory cache of ranked clip lists.

    Not shared between orchestrators; callers that rank concurrently hold
    one cache per worker.
    """

    def __init__(
        self,
        ttl_seconds: int = settings.RANKING_CACHE_TTL_SECONDS,
        max_entries: int = settings.RANKING_CACHE_MAX_ENTRIES
    ):
        if ttl_seconds <= 0:
            raise ValueError(f"Invalid ttl_seconds: {ttl_seconds}. Must be > 0")
        if max_entries <= 0:
            raise ValueError(f"Invalid max_entries: {max_entries}. Must be > 0")

        self.ttl_seconds = ttl_seconds
        self.max_entries = max_entries
        self._entries: Dict[str, Tuple[int, List[Clip]]] = {}  # key -> (time bucket, ranked clips)
        self.hits = 0
        self.misses = 0

    def time_bucket(self, now: datetime) -> int:
        return int(parse_timestamp(now).timestamp() // self.ttl_seconds)

    def make_key(
        self,
        filters: FeedFilters,
        viewer: ViewerCapabilities,
        fingerprint: str,
        now: datetime
    ) -> str:
        parts = (
            filters.criteria_key(),
            viewer.sensitive_content_allowed,
            tuple(sorted(viewer.blocked_creator_ids)),
            (viewer.city or "").lower(),
            self.time_bucket(now),
            fingerprint,
        )
        return hashlib.md5(repr(parts).encode("utf-8")).hexdigest()

    def get(self, key: str, now: datetime) -> Optional[List[Clip]]:
        entry = self._entries.get(key)
        if entry is None or entry[0] != self.time_bucket(now):
            self.misses += 1
            return None
        self.hits += 1
        return list(entry[1])

    def set(self, key: str, ranked: List[Clip], now: datetime) -> None:
        if key not in self._entries and len(self._entries) >= self.max_entries:
            self._evict(now)
        self._entries[key] = (self.time_bucket(now), list(ranked))

    def _evict(self, now: datetime) -> None:
        """Drop expired entries; if none expired, drop the oldest insertion."""
        bucket = self.time_bucket(now)
        expired = [k for k, (b, _) in self._entries.items() if b != bucket]
        for key in expired:
            del self._entries[key]
        if not expired:
            del self._entries[next(iter(self._entries))]
        logger.debug(f"Evicted {max(len(expired), 1)} ranking cache entries")

    def clear(self) -> int:
        count = len(self._entries)
        self._entries.clear()
        return count

    def stats(self) -> dict:
        return {
            "backend": "in-memory",
            "cached_rankings": len(self._entries),
            "max_size": self.max_entries,
            "ttl_seconds": self.ttl_seconds,
            "hits": self.hits,
            "misses": self.misses
        }
