"""
Feed Orchestrator.

Coordinates one ranking pass over an immutable content snapshot and
builds the auxiliary topic and recommendation surfaces.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional, Sequence

from feedrank.classification.classifier import ClipClassifier
from feedrank.engines.curation import build_topic_metrics, curate_topics
from feedrank.engines.pagination import FeedWindow, Page
from feedrank.engines.recommendation import recommend_content, recommend_creators, recommend_profiles
from feedrank.engines.scoring import ScoringParams, score_and_sort
from feedrank.engines.threads import collapse_replies
from feedrank.engines.visibility import apply_feed_filters, filter_visible
from feedrank.models.activity import FollowEdge, ListenEvent
from feedrank.models.clip import Clip
from feedrank.models.topic import CurationResult, Topic
from feedrank.models.viewer import FeedFilters, ViewerCapabilities
from feedrank.registry.ranking_cache import RankingCache, content_fingerprint
from feedrank.utils.timeutils import parse_timestamp

logger = logging.getLogger(__name__)


@dataclass
class Recommendations:
    you_might_like: List[Clip] = field(default_factory=list)
    similar_voices: List[Clip] = field(default_factory=list)
    suggested_profiles: List[str] = field(default_factory=list)


class FeedOrchestrator:
    """
    Runs the ranking pipeline for a single request.

    Coordinates:
    1. Reply collapse → 2. Visibility Filter → 3. Feed Filters
    → 4. Topic Metrics → 5. Scoring → 6. Pagination

    Holds no state between calls apart from the optional cache, so callers
    re-invoke it with a fresh snapshot after every (debounced) change event.
    """

    def __init__(
        self,
        classifier: Optional[ClipClassifier] = None,
        cache: Optional[RankingCache] = None
    ):
        """
        Initialize orchestrator.

        Args:
            classifier: Category classifier for the category filter
            cache: Optional ranking cache
        """
        self.classifier = classifier
        self.cache = cache

    def rank(
        self,
        clips: Sequence[Clip],
        viewer: ViewerCapabilities,
        filters: FeedFilters,
        now: datetime
    ) -> List[Clip]:
        """
        Full ordered feed for a viewer.

        Args:
            clips: Content snapshot, replies included
            viewer: Viewer capabilities
            filters: Feed configuration (mode, window, narrowing filters)
            now: Reference time

        Returns:
            Ranked top-level clips visible to the viewer
        """
        now = parse_timestamp(now)

        key = None
        if self.cache is not None:
            key = self.cache.make_key(filters, viewer, content_fingerprint(clips), now)
            cached = self.cache.get(key, now)
            if cached is not None:
                logger.debug(f"Ranking cache hit for mode={filters.mode}")
                return cached

        top_level = collapse_replies(clips)
        visible = filter_visible(top_level, viewer)
        narrowed = apply_feed_filters(visible, filters, viewer, self.classifier)

        params = ScoringParams(
            time_window=filters.time_window,
            topic_metrics=build_topic_metrics(clips),
            viewer_city=viewer.city
        )
        ranked = score_and_sort(narrowed, filters.mode, params, now)

        logger.info(
            f"Ranked {len(ranked)} clips in {filters.mode} mode "
            f"({len(top_level)} top-level, {len(visible)} visible, {len(narrowed)} after filters)"
        )

        if self.cache is not None:
            self.cache.set(key, ranked, now)

        return ranked

    def rank_feed(
        self,
        clips: Sequence[Clip],
        viewer: ViewerCapabilities,
        filters: FeedFilters,
        now: datetime,
        window: Optional[FeedWindow] = None
    ) -> Page[Clip]:
        """
        Ranked feed cut to the viewer's current window.

        A window created for different criteria is reset to its first page.
        """
        window = (window or FeedWindow()).for_criteria(filters.criteria_key())
        return window.apply(self.rank(clips, viewer, filters, now))

    def today_surface(
        self,
        topics: Sequence[Topic],
        clips: Sequence[Clip],
        now: datetime
    ) -> CurationResult:
        """Spotlight and secondary topics with metrics derived from the snapshot."""
        return curate_topics(topics, build_topic_metrics(clips), now)

    def recommendations(
        self,
        listen_history: Sequence[ListenEvent],
        candidate_pool: Sequence[Clip],
        viewer: ViewerCapabilities,
        now: datetime,
        follow_edges: Optional[Sequence[FollowEdge]] = None
    ) -> Recommendations:
        """
        Both clip rails, restricted to top-level clips the viewer may see,
        plus suggested profiles when a follow graph is given. Listened clips
        stay in the pool so the history still resolves even if they are no
        longer visible. Blocked creators are never suggested.
        """
        listened_ids = {event.clip_id for event in listen_history}
        pool = filter_visible(collapse_replies(candidate_pool), viewer)
        pool_ids = {clip.clip_id for clip in pool}
        pool.extend(
            clip for clip in candidate_pool
            if clip.clip_id in listened_ids and clip.clip_id not in pool_ids
        )

        return Recommendations(
            you_might_like=recommend_content(listen_history, pool, now),
            similar_voices=recommend_creators(listen_history, pool, now),
            suggested_profiles=recommend_profiles(
                follow_edges or [],
                viewer.viewer_id,
                excluded_ids=viewer.blocked_creator_ids
            )
        )
