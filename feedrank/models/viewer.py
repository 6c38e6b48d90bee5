"""
Viewer data model.

Per-viewer capabilities and the explicit feed configuration passed in by
the caller on every ranking request.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import FrozenSet, Optional, Tuple

import config.settings as settings
from feedrank.utils.timeutils import parse_timestamp

CITY_SCOPES = ("everywhere", "local")


@dataclass
class ViewerCapabilities:
    """
    What a viewer is allowed to see, plus the profile fields used for boosts.
    """
    sensitive_content_allowed: bool = False
    city: Optional[str] = None
    blocked_creator_ids: FrozenSet[str] = field(default_factory=frozenset)
    viewer_id: Optional[str] = None

    def __post_init__(self):
        self.blocked_creator_ids = frozenset(self.blocked_creator_ids or ())

    @classmethod
    def from_dict(cls, data: dict) -> "ViewerCapabilities":
        return cls(
            sensitive_content_allowed=bool(data.get("sensitive_content_allowed", False)),
            city=data.get("city"),
            blocked_creator_ids=frozenset(data.get("blocked_creator_ids") or ()),
            viewer_id=data.get("id")
        )


@dataclass
class FeedFilters:
    """
    Feed configuration chosen by the viewer.

    Replaces persisted UI preferences (last mode, city scope, topic focus);
    the engine keeps no state of its own between calls.
    """
    mode: str = settings.DEFAULT_RANKING_MODE
    time_window: str = "all"  # Only used by "top"
    city_scope: str = "everywhere"  # "everywhere" or "local"
    city: Optional[str] = None  # Explicit city, overrides city_scope
    topic_id: Optional[str] = None
    mood_emoji: Optional[str] = None
    duration_min: Optional[float] = None
    duration_max: Optional[float] = None
    date_from: Optional[datetime] = None
    date_to: Optional[datetime] = None  # Inclusive through end of day
    category: Optional[str] = None

    def __post_init__(self):
        if self.mode not in settings.RANKING_MODES:
            raise ValueError(
                f"Invalid mode: {self.mode}. Must be one of {', '.join(settings.RANKING_MODES)}"
            )

        if self.time_window not in settings.TOP_TIME_WINDOWS:
            raise ValueError(
                f"Invalid time_window: {self.time_window}. Must be 'all', 'week', or 'month'"
            )

        if self.city_scope not in CITY_SCOPES:
            raise ValueError(
                f"Invalid city_scope: {self.city_scope}. Must be 'everywhere' or 'local'"
            )

        self.date_from = parse_timestamp(self.date_from)
        self.date_to = parse_timestamp(self.date_to)

    def criteria_key(self) -> Tuple:
        """Ordering criteria; a change resets the pagination window."""
        return (
            self.mode,
            self.time_window,
            self.city_scope,
            (self.city or "").lower() or None,
            self.topic_id,
            self.mood_emoji,
            self.duration_min,
            self.duration_max,
            self.date_from,
            self.date_to,
            self.category
        )
