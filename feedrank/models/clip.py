"""
Clip data model.

Represents a user-generated audio clip and its moderation verdict as
snapshotted from the content store.
"""

import math
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

import config.settings as settings
from feedrank.utils.timeutils import parse_timestamp

CLIP_STATUSES = ("draft", "processing", "live", "hidden", "removed")
CONTENT_RATINGS = ("general", "sensitive")


def _coerce_listens(value: Any) -> int:
    """Store listen count as a non-negative int; anything non-numeric counts as 0."""
    if isinstance(value, bool):
        return 0
    try:
        numeric = float(value)
    except (TypeError, ValueError):
        return 0
    return int(numeric) if math.isfinite(numeric) and numeric > 0 else 0


@dataclass
class ModerationVerdict:
    """
    Annotation attached to a clip by the external moderation process.

    The payload is kept as delivered; accessors apply the defaults used
    by the ranking engines.
    """
    raw: Dict[str, Any] = field(default_factory=dict)

    def decision(self) -> Optional[str]:
        """Moderation decision, falling back to `status`. None if neither is a string."""
        decision = self.raw.get("decision")
        if isinstance(decision, str):
            return decision
        status = self.raw.get("status")
        if isinstance(status, str):
            return status
        return None

    def risk(self) -> float:
        """Raw numeric risk, 0.0 if absent or non-numeric."""
        risk = self.raw.get("risk")
        if isinstance(risk, bool) or not isinstance(risk, (int, float)):
            return 0.0
        return float(risk)

    def normalized_risk(self) -> float:
        """
        Risk on a 0-1 scale. Values above 1 come from the legacy 0-10 scale
        and are rescaled before clamping.
        """
        risk = self.risk()
        if risk > 1.0:
            risk = risk / settings.LEGACY_RISK_SCALE
        return min(max(risk, 0.0), 1.0)

    def flagged(self) -> bool:
        return self.raw.get("flag") is True

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> Optional["ModerationVerdict"]:
        if data is None:
            return None
        return cls(raw=dict(data))

    def to_dict(self) -> Dict[str, Any]:
        return dict(self.raw)


@dataclass
class Clip:
    """
    A unit of user-generated audio content, the primary ranked entity.
    Replies carry `parent_clip_id` and never rank on their own.
    """
    clip_id: str
    created_at: datetime
    creator_id: Optional[str] = None  # None for anonymized clips
    status: str = "live"
    listens_count: int = 0
    reactions: Dict[str, Any] = field(default_factory=dict)  # emoji -> count
    completion_rate: Optional[float] = None  # None means unknown
    topic_id: Optional[str] = None
    tags: List[str] = field(default_factory=list)
    content_rating: str = "general"
    moderation: Optional[ModerationVerdict] = None
    parent_clip_id: Optional[str] = None
    remix_of_clip_id: Optional[str] = None
    chain_id: Optional[str] = None
    trending_score: Optional[float] = None
    city: Optional[str] = None
    mood_emoji: Optional[str] = None
    duration_seconds: float = 0.0
    title: Optional[str] = None
    captions: Optional[str] = None
    summary: Optional[str] = None
    reply_count: int = 0
    remix_count: int = 0

    def __post_init__(self):
        self.created_at = parse_timestamp(self.created_at)
        if self.created_at is None:
            raise ValueError(f"Clip {self.clip_id} is missing created_at")

        if self.status not in CLIP_STATUSES:
            raise ValueError(
                f"Invalid status: {self.status}. Must be one of {', '.join(CLIP_STATUSES)}"
            )

        if self.content_rating not in CONTENT_RATINGS:
            raise ValueError(
                f"Invalid content_rating: {self.content_rating}. Must be 'general' or 'sensitive'"
            )

        if self.listens_count < 0:
            raise ValueError(f"Invalid listens_count: {self.listens_count}. Must be >= 0")

    @property
    def is_reply(self) -> bool:
        return bool(self.parent_clip_id)

    @classmethod
    def from_dict(cls, data: dict) -> "Clip":
        """Create Clip from a content-store row."""
        return cls(
            clip_id=data["id"],
            created_at=data["created_at"],
            creator_id=data.get("profile_id"),
            status=data.get("status", "live"),
            listens_count=_coerce_listens(data.get("listens_count")),
            reactions=data.get("reactions") or {},
            completion_rate=data.get("completion_rate"),
            topic_id=data.get("topic_id"),
            tags=list(data.get("tags") or []),
            content_rating=data.get("content_rating") or "general",
            moderation=ModerationVerdict.from_dict(data.get("moderation")),
            parent_clip_id=data.get("parent_clip_id"),
            remix_of_clip_id=data.get("remix_of_clip_id"),
            chain_id=data.get("chain_id"),
            trending_score=data.get("trending_score"),
            city=data.get("city"),
            mood_emoji=data.get("mood_emoji"),
            duration_seconds=data.get("duration_seconds") or 0.0,
            title=data.get("title"),
            captions=data.get("captions"),
            summary=data.get("summary"),
            reply_count=data.get("reply_count") or 0,
            remix_count=data.get("remix_count") or 0
        )

    def to_dict(self) -> dict:
        """Convert to a content-store shaped dict."""
        return {
            "id": self.clip_id,
            "created_at": self.created_at.isoformat(),
            "profile_id": self.creator_id,
            "status": self.status,
            "listens_count": self.listens_count,
            "reactions": dict(self.reactions),
            "completion_rate": self.completion_rate,
            "topic_id": self.topic_id,
            "tags": list(self.tags),
            "content_rating": self.content_rating,
            "moderation": self.moderation.to_dict() if self.moderation else None,
            "parent_clip_id": self.parent_clip_id,
            "remix_of_clip_id": self.remix_of_clip_id,
            "chain_id": self.chain_id,
            "trending_score": self.trending_score,
            "city": self.city,
            "mood_emoji": self.mood_emoji,
            "duration_seconds": self.duration_seconds,
            "title": self.title,
            "captions": self.captions,
            "summary": self.summary,
            "reply_count": self.reply_count,
            "remix_count": self.remix_count
        }
