"""
Topic data model.

Represents daily discussion prompts, their aggregated engagement metrics
and the curated result shown on the topic surfaces.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional


@dataclass
class Topic:
    """
    A daily discussion prompt. One topic is expected per calendar date.
    """
    topic_id: str
    title: str
    date: str  # YYYY-MM-DD format
    description: str = ""
    is_active: bool = True
    creator_id: Optional[str] = None  # Set for user-submitted topics

    def __post_init__(self):
        # Validate date format
        try:
            datetime.strptime(self.date, "%Y-%m-%d")
        except (TypeError, ValueError):
            raise ValueError(f"Invalid date: {self.date}. Must be YYYY-MM-DD")

    @classmethod
    def from_dict(cls, data: dict) -> "Topic":
        """Create Topic from a content-store row."""
        return cls(
            topic_id=data["id"],
            title=data.get("title", ""),
            date=data["date"],
            description=data.get("description") or "",
            is_active=data.get("is_active") is not False,
            creator_id=data.get("user_created_by")
        )

    def to_dict(self) -> dict:
        return {
            "id": self.topic_id,
            "title": self.title,
            "date": self.date,
            "description": self.description,
            "is_active": self.is_active,
            "user_created_by": self.creator_id
        }


@dataclass
class TopicMetrics:
    """Post and listen totals over live/processing clips referencing a topic."""
    posts: int = 0
    listens: int = 0

    @property
    def has_activity(self) -> bool:
        return self.posts > 0 or self.listens > 0


@dataclass
class CurationResult:
    """
    Output of topic curation.
    `spotlight` is None when no active topic exists for today's date.
    """
    spotlight: Optional[Topic] = None
    secondary: List[Topic] = field(default_factory=list)

    def topic_ids(self) -> List[str]:
        """Spotlight id first, then secondary ids in rank order."""
        ids = [self.spotlight.topic_id] if self.spotlight else []
        ids.extend(topic.topic_id for topic in self.secondary)
        return ids
