"""
Activity data models.

Listening history and follow relations consumed by the recommenders.
"""

from dataclasses import dataclass
from datetime import datetime

from feedrank.utils.timeutils import parse_timestamp


@dataclass
class ListenEvent:
    """A viewer consuming a clip at a point in time."""
    viewer_id: str
    clip_id: str
    listened_at: datetime

    def __post_init__(self):
        self.listened_at = parse_timestamp(self.listened_at)
        if self.listened_at is None:
            raise ValueError(f"Listen event for {self.clip_id} is missing listened_at")

    @classmethod
    def from_dict(cls, data: dict) -> "ListenEvent":
        return cls(
            viewer_id=data["profile_id"],
            clip_id=data["clip_id"],
            listened_at=data["listened_at"]
        )


@dataclass
class FollowEdge:
    """Directed follow relation between two profiles."""
    follower_id: str
    followee_id: str

    @classmethod
    def from_dict(cls, data: dict) -> "FollowEdge":
        return cls(
            follower_id=data["follower_id"],
            followee_id=data["following_id"]
        )
