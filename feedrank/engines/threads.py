"""
Thread aggregation.

Only top-level clips rank on the primary feed; replies and remixes are
folded into counts on the clip they point at.
"""

import logging
from collections import Counter
from dataclasses import replace
from typing import List, Sequence

from feedrank.models.clip import Clip

logger = logging.getLogger(__name__)


def collapse_replies(clips: Sequence[Clip]) -> List[Clip]:
    """
    Drop replies and attach reply/remix counts to their targets.

    Counts are taken over the given snapshot only. Input clips are not
    mutated; top-level clips are returned as copies, newest first.

    Args:
        clips: Snapshot of clips, replies included

    Returns:
        Top-level clips ordered by created_at descending
    """
    reply_counts = Counter(c.parent_clip_id for c in clips if c.parent_clip_id)
    remix_counts = Counter(c.remix_of_clip_id for c in clips if c.remix_of_clip_id)

    top_level = [
        replace(
            clip,
            reply_count=reply_counts.get(clip.clip_id, 0),
            remix_count=remix_counts.get(clip.clip_id, 0)
        )
        for clip in clips
        if not clip.is_reply
    ]
    top_level.sort(key=lambda c: c.created_at, reverse=True)

    logger.debug(
        f"Collapsed {len(clips) - len(top_level)} replies into {len(top_level)} top-level clips"
    )
    return top_level
