"""
Unit tests for reply collapsing.
"""

from feedrank.engines.threads import collapse_replies


def test_replies_removed_and_counted(make_clip):
    clips = [
        make_clip("root", hours_ago=5),
        make_clip("reply-1", hours_ago=2, parent_clip_id="root"),
        make_clip("reply-2", hours_ago=1, parent_clip_id="root"),
        make_clip("other", hours_ago=3),
    ]

    result = collapse_replies(clips)

    assert [c.clip_id for c in result] == ["other", "root"]
    counts = {c.clip_id: c.reply_count for c in result}
    assert counts == {"other": 0, "root": 2}


def test_remixes_stay_top_level_and_are_counted(make_clip):
    clips = [
        make_clip("original", hours_ago=10),
        make_clip("remix", hours_ago=1, remix_of_clip_id="original"),
    ]

    result = collapse_replies(clips)

    assert [c.clip_id for c in result] == ["remix", "original"]
    assert result[1].remix_count == 1
    assert result[0].remix_count == 0


def test_input_not_mutated(make_clip):
    root = make_clip("root")
    reply = make_clip("reply", parent_clip_id="root")

    collapse_replies([root, reply])

    assert root.reply_count == 0


def test_reply_to_missing_parent_is_dropped(make_clip):
    result = collapse_replies([make_clip("orphan", parent_clip_id="gone")])
    assert result == []
