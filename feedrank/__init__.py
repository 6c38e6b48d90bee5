"""
feedrank - Feed Ranking & Curation Engine.

Pure, deterministic ranking for a social audio-clip feed:
- filter_visible: what a viewer may see
- score_and_sort: ordering under hot/top/controversial/rising/trending
- curate_topics: today's spotlight and secondary topics
- recommend_content / recommend_creators: history-based rails
- recommend_profiles: follow-graph profile suggestions
- paginate: bounded forward-growing pages
"""

from feedrank.engines.curation import curate_topics
from feedrank.engines.pagination import paginate
from feedrank.engines.recommendation import recommend_content, recommend_creators, recommend_profiles
from feedrank.engines.scoring import score_and_sort
from feedrank.engines.visibility import filter_visible

__all__ = [
    "filter_visible",
    "score_and_sort",
    "curate_topics",
    "recommend_content",
    "recommend_creators",
    "recommend_profiles",
    "paginate",
]
