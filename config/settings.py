"""
Configuration settings for feedrank.

Centralized constants for the ranking, curation and recommendation engines.
"""

import os

# API Configuration (only used by the LLM clip classifier)
GOOGLE_API_KEY = os.getenv("GOOGLE_API_KEY", "")

# Ranking modes
RANKING_MODES = ("hot", "top", "controversial", "rising", "trending")
DEFAULT_RANKING_MODE = "hot"
TOP_TIME_WINDOWS = {
    "all": None,
    "week": 7 * 24,  # hours
    "month": 30 * 24,
}

# Visibility filter
MODERATION_RISK_THRESHOLD = 0.7  # 0-1 scale
LEGACY_RISK_SCALE = 10.0  # Risks above 1 are read as 0-10
BLOCKING_DECISIONS = ("blocked", "reject")

# Shared scoring defaults
DEFAULT_COMPLETION_RATE = 0.5

# Hot mode
HOT_FRESHNESS_HOURS = 12.0
HOT_WEIGHTS = {
    "freshness": 0.5,
    "reactions": 0.2,
    "listens": 0.15,
    "completion": 0.15,
}
HOT_TOPIC_BOOST_CAP = 0.4
HOT_TOPIC_POSTS_WEIGHT = 0.12
HOT_TOPIC_LISTENS_WEIGHT = 0.05
HOT_LOCAL_BOOST = 0.08
HOT_SENSITIVE_PENALTY = 0.15
HOT_MODERATION_PENALTY = 0.5
HOT_PROCESSING_PENALTY = 0.2
JITTER_AMPLITUDE = 0.05

# Top mode
TOP_REACTION_WEIGHT = 2.0
TOP_LISTEN_WEIGHT = 1.0
TOP_COMPLETION_WEIGHT = 10.0

# Controversial mode
CONTROVERSIAL_FRESHNESS_HOURS = 48.0
CONTROVERSIAL_DIVERSITY_STEP = 0.3
CONTROVERSIAL_DIVERSITY_CAP = 1.5
CONTROVERSIAL_VARIANCE_STEP = 0.2
CONTROVERSIAL_VARIANCE_CAP = 1.0

# Rising mode
RISING_MAX_AGE_HOURS = 48.0
RISING_COMPLETION_WEIGHT = 5.0

# Topic curation
SECONDARY_TOPIC_LIMIT = 6
SECONDARY_TOPIC_MINIMUM = 3
TOPIC_RECENCY_DAYS = 4.0
TOPIC_FRESH_DAYS = 3.0
TOPIC_LISTENS_PER_POST = 20.0
TOPIC_RECENCY_WEIGHT = 0.55
TOPIC_ENGAGEMENT_WEIGHT = 0.35
TOPIC_ACTIVITY_BONUS = 0.1
TOPIC_INACTIVITY_PENALTY = 0.05
TOPIC_INACTIVE_PENALTY = 0.4
TOPIC_METRIC_STATUSES = ("live", "processing")

# Recommendations
RECOMMENDATION_LIMIT = 6
RECOMMENDATION_RECENCY_HOURS = 168.0  # One week
CONTENT_HISTORY_LIMIT = 50
CONTENT_TOPIC_MATCH_POINTS = 3.0
CONTENT_TAG_MATCH_POINTS = 2.0
CONTENT_CREATOR_MATCH_POINTS = 2.0
CREATOR_HISTORY_LIMIT = 30
FAVORITE_CREATOR_LIMIT = 3
FAVORITE_CLIP_SAMPLE = 20
SIMILAR_CREATOR_POOL = 50
SIMILAR_CREATOR_LIMIT = 5
CREATOR_TAG_MATCH_POINTS = 3.0
CREATOR_TOPIC_MATCH_POINTS = 2.0
PROFILE_RECOMMENDATION_LIMIT = 10
FRIENDS_OF_FRIENDS_LIMIT = 5
POPULAR_PROFILE_LIMIT = 5

# Pagination
DEFAULT_PAGE_SIZE = 20

# Ranking cache
RANKING_CACHE_TTL_SECONDS = 5
RANKING_CACHE_MAX_ENTRIES = 1000

# Clip classifier (LLM-backed implementation)
CLASSIFIER_MODEL = "gemini-1.5-flash"
CLASSIFIER_TEMPERATURE = 0.0
CLASSIFIER_MAX_RETRIES = 3

# Logging
LOG_LEVEL = "INFO"  # DEBUG, INFO, WARNING, ERROR
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
