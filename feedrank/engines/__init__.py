"""
Engine implementations for feedrank.

Contains the pure ranking components applied to a content snapshot:
- Visibility Filter
- Thread aggregation
- Scoring Engine
- Topic Curation Engine
- Recommendation Engine
- Pagination/Windowing Controller
"""
