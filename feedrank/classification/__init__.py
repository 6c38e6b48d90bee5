"""
Clip classification.

Swappable classifier contract used by the category feed filter.
"""
