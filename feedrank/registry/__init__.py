"""
Ranking Cache Module.

Optional memoization of ranked feeds keyed by viewer, mode and content version.
"""
