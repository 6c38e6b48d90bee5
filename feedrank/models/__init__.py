"""
Data models for feedrank.

Immutable snapshots of records owned by the external content store.
"""
