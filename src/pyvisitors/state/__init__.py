"""State/store layer.

This package is the single source of truth for how inbound visitor events
(bootstrap snapshots and live partial updates) are merged into one
per-entity view.
"""
