"""Outing Checklist - state core for a personal outing checklist app.

The package owns checklists, check history and settings, applies user
actions through a pure transition function, persists the result to a local
key-value store and derives statistics for presentation layers.
"""

__version__ = "0.1.0"
