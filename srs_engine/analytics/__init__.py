"""
Analytics package exports.
"""

from srs_engine.analytics.queries import deck_stats, due_items
from srs_engine.analytics.service import build_deck_dashboard
from srs_engine.analytics.types import DeckDashboardData, DeckStats

__all__ = [
    "deck_stats",
    "due_items",
    "build_deck_dashboard",
    "DeckDashboardData",
    "DeckStats",
]
