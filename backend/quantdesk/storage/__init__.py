"""Data storage layer."""

from quantdesk.storage.database import Database, TradeAnalysisTable, init_database
from quantdesk.storage.recommendation_repo import RecommendationRepository

__all__ = [
    "Database",
    "TradeAnalysisTable",
    "init_database",
    "RecommendationRepository",
]
