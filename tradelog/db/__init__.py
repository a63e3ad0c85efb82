"""Persistence for tradelog."""

from tradelog.db.store import DataStore, GoalNotFoundError, TradeNotFoundError

__all__ = ["DataStore", "GoalNotFoundError", "TradeNotFoundError"]
