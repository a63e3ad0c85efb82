"""Data models for tradelog."""

from tradelog.models.trade import Trade
from tradelog.models.goal import Goal
from tradelog.models.profile import Profile
from tradelog.models.summary import (
    EquityPoint,
    MonthSummary,
    Reflection,
    Streak,
    Summary,
    WeekPnl,
)
from tradelog.models.insight import Insight

__all__ = [
    "Trade",
    "Goal",
    "Profile",
    "Summary",
    "EquityPoint",
    "Streak",
    "WeekPnl",
    "MonthSummary",
    "Reflection",
    "Insight",
]
