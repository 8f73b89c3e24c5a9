"""
Combat system module for the crawler.

This module handles targeting, damage and skills, encounter generation, the
event log, the combat and progression state machine and the tick scheduler.
"""

from .event_log import EventLog, LogEntry
from .game_core import GameCore
from .scheduler import TickScheduler
from .state import GameSnapshot, UpgradePurchase

__all__ = [
    "EventLog",
    "LogEntry",
    "GameCore",
    "TickScheduler",
    "GameSnapshot",
    "UpgradePurchase",
]
