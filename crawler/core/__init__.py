"""
Core module for the crawler.

Contains engine constants, content tables, logging setup, correction helpers
and console utilities shared by every other package.
"""

from .constants import (
    GearSlot,
    LogCategory,
    ResetReason,
    Role,
    SkillType,
    UpgradeType,
)
from .logging import setup_logging
from .utils import cprint, crule, make_bar, round_half_up

__all__ = [
    "GearSlot",
    "LogCategory",
    "ResetReason",
    "Role",
    "SkillType",
    "UpgradeType",
    "setup_logging",
    "cprint",
    "crule",
    "make_bar",
    "round_half_up",
]
