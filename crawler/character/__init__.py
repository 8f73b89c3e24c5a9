"""
Character package: party members, enemies, gear and stat derivation.
"""

from .enemy import Enemy
from .gear import Gear, GearItem, GearTotals, create_default_gear, sum_gear_stats
from .party import create_member, initialize_party
from .party_member import PartyMember, Skill, SkillEffect, create_skill
from .stats import DerivedStats, StatDelta, apply_derived_stats, derive_stats, rescale_hp

__all__ = [
    "Enemy",
    "Gear",
    "GearItem",
    "GearTotals",
    "create_default_gear",
    "sum_gear_stats",
    "create_member",
    "initialize_party",
    "PartyMember",
    "Skill",
    "SkillEffect",
    "create_skill",
    "DerivedStats",
    "StatDelta",
    "apply_derived_stats",
    "derive_stats",
    "rescale_hp",
]
