"""
Economy package: kill rewards and the upgrade shop.
"""

from .upgrades import (
    UpgradeLevels,
    gear_drop_chance,
    get_upgrade_cost,
    gold_reward,
    roll_gear_drop,
)

__all__ = [
    "UpgradeLevels",
    "gear_drop_chance",
    "get_upgrade_cost",
    "gold_reward",
    "roll_gear_drop",
]
