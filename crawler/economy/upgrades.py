"""
Economy module for the crawler.

Handles kill rewards (gold and gear drops) and the upgrade shop.
"""

import math
import random

from pydantic import BaseModel, Field

from crawler.core.constants import UpgradeType
from crawler.core.content import UPGRADE_SHOP


class UpgradeLevels(BaseModel):
    """Purchased levels of every shop upgrade. Levels never decrease."""

    attack_bonus: int = Field(default=0, ge=0)
    defense_bonus: int = Field(default=0, ge=0)
    health_bonus: int = Field(default=0, ge=0)
    gold_multiplier: int = Field(default=0, ge=0)
    gear_drop_bonus: int = Field(default=0, ge=0)

    def level_of(self, upgrade_type: UpgradeType) -> int:
        return getattr(self, upgrade_type.value)

    def incremented(self, upgrade_type: UpgradeType) -> "UpgradeLevels":
        """Returns a copy with one more level of the given upgrade."""
        return self.model_copy(
            update={upgrade_type.value: self.level_of(upgrade_type) + 1}
        )


def get_upgrade_cost(upgrade_type: UpgradeType, current_level: int) -> int:
    """
    Returns the gold cost of the next level of an upgrade.

    Args:
        upgrade_type (UpgradeType): The upgrade to price.
        current_level (int): The level already owned.

    Returns:
        int: floor(base_cost * cost_multiplier ** current_level).

    """
    upgrade = UPGRADE_SHOP[upgrade_type]
    return math.floor(upgrade["base_cost"] * upgrade["cost_multiplier"] ** current_level)


def gold_reward(floor: int, gold_multiplier: int) -> int:
    """Gold awarded for one kill on the given floor."""
    return math.floor((3 + floor) * (1 + gold_multiplier * 0.1))


def gear_drop_chance(floor: int, gear_drop_bonus: int) -> float:
    """Probability that a kill on the given floor drops gear."""
    return 0.15 + floor * 0.01 + gear_drop_bonus * 0.05


def roll_gear_drop(
    floor: int, gear_drop_bonus: int, rng: random.Random | None = None
) -> bool:
    """
    Rolls for a gear drop after a kill.

    Args:
        floor (int): The current floor.
        gear_drop_bonus (int): Level of the Lucky Find upgrade.
        rng (random.Random | None): Random source. Defaults to the module.

    Returns:
        bool: True if gear dropped.

    """
    draw = (rng or random).random()
    return draw < gear_drop_chance(floor, gear_drop_bonus)
