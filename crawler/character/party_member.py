"""
Party member module for the crawler.

Defines skills and the party member model: identity, base stats, gear,
derived stats and the live combat state driven by the scheduler.
"""

from typing import Any

from pydantic import BaseModel, Field

from crawler.core.constants import Role, SkillType
from crawler.core.content import get_skill_data

from .gear import Gear, create_default_gear


class SkillEffect(BaseModel):
    """The effect produced when a skill fires."""

    type: SkillType = Field(description="The kind of effect.")
    value: float = Field(
        description="Heal fraction, damage reduction or damage multiplier.",
    )
    duration: int | None = Field(
        default=None,
        description="Duration in turns for lasting effects.",
    )


class Skill(BaseModel):
    """An auto-cast skill with a cooldown."""

    name: str = Field(description="The name of the skill.")
    description: str = Field("", description="A brief description of the skill.")
    cooldown_ms: int = Field(
        ge=0,
        description="Time in milliseconds before the skill can fire again.",
    )
    effect: SkillEffect = Field(description="What the skill does.")


def create_skill(key: str | None) -> Skill:
    """
    Builds the skill for a dps class or role name.

    Args:
        key (str | None): The dps class or role name.

    Returns:
        Skill: The skill, the warrior skill for unknown keys.

    """
    return Skill(**get_skill_data(key))


class PartyMember(BaseModel):
    """
    A member of the adventuring party.

    Derived stats (`max_hp`, `attack`, `defense`) are recomputed from the base
    stats, gear and upgrades by `crawler.character.stats.derive_stats`.
    """

    name: str = Field(description="The display name of the member.")
    role: Role = Field(description="The combat role of the member.")
    dps_class: str | None = Field(
        default=None,
        description="The damage class for damage dealers.",
    )
    base_hp: float = Field(default=100, description="Base hit points.")
    base_attack: float = Field(default=10, description="Base attack.")
    base_defense: float = Field(default=5, description="Base defense.")
    gear: Gear = Field(
        default_factory=create_default_gear,
        description="Equipped gear by slot.",
    )
    skill: Skill | None = Field(default=None, description="The auto-cast skill.")

    max_hp: int = Field(default=1, ge=1, description="Derived maximum hit points.")
    attack: int = Field(default=1, ge=1, description="Derived attack.")
    defense: int = Field(default=0, ge=0, description="Derived defense.")

    hp: int = Field(default=1, ge=0, description="Current hit points.")
    attack_timer: float = Field(
        default=0.0,
        description="Progress towards the next attack, fires at 100.",
    )
    attack_speed: float = Field(default=1.0, description="Attack timer multiplier.")
    skill_cooldown_ms: int = Field(default=0, ge=0)
    skill_active: bool = Field(default=False)
    skill_duration_ticks: int = Field(default=0, ge=0)
    is_protected: bool = Field(
        default=False,
        description="Set on the healer by Divine Protection.",
    )

    def model_post_init(self, _: Any) -> None:
        """Keeps hit points inside [0, max_hp] after construction."""
        self.set_hp(self.hp)

    def is_alive(self) -> bool:
        """Check if the member has hit points left."""
        return self.hp > 0

    def is_dead(self) -> bool:
        """Check if the member has no hit points left."""
        return self.hp <= 0

    def is_healer(self) -> bool:
        return self.role == Role.HEALER

    def is_protected_healer(self) -> bool:
        """Check if this is a healer frozen by Divine Protection."""
        return self.is_healer() and self.is_protected

    def can_act(self) -> bool:
        """Living members act unless they are a protected healer."""
        return self.is_alive() and not self.is_protected_healer()

    def hp_ratio(self) -> float:
        """Returns current hit points as a fraction of the maximum."""
        return self.hp / self.max_hp if self.max_hp > 0 else 0.0

    def is_injured(self) -> bool:
        return self.is_alive() and self.hp < self.max_hp

    def set_hp(self, value: float) -> int:
        """
        Sets hit points, clamped into [0, max_hp].

        Args:
            value (float): The requested hit points.

        Returns:
            int: The stored hit points.

        """
        self.hp = int(max(0, min(self.max_hp, value)))
        return self.hp

    def heal(self, amount: int) -> int:
        """
        Heals the member without exceeding the maximum.

        Args:
            amount (int): The amount to heal.

        Returns:
            int: The hit points actually restored.

        """
        before = self.hp
        self.set_hp(self.hp + max(0, amount))
        return self.hp - before

    def restore(self) -> None:
        """Brings the member back to full health with fresh timers."""
        self.hp = self.max_hp
        self.attack_timer = 0.0
        self.is_protected = False

    def has_damage_boost(self) -> bool:
        """Check if an active damage boost is waiting for the next attack."""
        return (
            self.skill_active
            and self.skill is not None
            and self.skill.effect.type == SkillType.DAMAGE_BOOST
        )

    def damage_boost(self) -> float:
        """Returns the multiplier of a pending damage boost, 1 if none."""
        if self.has_damage_boost() and self.skill is not None:
            return self.skill.effect.value
        return 1.0

    def consume_damage_boost(self) -> None:
        """Clears a damage boost after the attack that used it."""
        if self.has_damage_boost():
            self.skill_active = False
            self.skill_duration_ticks = 0

    @property
    def colored_name(self) -> str:
        return self.role.colorize(self.name)
