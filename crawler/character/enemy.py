"""
Enemy module for the crawler.
"""

from typing import Any

from pydantic import BaseModel, Field


class Enemy(BaseModel):
    """A single enemy of an encounter. Defeated enemies stay at 0 hp."""

    id: str = Field(description="Unique id within the encounter.")
    name: str = Field(description="The display name of the enemy.")
    hp: int = Field(ge=0, description="Current hit points.")
    max_hp: int = Field(ge=1, description="Maximum hit points.")
    attack: int = Field(ge=1, description="Attack value.")
    defense: int = Field(ge=0, description="Defense value.")
    attack_speed: float = Field(default=1.0, description="Tier attack speed.")

    def model_post_init(self, _: Any) -> None:
        self.hp = min(self.hp, self.max_hp)

    def is_alive(self) -> bool:
        return self.hp > 0

    def is_defeated(self) -> bool:
        return self.hp <= 0

    def hp_ratio(self) -> float:
        return self.hp / self.max_hp

    def take_damage(self, amount: int) -> bool:
        """
        Applies damage, never dropping below zero.

        Args:
            amount (int): The damage to apply.

        Returns:
            bool: True if this hit defeated the enemy.

        """
        was_alive = self.is_alive()
        self.hp = max(0, self.hp - max(0, amount))
        return was_alive and self.is_defeated()

    @property
    def colored_name(self) -> str:
        return f"[bold red]{self.name}[/]"
