"""
State models for the crawler.

Groups the mutable game state owned by `GameCore` into progression, combat
and economy sub-states, and defines the read-only snapshot handed to
renderers.
"""

from pydantic import BaseModel, Field

from crawler.character.enemy import Enemy
from crawler.character.party_member import PartyMember
from crawler.character.stats import StatDelta
from crawler.core.constants import (
    DEFAULT_GROUPS_PER_FLOOR,
    MAX_RUN_HISTORY,
    UpgradeType,
)
from crawler.economy.upgrades import UpgradeLevels


class RunHistoryEntry(BaseModel):
    """One finished run, recorded when the party is sent back to floor 1."""

    run_number: int = Field(ge=1)
    floor_reached: int = Field(ge=1)
    timestamp: float = Field(description="Milliseconds since the epoch.")


class ProgressionState(BaseModel):
    """Where the party is in the dungeon, and what it achieved so far."""

    current_floor: int = Field(default=1, ge=1)
    current_group: int = Field(default=1, ge=1)
    total_groups_per_floor: int = Field(default=DEFAULT_GROUPS_PER_FLOOR, ge=1)
    max_floor_reached: int = Field(default=1, ge=1)
    total_runs: int = Field(default=0, ge=0)
    run_history: list[RunHistoryEntry] = Field(default_factory=list)
    monsters_killed: int = Field(default=0, ge=0)
    gears_found: int = Field(
        default=0,
        ge=0,
        description="Gear drops waiting to be spent on gear upgrades.",
    )

    def record_run(self, timestamp: float) -> RunHistoryEntry:
        """
        Appends the current run to the history, keeping the newest entries.

        Args:
            timestamp (float): When the run ended, in milliseconds.

        Returns:
            RunHistoryEntry: The recorded entry.

        """
        entry = RunHistoryEntry(
            run_number=self.total_runs + 1,
            floor_reached=self.current_floor,
            timestamp=timestamp,
        )
        self.run_history = (self.run_history + [entry])[-MAX_RUN_HISTORY:]
        self.total_runs += 1
        return entry

    def is_last_group(self) -> bool:
        return self.current_group >= self.total_groups_per_floor


class CombatState(BaseModel):
    """The live state of the current fight."""

    in_combat: bool = False
    enemies: list[Enemy] = Field(default_factory=list)
    shield_wall_active: bool = False
    shield_wall_turns: int = Field(default=0, ge=0)
    performing_mass_res: bool = False
    mass_resurrection_timer: int = Field(default=0, ge=0)
    healer_protected: bool = False
    enemy_attack_timer: float = Field(default=0.0, ge=0)

    def living_enemies(self) -> list[Enemy]:
        return [enemy for enemy in self.enemies if enemy.is_alive()]

    def clear_shield_wall(self) -> None:
        self.shield_wall_active = False
        self.shield_wall_turns = 0


class EconomyState(BaseModel):
    """Gold and purchased upgrades."""

    gold: int = Field(default=0, ge=0)
    total_gold_earned: int = Field(default=0, ge=0)
    upgrades: UpgradeLevels = Field(default_factory=UpgradeLevels)

    def earn(self, amount: int) -> None:
        self.gold += amount
        self.total_gold_earned += amount


class GameSnapshot(BaseModel):
    """A deep copy of the game state, safe to hand to renderers."""

    party: list[PartyMember]
    progression: ProgressionState
    combat: CombatState
    economy: EconomyState
    game_speed_ms: int


class UpgradePurchase(BaseModel):
    """Outcome of an upgrade purchase."""

    success: bool
    upgrade_type: UpgradeType
    new_level: int = Field(ge=0)
    cost: int = Field(ge=0)
    deltas: list[StatDelta] = Field(
        default_factory=list,
        description="Stat changes of every member, empty on failure.",
    )
