"""
Save codec for the crawler.

Serializes a game into compact keyed JSON and encodes it with URL-safe
base64 without padding, so the result can live in a cookie or a text
field. Decoding never raises: a corrupt save decodes to None.
"""

import base64
import binascii
import json
from typing import TYPE_CHECKING, Any

from catchery import log_warning
from pydantic import BaseModel, Field, NonNegativeInt, ValidationError

from crawler.character.gear import GearItem
from crawler.character.party import create_member
from crawler.character.party_member import PartyMember, create_skill
from crawler.character.stats import derive_stats
from crawler.core.constants import (
    DEFAULT_GROUPS_PER_FLOOR,
    MIN_ATTACK_SPEED,
    GearSlot,
    Role,
)
from crawler.core.content import DEFAULT_GEAR
from crawler.core.error_handling import ensure_finite_number
from crawler.economy.upgrades import UpgradeLevels

if TYPE_CHECKING:
    from crawler.combat.game_core import GameCore

SAVE_VERSION = "0.1.1"

# Short key of every gear slot in the compact format.
GEAR_KEYS: dict[GearSlot, str] = {
    GearSlot.WEAPON: "w",
    GearSlot.HELM: "h",
    GearSlot.CHEST: "c",
    GearSlot.RING1: "r1",
    GearSlot.RING2: "r2",
    GearSlot.AMULET: "a",
    GearSlot.GLOVES: "gl",
    GearSlot.BRACERS: "br",
    GearSlot.BOOTS: "b",
    GearSlot.PANTS: "p",
}

# Short keys of the game counters and the upgrades.
GAME_KEYS: dict[str, str] = {
    "current_floor": "f",
    "max_floor_reached": "mf",
    "current_group": "cg",
    "total_groups_per_floor": "tgpf",
    "gold": "go",
    "total_gold_earned": "tg",
    "total_runs": "tr",
    "gears_found": "gf2",
    "monsters_killed": "mk",
}
UPGRADE_KEYS: dict[str, str] = {
    "attack_bonus": "a",
    "defense_bonus": "d",
    "health_bonus": "h",
    "gold_multiplier": "g",
    "gear_drop_bonus": "gr",
}

# Name given to a stored member whose name was lost.
FALLBACK_MEMBER_NAME = "Adventurer"


class SavedRun(BaseModel):
    run_number: int = Field(ge=1)
    floor_reached: int = Field(ge=1)
    timestamp: float = 0


class SavedGame(BaseModel):
    """Game counters stored in a save."""

    current_floor: int = Field(default=1, ge=1)
    max_floor_reached: int = Field(default=1, ge=1)
    current_group: int = Field(default=1, ge=1)
    total_groups_per_floor: int = Field(default=DEFAULT_GROUPS_PER_FLOOR, ge=1)
    gold: int = Field(default=0, ge=0)
    total_gold_earned: int = Field(default=0, ge=0)
    total_runs: int = Field(default=0, ge=0)
    gears_found: int = Field(default=0, ge=0)
    monsters_killed: int = Field(default=0, ge=0)
    run_history: list[SavedRun] = Field(default_factory=list)


class SavedMember(BaseModel):
    """A party member stored in a save. Live combat state is not kept."""

    name: str
    role: Role = Role.UNKNOWN
    dps_class: str | None = None
    base_hp: float = 100
    base_attack: float = 10
    base_defense: float = 5
    attack_speed: float = 1.0
    gear_levels: dict[GearSlot, NonNegativeInt] = Field(default_factory=dict)


class SaveData(BaseModel):
    """Everything needed to resume a game."""

    game: SavedGame = Field(default_factory=SavedGame)
    party: list[SavedMember] = Field(default_factory=list)
    upgrades: UpgradeLevels = Field(default_factory=UpgradeLevels)
    timestamp: float = 0
    version: str = SAVE_VERSION


def create_save_data(core: "GameCore", timestamp: float = 0) -> SaveData:
    """
    Captures a game as save data.

    Only base stats and gear levels of the party are kept, so a loaded party
    always comes back at full health.

    Args:
        core (GameCore): The game to save.
        timestamp (float): When the save was made, in milliseconds.

    Returns:
        SaveData: The save.

    """
    progression = core.progression
    economy = core.economy
    game = SavedGame(
        current_floor=progression.current_floor,
        max_floor_reached=progression.max_floor_reached,
        current_group=progression.current_group,
        total_groups_per_floor=progression.total_groups_per_floor,
        gold=economy.gold,
        total_gold_earned=economy.total_gold_earned,
        total_runs=progression.total_runs,
        gears_found=progression.gears_found,
        monsters_killed=progression.monsters_killed,
        run_history=[
            SavedRun(**entry.model_dump()) for entry in progression.run_history
        ],
    )
    party = [
        SavedMember(
            name=member.name,
            role=member.role,
            dps_class=member.dps_class,
            base_hp=member.base_hp,
            base_attack=member.base_attack,
            base_defense=member.base_defense,
            attack_speed=member.attack_speed,
            gear_levels={slot: item.level for slot, item in member.gear.items()},
        )
        for member in core.party
    ]
    return SaveData(
        game=game,
        party=party,
        upgrades=economy.upgrades.model_copy(),
        timestamp=timestamp,
    )


def _compress(save: SaveData) -> dict[str, Any]:
    game = {short: getattr(save.game, name) for name, short in GAME_KEYS.items()}
    game["rh"] = [
        {"r": run.run_number, "f": run.floor_reached, "t": run.timestamp}
        for run in save.game.run_history
    ]
    party = [
        {
            "n": member.name,
            "r": member.role.value,
            "dc": member.dps_class,
            "bh": member.base_hp,
            "a": member.base_attack,
            "d": member.base_defense,
            "as": member.attack_speed,
            "g": {
                GEAR_KEYS[slot]: level for slot, level in member.gear_levels.items()
            },
        }
        for member in save.party
    ]
    upgrades = {short: getattr(save.upgrades, name) for name, short in UPGRADE_KEYS.items()}
    return {"g": game, "p": party, "u": upgrades, "t": save.timestamp, "v": save.version}


def _default_member_name(role: Role) -> str:
    if role == Role.UNKNOWN:
        return FALLBACK_MEMBER_NAME
    return role.value.title()


def _expand(compressed: dict[str, Any]) -> SaveData:
    game_data = compressed["g"]
    game: dict[str, Any] = {
        name: game_data[short]
        for name, short in GAME_KEYS.items()
        if game_data.get(short) is not None
    }
    # Zero means "unset" for fields that have a meaningful default.
    for name in ("current_group", "total_groups_per_floor"):
        if not game.get(name, 1):
            game.pop(name)
    game["run_history"] = [
        {"run_number": run["r"], "floor_reached": run["f"], "timestamp": run.get("t", 0)}
        for run in game_data.get("rh") or []
    ]

    gear_slots = {short: slot for slot, short in GEAR_KEYS.items()}
    party = []
    for member in compressed["p"]:
        levels = member.get("g") or {}
        role = Role(member.get("r"))
        party.append(
            {
                "name": member.get("n") or _default_member_name(role),
                "role": role,
                "dps_class": member.get("dc"),
                "base_hp": member.get("bh") or member.get("h") or 100,
                "base_attack": member.get("a", 10),
                "base_defense": member.get("d", 5),
                "attack_speed": member.get("as") or 1.0,
                "gear_levels": {
                    gear_slots[short]: level
                    for short, level in levels.items()
                    if short in gear_slots and level
                },
            }
        )

    upgrade_data = compressed.get("u") or {}
    upgrades = {
        name: upgrade_data[short]
        for name, short in UPGRADE_KEYS.items()
        if upgrade_data.get(short) is not None
    }
    return SaveData.model_validate(
        {
            "game": game,
            "party": party,
            "upgrades": upgrades,
            "timestamp": compressed.get("t") or 0,
            "version": compressed.get("v") or SAVE_VERSION,
        }
    )


def encode_save(save: SaveData) -> str:
    """
    Encodes save data as a compact string.

    Args:
        save (SaveData): The save.

    Returns:
        str: URL-safe base64 of the compact JSON, without padding.

    """
    payload = json.dumps(_compress(save), separators=(",", ":"), ensure_ascii=False)
    return base64.urlsafe_b64encode(payload.encode("utf-8")).decode("ascii").rstrip("=")


def decode_save(encoded: str) -> SaveData | None:
    """
    Decodes a string produced by `encode_save`.

    Args:
        encoded (str): The save string.

    Returns:
        SaveData | None: The save, or None if the string is corrupt.

    """
    if not isinstance(encoded, str) or not encoded.strip():
        log_warning("Save string is empty", {"context": "decode_save"})
        return None
    text = encoded.strip()
    try:
        raw = base64.urlsafe_b64decode(text + "=" * (-len(text) % 4))
        compressed = json.loads(raw.decode("utf-8"))
        if (
            not isinstance(compressed, dict)
            or not isinstance(compressed.get("g"), dict)
            or not isinstance(compressed.get("p"), list)
            or not isinstance(compressed.get("u") or {}, dict)
        ):
            raise ValueError("Invalid save data structure")
        save = _expand(compressed)
    except (
        binascii.Error,
        UnicodeDecodeError,
        ValueError,
        KeyError,
        TypeError,
        AttributeError,
        ValidationError,
    ) as e:
        log_warning(
            f"Failed to decode save: {e}",
            {"context": "decode_save", "error": type(e).__name__},
        )
        return None
    if not save.party:
        log_warning("Save has no party members", {"context": "decode_save"})
        return None
    return save


def restore_member(saved: SavedMember, upgrades: UpgradeLevels) -> PartyMember:
    """
    Rebuilds a party member from a save at full health.

    Slots missing from the save get the default item at level 1.

    Args:
        saved (SavedMember): The stored member.
        upgrades (UpgradeLevels): Upgrades applied to the derived stats.

    Returns:
        PartyMember: The member, with fresh timers and skill state.

    """
    member = create_member(saved.name, saved.role, saved.dps_class)
    member.gear = {
        slot: GearItem(level=saved.gear_levels.get(slot, 1), **data)
        for slot, data in DEFAULT_GEAR.items()
    }
    member.skill = create_skill(saved.dps_class or saved.role.value)
    context = {"member": saved.name, "context": "restore_member"}
    member.base_hp = ensure_finite_number(saved.base_hp, "base_hp", 100, context)
    member.base_attack = ensure_finite_number(saved.base_attack, "base_attack", 10, context)
    member.base_defense = ensure_finite_number(
        saved.base_defense, "base_defense", 5, context
    )
    attack_speed = ensure_finite_number(saved.attack_speed, "attack_speed", 1.0, context)
    if attack_speed < MIN_ATTACK_SPEED:
        log_warning(
            f"attack_speed must be at least {MIN_ATTACK_SPEED}, got: {attack_speed}",
            {**context, "corrected_to": MIN_ATTACK_SPEED},
        )
        attack_speed = MIN_ATTACK_SPEED
    member.attack_speed = attack_speed
    stats = derive_stats(member, upgrades)
    member.max_hp = stats.max_hp
    member.attack = stats.attack
    member.defense = stats.defense
    member.hp = stats.max_hp
    return member


def restore_party(save: SaveData) -> list[PartyMember]:
    """Rebuilds the whole party of a save, at full health."""
    return [restore_member(saved, save.upgrades) for saved in save.party]
