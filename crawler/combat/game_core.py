"""
Combat and progression state machine for the crawler.

`GameCore` owns the party, the progression, combat and economy sub-states
and the event log. The scheduler drives it one turn at a time; renderers
read it through `snapshot()`.
"""

import random
import threading
from contextlib import contextmanager
from typing import Callable, Iterator

from catchery import log_debug, log_warning

from crawler.character.enemy import Enemy
from crawler.character.gear import GearItem
from crawler.character.party import initialize_party
from crawler.character.party_member import PartyMember
from crawler.character.stats import StatDelta, apply_derived_stats
from crawler.core.constants import (
    ATTACK_TIMER_MAX,
    DEFAULT_GAME_SPEED_MS,
    DEFAULT_GROUPS_PER_FLOOR,
    MASS_RESURRECTION_MS,
    SHIELD_WALL_TURNS,
    TICK_MS,
    GearSlot,
    LogCategory,
    ResetReason,
    SkillType,
    UpgradeType,
)
from crawler.core.content import DEFAULT_GEAR, UPGRADE_SHOP
from crawler.core.error_handling import ensure_int_in_range
from crawler.economy.upgrades import (
    UpgradeLevels,
    get_upgrade_cost,
    gold_reward,
    roll_gear_drop,
)
from crawler.persistence.save_codec import (
    SaveData,
    create_save_data,
    decode_save,
    encode_save,
    restore_party,
)

from . import messages, skills
from .damage import resolve_enemy_damage, resolve_party_damage
from .encounter import generate_encounter
from .event_log import EventLog, wall_clock_ms
from .skills import SkillCast, SkillPass
from .state import (
    CombatState,
    EconomyState,
    GameSnapshot,
    ProgressionState,
    RunHistoryEntry,
    UpgradePurchase,
)
from .targeting import random_choice, select_random_member, select_target


class GameCore:
    """
    Owns the whole game state and every transition on it.

    States: idle, in combat, group cleared (transient), party wiped
    (transient) and mass resurrection. All public methods are safe to call
    from any thread; each one commits its log entries as a single batch.
    """

    def __init__(
        self,
        party: list[PartyMember] | None = None,
        upgrades: UpgradeLevels | None = None,
        rng: random.Random | None = None,
        clock: Callable[[], float] | None = None,
        total_groups_per_floor: int = DEFAULT_GROUPS_PER_FLOOR,
        game_speed_ms: int = DEFAULT_GAME_SPEED_MS,
        log: EventLog | None = None,
    ):
        """
        Initialize a new game.

        Args:
            party (list[PartyMember] | None): The party, the starting party if None.
            upgrades (UpgradeLevels | None): Purchased upgrades.
            rng (random.Random | None): Random source for every roll.
            clock (Callable[[], float] | None): Millisecond clock.
            total_groups_per_floor (int): Groups to clear on every floor.
            game_speed_ms (int): Length of one coarse game-loop step.
            log (EventLog | None): The event log, a fresh one if None.

        """
        self.rng: random.Random = rng or random.Random()
        self.clock: Callable[[], float] = clock or wall_clock_ms
        self.log: EventLog = log or EventLog(clock=self.clock)

        self.economy = EconomyState(upgrades=upgrades or UpgradeLevels())
        self.party: list[PartyMember] = (
            party if party is not None else initialize_party(self.economy.upgrades)
        )
        self.progression = ProgressionState(total_groups_per_floor=total_groups_per_floor)
        self.combat = CombatState()

        self._game_speed_ms = DEFAULT_GAME_SPEED_MS
        self.game_speed_ms = game_speed_ms

        self._lock = threading.RLock()

    # ============================================================================
    # PROPERTIES
    # ============================================================================

    @property
    def game_speed_ms(self) -> int:
        """Length of one coarse game-loop step, read fresh every tick."""
        return self._game_speed_ms

    @game_speed_ms.setter
    def game_speed_ms(self, value: int) -> None:
        self._game_speed_ms = ensure_int_in_range(
            value, "game_speed_ms", TICK_MS, context={"context": "game_speed"}
        )

    @property
    def ready_for_next_encounter(self) -> bool:
        """True when no fight is running and no ritual is in progress."""
        return not self.combat.in_combat and not self.combat.performing_mass_res

    def living_members(self) -> list[PartyMember]:
        return [member for member in self.party if member.is_alive()]

    @contextmanager
    def transaction(self) -> Iterator[None]:
        """
        Holds the game lock and one log batch for the duration of the block.

        Every public transition runs inside one. The scheduler wraps a whole
        turn in one, so a turn is atomic with respect to calls from other
        threads and commits its log entries as a single batch.
        """
        with self._lock, self.log.batch():
            yield

    def _resolve_speed(self, game_speed_ms: int | None) -> int:
        if game_speed_ms is None:
            return self.game_speed_ms
        return ensure_int_in_range(
            game_speed_ms, "game_speed_ms", TICK_MS, context={"context": "game_speed"}
        )

    # ============================================================================
    # ENCOUNTERS
    # ============================================================================

    def start_combat(self) -> list[Enemy]:
        """
        Starts the encounter for the current floor and group.

        Ignored while a fight or a mass resurrection is running.

        Returns:
            list[Enemy]: The new encounter, empty if the request was ignored.

        """
        with self.transaction():
            if not self.ready_for_next_encounter:
                log_debug("start_combat ignored, game is busy")
                return []
            floor = self.progression.current_floor
            group = self.progression.current_group
            enemies = generate_encounter(floor, group)
            self.combat.enemies = enemies
            self.combat.in_combat = True
            self.combat.enemy_attack_timer = 0.0
            for member in self.party:
                member.attack_timer = 0.0
            self.log.add(
                messages.encounter_message(floor, group, enemies),
                LogCategory.PROGRESSION,
            )
            return enemies

    def _end_combat(self) -> None:
        self.combat.in_combat = False
        self.combat.enemies = []
        self.combat.enemy_attack_timer = 0.0
        for member in self.party:
            member.attack_timer = 0.0

    # ============================================================================
    # ATTACK TIMERS
    # ============================================================================

    def process_attack_timers(self, game_speed_ms: int | None = None) -> None:
        """
        Advances every attack timer by one tick and resolves the attacks.

        Args:
            game_speed_ms (int | None): The game speed, the live one if None.

        """
        speed = self._resolve_speed(game_speed_ms)
        with self.transaction():
            if not self.combat.in_combat or self.combat.performing_mass_res:
                return
            if self._check_party_state():
                return
            self._advance_party_timers(speed)
            if self._check_group_cleared():
                return
            self._advance_enemy_timer(speed)
            self._check_party_state()

    def _advance_party_timers(self, speed: int) -> None:
        increment = ATTACK_TIMER_MAX / (speed / TICK_MS)
        for member in self.party:
            if not member.can_act():
                continue
            member.attack_timer += increment * member.attack_speed
            if member.attack_timer < ATTACK_TIMER_MAX:
                continue
            member.attack_timer = 0.0
            self._party_attack(member)

    def _party_attack(self, member: PartyMember) -> None:
        target = select_target(member, self.combat.enemies, self.rng)
        if target is None:
            return
        roll = resolve_party_damage(member, target, self.rng)
        text = messages.tactical_message(
            member, target, roll.damage, roll.is_critical, roll.boost
        )
        gear_found = False
        if target.take_damage(roll.damage):
            floor = self.progression.current_floor
            upgrades = self.economy.upgrades
            gold = gold_reward(floor, upgrades.gold_multiplier)
            self.economy.earn(gold)
            self.progression.monsters_killed += 1
            gear_found = roll_gear_drop(floor, upgrades.gear_drop_bonus, self.rng)
            if gear_found:
                self.progression.gears_found += 1
            text += messages.kill_suffix(target, gold)
        self.log.add(text, LogCategory.COMBAT, is_critical=roll.is_critical)
        if gear_found:
            self.log.add(
                messages.gear_found_message(self.progression.gears_found),
                LogCategory.REWARDS,
            )
        member.consume_damage_boost()

    def _check_group_cleared(self) -> bool:
        if self.combat.living_enemies():
            return False
        progression = self.progression
        if progression.is_last_group():
            self.log.add(
                messages.floor_cleared_message(progression.current_floor),
                LogCategory.PROGRESSION,
            )
            progression.current_floor += 1
            progression.current_group = 1
            progression.max_floor_reached = max(
                progression.max_floor_reached, progression.current_floor
            )
        else:
            self.log.add(
                messages.group_cleared_message(
                    progression.current_group, progression.total_groups_per_floor
                ),
                LogCategory.PROGRESSION,
            )
            progression.current_group += 1
        self._end_combat()
        return True

    def _advance_enemy_timer(self, speed: int) -> None:
        combat = self.combat
        combat.enemy_attack_timer = min(
            ATTACK_TIMER_MAX,
            combat.enemy_attack_timer + ATTACK_TIMER_MAX / (speed / TICK_MS),
        )
        if combat.enemy_attack_timer < ATTACK_TIMER_MAX:
            return
        combat.enemy_attack_timer = 0.0

        shield_wall = combat.shield_wall_active
        for enemy in combat.living_enemies():
            target = select_random_member(self.party, self.rng)
            if target is None:
                break
            self.resolve_enemy_attack(enemy, target, shield_wall)

        if combat.shield_wall_active:
            combat.shield_wall_turns = max(0, combat.shield_wall_turns - 1)
            if combat.shield_wall_turns == 0:
                combat.clear_shield_wall()
                self.log.add(messages.SHIELD_WALL_EXPIRED, LogCategory.STATUS)

    def resolve_enemy_attack(
        self, enemy: Enemy, target: PartyMember, shield_wall: bool = False
    ) -> None:
        """
        Applies one enemy attack to a party member, including Divine Protection.

        Args:
            enemy (Enemy): The attacker.
            target (PartyMember): The member being hit.
            shield_wall (bool): Whether Shield Wall halves the damage.

        """
        if target.is_protected_healer():
            self.log.add(
                messages.absorbed_attack_message(enemy, target), LogCategory.COMBAT
            )
            return
        damage = resolve_enemy_damage(enemy, target, shield_wall)
        if target.is_healer() and target.hp - damage <= 0:
            # Divine Protection: the healer survives on 1 hp and stops acting.
            target.hp = 1
            target.is_protected = True
            self.combat.healer_protected = True
            self.log.add(messages.divine_protection_message(target), LogCategory.SPECIAL)
        else:
            target.set_hp(target.hp - damage)
        self.log.add(
            messages.enemy_attack_message(enemy, target, damage, shield_wall),
            LogCategory.COMBAT,
        )

    def _check_party_state(self) -> bool:
        """
        Detects a wiped party or a lone protected healer.

        Returns:
            bool: True if a transition was started.

        """
        alive = self.living_members()
        if not alive:
            self.reset_to_floor_one(ResetReason.WIPE)
            return True
        if len(alive) == 1 and alive[0].is_protected_healer():
            self._begin_mass_resurrection()
            return True
        return False

    # ============================================================================
    # MASS RESURRECTION AND RESETS
    # ============================================================================

    def _begin_mass_resurrection(self) -> None:
        self.combat.performing_mass_res = True
        self.combat.mass_resurrection_timer = 0
        self.log.add(messages.MASS_RES_STARTED, LogCategory.SPECIAL)

    def process_mass_resurrection(self) -> bool:
        """
        Advances the resurrection ritual by one tick.

        Returns:
            bool: True if the ritual completed on this tick.

        """
        with self.transaction():
            combat = self.combat
            if not combat.performing_mass_res:
                return False
            combat.mass_resurrection_timer = min(
                MASS_RESURRECTION_MS, combat.mass_resurrection_timer + TICK_MS
            )
            if combat.mass_resurrection_timer < MASS_RESURRECTION_MS:
                return False
            for member in self.party:
                if not member.is_healer():
                    member.hp = member.max_hp
            self._send_to_floor_one()
            self.log.add(messages.MASS_RES_COMPLETED, LogCategory.SPECIAL)
            return True

    def reset_to_floor_one(self, reason: ResetReason = ResetReason.WIPE) -> None:
        """
        Ends the current run and sends a fully healed party back to floor 1.

        Args:
            reason (ResetReason): Why the run ended.

        """
        with self.transaction():
            for member in self.party:
                member.restore()
            self._send_to_floor_one()
            self.log.add(messages.RESET_MESSAGES[reason.value], LogCategory.STATUS)

    def _send_to_floor_one(self) -> None:
        self.progression.record_run(self.clock())
        self.progression.current_floor = 1
        self.progression.current_group = 1
        for member in self.party:
            member.is_protected = False
        self._end_combat()
        self.combat.clear_shield_wall()
        self.combat.healer_protected = False
        self.combat.performing_mass_res = False
        self.combat.mass_resurrection_timer = 0

    # ============================================================================
    # SKILLS AND THE COARSE GAME LOOP
    # ============================================================================

    def process_skills(self, elapsed_ms: int | None = None) -> SkillPass:
        """
        Runs one skill pass and applies its party-wide effects.

        Args:
            elapsed_ms (int | None): Time since the previous pass, the live
                game speed if None.

        Returns:
            SkillPass: The skills that fired.

        """
        elapsed = max(0, elapsed_ms) if elapsed_ms is not None else self.game_speed_ms
        with self.transaction():
            if not self.combat.in_combat or self.combat.performing_mass_res:
                return SkillPass()
            result = skills.process_skills(self.party, elapsed, self.rng)
            if result.shield_wall_raised:
                self.combat.shield_wall_active = True
                self.combat.shield_wall_turns = SHIELD_WALL_TURNS
            for cast in result.casts:
                self._log_cast(cast)
            return result

    def _log_cast(self, cast: SkillCast) -> None:
        if cast.skill_type == SkillType.HEAL and cast.target is not None:
            self.log.add(
                messages.heal_message(
                    cast.caster, cast.target, cast.amount, cast.is_critical
                ),
                LogCategory.SKILLS,
                is_critical=cast.log_critical,
            )
        elif cast.skill_type == SkillType.DAMAGE_REDUCTION:
            self.log.add(messages.shield_wall_message(cast.caster), LogCategory.SKILLS)

    def process_game_loop(self, game_speed_ms: int | None = None) -> None:
        """
        One coarse game-loop step: skills in combat, gear upgrades otherwise.

        Args:
            game_speed_ms (int | None): The game speed, the live one if None.

        """
        speed = self._resolve_speed(game_speed_ms)
        with self.transaction():
            if self.combat.performing_mass_res:
                return
            if self.combat.in_combat:
                self.process_skills(speed)
            elif self.progression.gears_found > 0:
                self.upgrade_gear()

    # ============================================================================
    # ECONOMY
    # ============================================================================

    def upgrade_cost(self, upgrade_type: UpgradeType) -> int:
        return get_upgrade_cost(upgrade_type, self.economy.upgrades.level_of(upgrade_type))

    def purchase_upgrade(self, upgrade_type: UpgradeType) -> UpgradePurchase:
        """
        Buys the next level of an upgrade if the party can afford it.

        Every member is re-derived and keeps its health percentage. A failed
        purchase changes nothing.

        Args:
            upgrade_type (UpgradeType): The upgrade to buy.

        Returns:
            UpgradePurchase: The outcome, with the stat change of every member.

        """
        upgrade_type = UpgradeType(upgrade_type)
        with self.transaction():
            level = self.economy.upgrades.level_of(upgrade_type)
            cost = get_upgrade_cost(upgrade_type, level)
            if self.economy.gold < cost:
                log_debug(
                    f"Cannot afford {upgrade_type.value}: {self.economy.gold} < {cost}"
                )
                return UpgradePurchase(
                    success=False, upgrade_type=upgrade_type, new_level=level, cost=cost
                )
            self.economy.gold -= cost
            self.economy.upgrades = self.economy.upgrades.incremented(upgrade_type)
            deltas = [
                apply_derived_stats(member, self.economy.upgrades) for member in self.party
            ]
            self.log.add(
                messages.upgrade_purchase_message(
                    UPGRADE_SHOP[upgrade_type]["name"], level + 1, cost
                ),
                LogCategory.SKILLS,
            )
            return UpgradePurchase(
                success=True,
                upgrade_type=upgrade_type,
                new_level=level + 1,
                cost=cost,
                deltas=deltas,
            )

    def upgrade_gear(self) -> StatDelta | None:
        """
        Spends one gear drop on a random slot of a random member.

        Returns:
            StatDelta | None: The member's stat change, None if no drop was
                waiting or the party is empty.

        """
        with self.transaction():
            if self.progression.gears_found <= 0 or not self.party:
                return None
            member = random_choice(self.party, self.rng)
            slot = random_choice(list(GearSlot), self.rng)
            item = member.gear.get(slot)
            if item is None:
                item = GearItem(level=0, **DEFAULT_GEAR[slot])
                member.gear[slot] = item
            item.level += 1
            self.progression.gears_found -= 1
            delta = apply_derived_stats(member, self.economy.upgrades)
            self.log.add(
                messages.gear_upgrade_message(member, slot, item.level),
                LogCategory.REWARDS,
            )
            return delta

    # ============================================================================
    # SNAPSHOTS AND SAVES
    # ============================================================================

    def snapshot(self) -> GameSnapshot:
        """Returns a deep copy of the whole game state."""
        with self._lock:
            return GameSnapshot(
                party=[member.model_copy(deep=True) for member in self.party],
                progression=self.progression.model_copy(deep=True),
                combat=self.combat.model_copy(deep=True),
                economy=self.economy.model_copy(deep=True),
                game_speed_ms=self.game_speed_ms,
            )

    def export_save(self) -> str:
        """Encodes the current game as a portable save string."""
        with self._lock:
            return encode_save(create_save_data(self, timestamp=self.clock()))

    def load_save(self, save: SaveData) -> None:
        """
        Replaces the game state with a decoded save.

        The party comes back at full health and the game resumes idle.

        Args:
            save (SaveData): The save to load.

        """
        with self.transaction():
            party = restore_party(save)
            game = save.game
            progression = ProgressionState(
                current_floor=game.current_floor,
                current_group=min(game.current_group, game.total_groups_per_floor),
                total_groups_per_floor=game.total_groups_per_floor,
                max_floor_reached=max(game.max_floor_reached, game.current_floor),
                total_runs=game.total_runs,
                run_history=[
                    RunHistoryEntry(**run.model_dump()) for run in game.run_history
                ],
                monsters_killed=game.monsters_killed,
                gears_found=game.gears_found,
            )
            economy = EconomyState(
                gold=game.gold,
                total_gold_earned=max(game.total_gold_earned, game.gold),
                upgrades=save.upgrades,
            )
            self.party = party
            self.progression = progression
            self.economy = economy
            self.combat = CombatState()
            self.log.add(
                f"💾 Game loaded: Floor {progression.current_floor}, "
                f"{economy.gold} gold",
                LogCategory.STATUS,
            )

    def import_save(self, encoded: str) -> bool:
        """
        Loads a save string produced by `export_save`.

        Args:
            encoded (str): The save string.

        Returns:
            bool: False if the string could not be decoded; nothing is
                changed in that case.

        """
        save = decode_save(encoded)
        if save is None:
            log_warning(
                "Import failed, keeping the current game",
                {"length": len(encoded) if isinstance(encoded, str) else None},
            )
            return False
        self.load_save(save)
        return True
