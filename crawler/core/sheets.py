"""
Module for printing the party, the encounter and the event log in a
formatted way.
"""

from typing import Any, Iterable

from rich.table import Table

from .constants import LogCategory
from .utils import cprint, crule, make_bar


def hp_color(ratio: float) -> str:
    """Returns the bar color for a health fraction."""
    if ratio > 0.6:
        return "green"
    if ratio > 0.3:
        return "yellow"
    return "red"


def print_party_sheet(party: Iterable[Any]) -> None:
    """
    Prints one row per party member: health, stats, timer and skill state.

    Args:
        party (Iterable[Any]): The party members.

    """
    table = Table(title="Party", show_lines=False)
    table.add_column("Member")
    table.add_column("HP")
    table.add_column("ATK", justify="right")
    table.add_column("DEF", justify="right")
    table.add_column("Timer")
    table.add_column("Skill")
    for member in party:
        ratio = member.hp / member.max_hp if member.max_hp else 0
        hp_text = (
            f"{make_bar(member.hp, member.max_hp, color=hp_color(ratio))} "
            f"{member.hp}/{member.max_hp}"
        )
        if member.is_protected:
            hp_text += " 🛡️"
        skill = member.skill
        if skill is None:
            skill_text = "-"
        elif member.skill_active:
            skill_text = f"[bold cyan]{skill.name} (active)[/]"
        elif member.skill_cooldown_ms > 0:
            skill_text = f"{skill.name} [dim]({member.skill_cooldown_ms / 1000:.1f}s)[/]"
        else:
            skill_text = f"[green]{skill.name}[/]"
        table.add_row(
            f"{member.role.emoji} {member.colored_name}",
            hp_text,
            str(member.attack),
            str(member.defense),
            make_bar(int(member.attack_timer), 100, length=8, color="blue"),
            skill_text,
        )
    cprint(table)


def print_encounter_sheet(enemies: Iterable[Any]) -> None:
    """
    Prints the enemies of the current encounter.

    Args:
        enemies (Iterable[Any]): The enemies.

    """
    for enemy in enemies:
        if enemy.hp <= 0:
            cprint(f"    💀 [dim]{enemy.name}[/]")
            continue
        bar = make_bar(enemy.hp, enemy.max_hp, color=hp_color(enemy.hp / enemy.max_hp))
        cprint(
            f"    {enemy.colored_name} {bar} {enemy.hp}/{enemy.max_hp} "
            f"ATK {enemy.attack} DEF {enemy.defense}"
        )


def print_progress_sheet(snapshot: Any) -> None:
    """
    Prints floor, group, gold and run counters of a game snapshot.

    Args:
        snapshot (Any): A `GameSnapshot`.

    """
    progression = snapshot.progression
    economy = snapshot.economy
    crule(
        f"Floor {progression.current_floor} - Group "
        f"{progression.current_group}/{progression.total_groups_per_floor}",
        style="bold yellow",
    )
    cprint(
        f"    💰 {economy.gold} gold ({economy.total_gold_earned} earned)  "
        f"🏆 best floor {progression.max_floor_reached}  "
        f"☠️ {progression.monsters_killed} kills  "
        f"🎁 {progression.gears_found} gear  "
        f"🔁 run {progression.total_runs + 1}"
    )
    if snapshot.combat.performing_mass_res:
        cprint(
            "    🕊️ Mass Resurrection "
            + make_bar(snapshot.combat.mass_resurrection_timer, 10000, color="magenta")
        )
    if snapshot.combat.shield_wall_active:
        cprint(f"    🛡️ Shield Wall ({snapshot.combat.shield_wall_turns} turns)")


def print_log_entries(entries: Iterable[Any]) -> None:
    """Prints event log entries colored by category."""
    for entry in entries:
        category = LogCategory(entry.category)
        text = entry.text
        if entry.is_critical:
            text = f"[bold]{text}[/]"
        cprint(f"    {category.colorize(text)}")
