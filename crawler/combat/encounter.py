"""
Encounter generator for the crawler.

Builds the enemy group for a (floor, group) pair. Stats scale linearly with
the floor, then by the enemy tier and, on boss floors, by the boss
multipliers. The group size is a step function of the floor.
"""

from crawler.character.enemy import Enemy
from crawler.core.content import (
    BOSS_ATTACK_MULTIPLIER,
    BOSS_DEFENSE_MULTIPLIER,
    BOSS_FLOOR_INTERVAL,
    BOSS_HP_MULTIPLIER,
    get_enemy_tier,
)
from crawler.core.error_handling import ensure_int_in_range, floor_at_least

# (highest floor, group size); floors beyond the last step get MAX_GROUP_SIZE.
GROUP_SIZE_STEPS: list[tuple[int, int]] = [(2, 1), (5, 2), (10, 3), (15, 4)]
MAX_GROUP_SIZE = 5


def group_size_for_floor(floor: int) -> int:
    """Returns how many enemies a group on this floor has."""
    for highest_floor, size in GROUP_SIZE_STEPS:
        if floor <= highest_floor:
            return size
    return MAX_GROUP_SIZE


def is_boss_floor(floor: int) -> bool:
    return floor % BOSS_FLOOR_INTERVAL == 0


def generate_encounter(floor: int, group: int) -> list[Enemy]:
    """
    Generates the enemies of one group.

    Args:
        floor (int): The floor, 1 or higher.
        group (int): The group on the floor, 1 or higher.

    Returns:
        list[Enemy]: The encounter, in attack order.

    """
    floor = ensure_int_in_range(floor, "floor", 1, context={"context": "encounter"})
    group = ensure_int_in_range(group, "group", 1, context={"context": "encounter"})

    tier = get_enemy_tier(floor)
    multiplier = tier["multiplier"]

    hp = (180 + 25 * floor) * multiplier
    attack = (3 + floor) * multiplier
    defense = (1 + 0.5 * floor) * multiplier

    boss = is_boss_floor(floor)
    if boss:
        hp *= BOSS_HP_MULTIPLIER
        attack *= BOSS_ATTACK_MULTIPLIER
        defense *= BOSS_DEFENSE_MULTIPLIER

    hp = floor_at_least(hp, 1, "enemy_hp", 1)
    attack = floor_at_least(attack, 1, "enemy_attack", 1)
    defense = floor_at_least(defense, 0, "enemy_defense", 0)

    size = group_size_for_floor(floor)
    enemies: list[Enemy] = []
    for index in range(size):
        if boss and index == 0:
            name = f"{tier['name']} Boss"
        elif size > 1:
            name = f"{tier['name']} {index + 1}"
        else:
            name = tier["name"]
        enemies.append(
            Enemy(
                id=f"{floor}-{group}-{index}",
                name=name,
                hp=hp,
                max_hp=hp,
                attack=attack,
                defense=defense,
                attack_speed=tier["attack_speed"],
            )
        )
    return enemies
