from __future__ import annotations

from .errors import InvalidMedalName, InvalidMedalPosition

GOLD = "Gold"
SILVER = "Silver"
BRONZE = "Bronze"

MIN_POSITION = 1
MAX_POSITION = 12
GOLD_POSITION = 1
SILVER_POSITION = 2
BRONZE_FIRST = 3
BRONZE_LAST = 12

MEDAL_NAMES = (GOLD, SILVER, BRONZE)


def validate_position(position) -> bool:
    # bool is an int subclass; True must not pass as position 1
    if isinstance(position, bool) or not isinstance(position, int):
        return False
    return MIN_POSITION <= position <= MAX_POSITION


def name_for_position(position: int) -> str:
    if not validate_position(position):
        raise InvalidMedalPosition(f"Invalid medal position: {position}. Must be between 1-12.")
    if position == GOLD_POSITION:
        return GOLD
    if position == SILVER_POSITION:
        return SILVER
    return BRONZE


def all_medals_by_position() -> list[dict]:
    return [
        {"position": position, "name": name_for_position(position)}
        for position in range(MIN_POSITION, MAX_POSITION + 1)
    ]


def validate_name(name) -> bool:
    return isinstance(name, str) and name in MEDAL_NAMES


def positions_for_name(name: str) -> list[int]:
    if not validate_name(name):
        raise InvalidMedalName(f"Invalid medal name: {name}. Must be Gold, Silver, or Bronze.")
    if name == GOLD:
        return [GOLD_POSITION]
    if name == SILVER:
        return [SILVER_POSITION]
    return list(range(BRONZE_FIRST, BRONZE_LAST + 1))


def ordinal_suffix(number: int) -> str:
    if 11 <= number % 100 <= 13:
        return "th"
    return {1: "st", 2: "nd", 3: "rd"}.get(number % 10, "th")


def format_display(position: int) -> str:
    """Display label for a podium position, e.g. ``1st - Gold``."""
    name = name_for_position(position)
    return f"{position}{ordinal_suffix(position)} - {name}"
