"""
Restaurant positions and the three categories they roll up into
(kitchen, dining room, bar).
"""
from typing import Iterable, NamedTuple


class PositionConfig(NamedTuple):
    label: str
    description: str
    category: str


CATEGORY_KITCHEN = "kitchen"
CATEGORY_DINING_ROOM = "dining_room"
CATEGORY_BAR = "bar"

CATEGORIES = (CATEGORY_KITCHEN, CATEGORY_DINING_ROOM, CATEGORY_BAR)

CATEGORY_LABELS = {
    CATEGORY_KITCHEN:     "Kitchen",
    CATEGORY_DINING_ROOM: "Dining room",
    CATEGORY_BAR:         "Bar",
}

POSITION_CONFIGS: dict[str, PositionConfig] = {
    # Service
    "dining_room": PositionConfig("Dining room", "Table service", CATEGORY_DINING_ROOM),
    "bar":         PositionConfig("Bar", "Bar service", CATEGORY_BAR),
    # Kitchen
    "kitchen":     PositionConfig("Kitchen (general)", "All-round kitchen", CATEGORY_KITCHEN),
    "hot":         PositionConfig("Hot", "Hot station", CATEGORY_KITCHEN),
    "bread":       PositionConfig("Bread", "Bread station", CATEGORY_KITCHEN),
    "dispatch":    PositionConfig("Dispatch", "Pass / dispatch", CATEGORY_KITCHEN),
}

ALL_POSITIONS = tuple(POSITION_CONFIGS)


def is_valid_position(position: str | None) -> bool:
    return position in POSITION_CONFIGS


def validate_positions(positions: Iterable[str] | None) -> list[str]:
    """Keep only known positions, in order, without duplicates."""
    if not positions:
        return []
    seen: list[str] = []
    for pos in positions:
        if is_valid_position(pos) and pos not in seen:
            seen.append(pos)
    return seen


def category_of(position: str | None) -> str | None:
    config = POSITION_CONFIGS.get(position or "")
    return config.category if config else None
