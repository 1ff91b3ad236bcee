"""Centralized normalization for role categories and game modes.

Knowledge files and API clients spell these several ways (``subDPS``,
``supportDPS``, ``MoC``). Everything downstream uses the enum values:
dps, sub_dps, amplifiers, sustains and moc, pf, as.
"""

from typing import Optional

from starguide.models.character import GameMode, RoleCategory

CATEGORY_ALIASES: dict[str, RoleCategory] = {
    # DPS list (supports say which DPS they pair with)
    "dps": RoleCategory.DPS,
    "carry": RoleCategory.DPS,
    "main_dps": RoleCategory.DPS,
    "maindps": RoleCategory.DPS,

    # Sub DPS (older data files call this list supportDPS)
    "sub_dps": RoleCategory.SUB_DPS,
    "subdps": RoleCategory.SUB_DPS,
    "sub-dps": RoleCategory.SUB_DPS,
    "supportdps": RoleCategory.SUB_DPS,
    "support_dps": RoleCategory.SUB_DPS,
    "support dps": RoleCategory.SUB_DPS,

    # Amplifiers
    "amplifiers": RoleCategory.AMPLIFIERS,
    "amplifier": RoleCategory.AMPLIFIERS,
    "amp": RoleCategory.AMPLIFIERS,
    "buffer": RoleCategory.AMPLIFIERS,
    "debuffer": RoleCategory.AMPLIFIERS,

    # Sustains
    "sustains": RoleCategory.SUSTAINS,
    "sustain": RoleCategory.SUSTAINS,
    "healer": RoleCategory.SUSTAINS,
    "shielder": RoleCategory.SUSTAINS,
}

MODE_ALIASES: dict[str, GameMode] = {
    "moc": GameMode.MOC,
    "memory of chaos": GameMode.MOC,
    "memory_of_chaos": GameMode.MOC,
    "pf": GameMode.PF,
    "pure fiction": GameMode.PF,
    "pure_fiction": GameMode.PF,
    "as": GameMode.AS,
    "apocalyptic shadow": GameMode.AS,
    "apocalyptic_shadow": GameMode.AS,
}

# Display/sort order for categories
CATEGORY_ORDER = [
    RoleCategory.DPS,
    RoleCategory.SUB_DPS,
    RoleCategory.AMPLIFIERS,
    RoleCategory.SUSTAINS,
]


def normalize_category(category: Optional[str]) -> Optional[RoleCategory]:
    """Normalize a teammate category name.

    Examples:
        >>> normalize_category("subDPS")
        <RoleCategory.SUB_DPS: 'sub_dps'>
        >>> normalize_category("Amplifier")
        <RoleCategory.AMPLIFIERS: 'amplifiers'>
        >>> normalize_category("bench") is None
        True
    """
    if category is None:
        return None
    if isinstance(category, RoleCategory):
        return category
    return CATEGORY_ALIASES.get(category.strip().lower())


def normalize_mode(mode: Optional[str]) -> Optional[GameMode]:
    """Normalize a game mode name, None if unknown."""
    if mode is None:
        return None
    if isinstance(mode, GameMode):
        return mode
    return MODE_ALIASES.get(mode.strip().lower())


def normalize_mode_strict(mode: str) -> GameMode:
    """Normalize a game mode, raising ValueError if unknown."""
    normalized = normalize_mode(mode)
    if normalized is None:
        raise ValueError(f"Unknown game mode: {mode}")
    return normalized


def sort_by_category(categories) -> list[RoleCategory]:
    def category_sort_key(category: RoleCategory) -> int:
        try:
            return CATEGORY_ORDER.index(category)
        except ValueError:
            return 99

    return sorted(categories, key=category_sort_key)
