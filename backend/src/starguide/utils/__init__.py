"""Utility modules for starguide."""

from starguide.utils.role_normalizer import (
    CATEGORY_ALIASES,
    CATEGORY_ORDER,
    MODE_ALIASES,
    normalize_category,
    normalize_mode,
    normalize_mode_strict,
    sort_by_category,
)
from starguide.utils.scales import (
    granular_rank,
    rating_index,
    score_to_granular,
    shift_rating,
    tier_index,
)

__all__ = [
    "CATEGORY_ALIASES",
    "CATEGORY_ORDER",
    "MODE_ALIASES",
    "normalize_category",
    "normalize_mode",
    "normalize_mode_strict",
    "sort_by_category",
    "granular_rank",
    "rating_index",
    "score_to_granular",
    "shift_rating",
    "tier_index",
]
