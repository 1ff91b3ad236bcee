"""Ordered scales and the empirical weight tables used by the scorers.

All tables are keyed by the raw string value of the scale so they can be read
from JSON or overridden without importing the enums.
"""

from starguide.models.character import GranularRating, TeammateRating, TierRating

# Best to worst
TIER_ORDER: tuple[str, ...] = tuple(t.value for t in TierRating)
RATING_ORDER: tuple[str, ...] = tuple(r.value for r in TeammateRating)
GRANULAR_ORDER: tuple[str, ...] = tuple(g.value for g in GranularRating)

DEFAULT_TIER = TierRating.T2

# Weight of a wanting character's tier in a pull contribution
TIER_WEIGHTS: dict[str, float] = {
    "T-1": 2.5,
    "T-0.5": 2.25,
    "T0": 2.0,
    "T0.5": 1.75,
    "T1": 1.5,
    "T1.5": 1.25,
    "T2": 1.0,
    "T3": 0.6,
    "T4": 0.4,
    "T5": 0.3,
}
UNKNOWN_TIER_WEIGHT = 0.5

# Weight of a synergy rating in a pull contribution
SYNERGY_WEIGHTS: dict[str, float] = {
    "S+": 1.5,
    "S": 1.2,
    "A": 1.0,
    "B": 0.7,
    "C": 0.5,
    "D": 0.3,
}

# How much an owned teammate already covers a role category
COVERAGE_WEIGHTS: dict[str, float] = {
    "S+": 1.2,
    "S": 1.0,
    "A": 0.8,
    "B": 0.5,
    "C": 0.3,
    "D": 0.1,
}
DEFAULT_COVERAGE_DECAY = 0.5

# Scales the aggregate by the candidate's own best tier
CANDIDATE_TIER_MULTIPLIERS: dict[str, float] = {
    "T-1": 1.3,
    "T-0.5": 1.25,
    "T0": 1.2,
    "T0.5": 1.15,
    "T1": 1.1,
    "T1.5": 1.05,
    "T2": 1.0,
    "T3": 0.95,
    "T4": 0.9,
    "T5": 0.85,
}

# Lower bound inclusive, checked top down
GRANULAR_THRESHOLDS: tuple[tuple[float, GranularRating], ...] = (
    (16.0, GranularRating.S),
    (12.0, GranularRating.S_MINUS),
    (9.0, GranularRating.A_PLUS),
    (7.0, GranularRating.A),
    (5.5, GranularRating.A_MINUS),
    (4.0, GranularRating.B_PLUS),
    (3.0, GranularRating.B),
    (2.0, GranularRating.B_MINUS),
    (1.25, GranularRating.C_PLUS),
    (0.75, GranularRating.C),
    (0.25, GranularRating.C_MINUS),
)

# Team tier: average score per member, mapped back through TEAM_TIER_BANDS
# Compositions listed as weak in a mode keep this share of their team score
WEAK_MODE_PENALTY = 0.85
TEAM_TIER_SCORES: dict[str, int] = {
    "T-1": 115,
    "T-0.5": 107,
    "T0": 100,
    "T0.5": 90,
    "T1": 80,
    "T1.5": 70,
    "T2": 60,
    "T3": 50,
    "T4": 40,
    "T5": 30,
}
TEAM_TIER_BANDS: tuple[tuple[float, TierRating], ...] = (
    (110, TierRating.T_MINUS_1),
    (103, TierRating.T_MINUS_0_5),
    (90, TierRating.T0),
    (80, TierRating.T0_5),
    (70, TierRating.T1),
    (60, TierRating.T1_5),
    (50, TierRating.T2),
    (40, TierRating.T3),
    (30, TierRating.T4),
)

# Average teammate quality for DPS team readiness
QUALITY_SCORES: dict[str, float] = {
    "S+": 1.0,
    "S": 0.9,
    "A": 0.8,
    "B": 0.6,
    "C": 0.4,
    "D": 0.2,
}

# Verdict synthesis
STATUS_BASE_SCORES: dict[str, float] = {"fills": 10.0, "upgrades": 6.0, "sidegrade": 2.0, "low": 0.0}
SUPPORT_VERDICT_THRESHOLDS = {"critical": 20.0, "strong": 12.0, "flex": 5.0}
DPS_VERDICT_THRESHOLDS = {"ready": 16.0, "viable": 10.0, "weak": 5.0}

EIDOLON_STEP = 0.2
UNOWNED_EIDOLON_PENALTY = 0.5

STRONG_RATINGS = frozenset({"S+", "S", "A"})
USABLE_RATINGS = frozenset({"S+", "S", "A", "B"})


def _value(item) -> str:
    return getattr(item, "value", item)


def tier_index(tier) -> int:
    """Position on the tier scale; unknown tiers sort after T5."""
    try:
        return TIER_ORDER.index(_value(tier))
    except ValueError:
        return len(TIER_ORDER)


def rating_index(rating) -> int:
    """Position on the synergy scale; unknown ratings sort after D."""
    try:
        return RATING_ORDER.index(_value(rating))
    except ValueError:
        return len(RATING_ORDER)


def granular_rank(rating) -> int:
    """Rank on the granular scale, 0 for S. Used for sorting and filtering."""
    try:
        return GRANULAR_ORDER.index(_value(rating))
    except ValueError:
        return len(GRANULAR_ORDER)


def shift_rating(rating: TeammateRating, steps: int) -> TeammateRating:
    """Move ``steps`` positions toward S+ (negative toward D), clamped."""
    idx = rating_index(rating) - steps
    idx = min(max(idx, 0), len(RATING_ORDER) - 1)
    return TeammateRating(RATING_ORDER[idx])


def score_to_granular(score: float) -> GranularRating:
    for threshold, grade in GRANULAR_THRESHOLDS:
        if score >= threshold:
            return grade
    return GranularRating.D
