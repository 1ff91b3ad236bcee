"""Derived recommendation models. Built per run, never persisted."""

from dataclasses import asdict, dataclass, field
from datetime import date
from enum import Enum
from typing import Optional

from starguide.models.character import (
    DEFAULT_STRUCTURE,
    GranularRating,
    RoleCategory,
    TeammateRating,
    TeamStructure,
    TierRating,
)


class VerdictLevel(str, Enum):
    """Pull priority. Support verdicts and DPS verdicts share ``skip``."""

    CRITICAL = "critical"
    STRONG = "strong"
    FLEX = "flex"
    READY = "ready"
    VIABLE = "viable"
    WEAK = "weak"
    SKIP = "skip"


def _plain(value):
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, dict):
        return {_plain(k): _plain(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_plain(v) for v in value]
    return value


def _dict_factory(pairs) -> dict:
    return {key: _plain(value) for key, value in pairs}


def to_plain_dict(obj) -> dict:
    """asdict() with enums and dates flattened for JSON responses."""
    return asdict(obj, dict_factory=_dict_factory)


@dataclass
class WantedByEntry:
    """One character that wants the candidate, from one role category."""

    character_id: str
    character_name: str
    rating: TeammateRating
    category: RoleCategory
    reason: str = ""
    composition_id: Optional[str] = None  # Set when a composition raised the rating
    composition_name: Optional[str] = None
    roles: list[str] = field(default_factory=list)


@dataclass
class PullContribution:
    """A wanting character's weighted vote for a candidate."""

    wanting_id: str
    wanting_tier: TierRating
    rating: TeammateRating  # Effective rating after investment modifiers
    penalty: float = 1.0
    multiplier: float = 1.0


@dataclass
class OwnedOption:
    """An owned (or recommended) teammate in a slot, with its rating."""

    id: str
    name: str
    rating: TeammateRating


@dataclass
class RoleOverlap:
    """An owned alternative that already fills the candidate's role."""

    wanting_id: str
    character_id: str
    character_name: str
    rating: TeammateRating
    relationship: str  # "upgrade" | "sidegrade" | "downgrade" (candidate vs this one)


@dataclass
class SlotGapEntry:
    """Slot fill state for one wanting character's selected composition."""

    wanting_id: str
    composition_name: str
    category: RoleCategory
    slots_needed: int
    slots_filled: int
    owned_options: list[str] = field(default_factory=list)
    coverage_percent: int = 0


@dataclass
class TeamAnalysis:
    """How a candidate fits one wanting character's team."""

    dps_id: str
    dps_name: str
    dps_tier: TierRating
    composition_id: Optional[str]
    composition_name: str
    structure: TeamStructure = DEFAULT_STRUCTURE
    owned_supports: dict[RoleCategory, list[OwnedOption]] = field(default_factory=dict)
    candidate_category: RoleCategory = RoleCategory.AMPLIFIERS
    candidate_rating: TeammateRating = TeammateRating.D
    status: str = "low"  # "fills" | "upgrades" | "sidegrade" | "low"
    message: str = ""
    coverage_percent: int = 0
    team_tier: Optional[TierRating] = None  # Projected lineup with the candidate
    weak_in_mode: bool = False


@dataclass
class RosterAnalysis:
    role_overlap: list[RoleOverlap] = field(default_factory=list)
    slot_gaps: list[SlotGapEntry] = field(default_factory=list)
    team_analysis: list[TeamAnalysis] = field(default_factory=list)


@dataclass
class SlotCoverage:
    needed: int
    filled: int


@dataclass
class DPSTeamAnalysis:
    """Which supports the user's roster can field for a DPS."""

    dps_id: str
    composition_id: Optional[str]
    composition_name: str
    owned_amplifiers: list[OwnedOption] = field(default_factory=list)
    owned_sustains: list[OwnedOption] = field(default_factory=list)
    owned_sub_dps: list[OwnedOption] = field(default_factory=list)
    amplifier_slots: SlotCoverage = field(default_factory=lambda: SlotCoverage(2, 0))
    sustain_slots: SlotCoverage = field(default_factory=lambda: SlotCoverage(1, 0))
    dps_slots: SlotCoverage = field(default_factory=lambda: SlotCoverage(0, 0))
    coverage_percent: int = 0
    quality_score: float = 0.0
    missing_recommendations: dict[RoleCategory, list[OwnedOption]] = field(default_factory=dict)
    status: str = "hard"  # "ready" | "almost" | "partial" | "hard"
    status_message: str = ""
    team_tier: Optional[TierRating] = None
    weak_in_mode: bool = False


@dataclass
class PullVerdict:
    level: VerdictLevel
    reason: str
    score: float = 0.0


@dataclass
class PullRecommendation:
    """A ranked candidate in one of the pull advisor views."""

    character_id: str
    character_name: str
    rating: GranularRating
    score: float
    wanted_by: list[WantedByEntry] = field(default_factory=list)
    investment_notes: list[str] = field(default_factory=list)
    verdict: Optional[PullVerdict] = None
    team_analysis: list[TeamAnalysis] = field(default_factory=list)
    dps_analysis: Optional[DPSTeamAnalysis] = None
    is_planned: bool = False

    def to_dict(self) -> dict:
        return to_plain_dict(self)


@dataclass
class PullAdvice:
    """Two disjoint views of pull recommendations for a roster."""

    mode: str
    for_dps: list[PullRecommendation] = field(default_factory=list)
    for_supports: list[PullRecommendation] = field(default_factory=list)

    def to_dict(self) -> dict:
        return to_plain_dict(self)


@dataclass
class BannerCharacterAnalysis:
    character_id: str
    character_name: str
    is_new: bool
    is_owned: bool
    rating: GranularRating
    score: float
    wanted_by: list[WantedByEntry] = field(default_factory=list)
    reasoning: list[str] = field(default_factory=list)
    verdict: Optional[PullVerdict] = None
    team_analysis: list[TeamAnalysis] = field(default_factory=list)
    dps_analysis: Optional[DPSTeamAnalysis] = None


@dataclass
class BannerAnalysis:
    """Featured characters of a banner split into supports and DPS."""

    banner_id: str
    banner_name: str
    start_date: date
    end_date: date
    is_live: bool = False  # Started and not yet ended
    supports: list[BannerCharacterAnalysis] = field(default_factory=list)
    dps: list[BannerCharacterAnalysis] = field(default_factory=list)

    def to_dict(self) -> dict:
        return to_plain_dict(self)
