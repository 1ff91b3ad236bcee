"""Data models for the StarGuide recommendation engine."""

from starguide.models.character import (
    Banner,
    BannerRating,
    Character,
    CharacterInvestment,
    Element,
    GameMode,
    GranularRating,
    Path,
    Role,
    RoleCategory,
    TeamComposition,
    TeammateRating,
    TeammateRecommendation,
    TierRating,
)
from starguide.models.roster import (
    OwnershipStatus,
    RosterSnapshot,
    UserCharacterInvestment,
)
from starguide.models.recommendations import (
    BannerAnalysis,
    BannerCharacterAnalysis,
    DPSTeamAnalysis,
    PullAdvice,
    PullContribution,
    PullRecommendation,
    PullVerdict,
    RoleOverlap,
    SlotGapEntry,
    TeamAnalysis,
    VerdictLevel,
    WantedByEntry,
)

__all__ = [
    "Banner",
    "BannerRating",
    "Character",
    "CharacterInvestment",
    "Element",
    "GameMode",
    "GranularRating",
    "Path",
    "Role",
    "RoleCategory",
    "TeamComposition",
    "TeammateRating",
    "TeammateRecommendation",
    "TierRating",
    "OwnershipStatus",
    "RosterSnapshot",
    "UserCharacterInvestment",
    "BannerAnalysis",
    "BannerCharacterAnalysis",
    "DPSTeamAnalysis",
    "PullAdvice",
    "PullContribution",
    "PullRecommendation",
    "PullVerdict",
    "RoleOverlap",
    "SlotGapEntry",
    "TeamAnalysis",
    "VerdictLevel",
    "WantedByEntry",
]
