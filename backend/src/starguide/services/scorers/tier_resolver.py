"""Resolves a character's best tier for a game mode."""
from typing import Optional

from starguide.models.character import GameMode, TierRating
from starguide.repositories.knowledge_base import KnowledgeBase
from starguide.utils.role_normalizer import normalize_mode
from starguide.utils.scales import (
    CANDIDATE_TIER_MULTIPLIERS,
    DEFAULT_TIER,
    TEAM_TIER_BANDS,
    TEAM_TIER_SCORES,
    TIER_WEIGHTS,
    UNKNOWN_TIER_WEIGHT,
    WEAK_MODE_PENALTY,
    tier_index,
)


class TierResolver:
    """Looks up tiers and converts them into scoring weights."""

    TIER_WEIGHTS = TIER_WEIGHTS
    CANDIDATE_MULTIPLIERS = CANDIDATE_TIER_MULTIPLIERS
    DEFAULT_TIER = DEFAULT_TIER

    def __init__(self, knowledge_base: Optional[KnowledgeBase] = None):
        self.knowledge_base = knowledge_base or KnowledgeBase()

    def best_tier(self, character_id: str, mode) -> TierRating:
        """Best tier across all roles listed for the mode.

        Unknown characters, unknown modes and empty role maps all fall back to
        the default tier. Ties resolve by scale order.
        """
        game_mode = normalize_mode(mode)
        if game_mode is None:
            return self.DEFAULT_TIER

        role_tiers = self.knowledge_base.tiers_for(character_id).get(game_mode, {})
        if not role_tiers:
            return self.DEFAULT_TIER
        return min(role_tiers.values(), key=tier_index)

    def tier_weight(self, tier: Optional[TierRating]) -> float:
        if tier is None:
            return UNKNOWN_TIER_WEIGHT
        return self.TIER_WEIGHTS.get(getattr(tier, "value", tier), UNKNOWN_TIER_WEIGHT)

    def candidate_multiplier(self, tier: Optional[TierRating]) -> float:
        """Scale applied to a candidate's aggregate for its own tier."""
        if tier is None:
            return 1.0
        return self.CANDIDATE_MULTIPLIERS.get(getattr(tier, "value", tier), 1.0)

    def team_tier(
        self,
        character_ids: list[str],
        mode=GameMode.MOC,
        weak_mode: bool = False,
    ) -> Optional[TierRating]:
        """Tier of a lineup from the average of its members' best tiers.

        ``weak_mode`` marks a composition that struggles in the mode; its
        average is scaled by WEAK_MODE_PENALTY. Returns None for an empty lineup.
        """
        if not character_ids:
            return None

        scores = [
            TEAM_TIER_SCORES[self.best_tier(char_id, mode).value]
            for char_id in character_ids
        ]
        avg = sum(scores) / len(scores)
        if weak_mode:
            avg *= WEAK_MODE_PENALTY
        for threshold, tier in TEAM_TIER_BANDS:
            if avg >= threshold:
                return tier
        return TierRating.T5
