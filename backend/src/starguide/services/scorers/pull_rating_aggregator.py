"""Aggregates wanting-character contributions into a granular pull rating."""
from typing import Optional

from starguide.models.character import GranularRating, TierRating
from starguide.models.recommendations import PullContribution
from starguide.utils.scales import (
    CANDIDATE_TIER_MULTIPLIERS,
    EIDOLON_STEP,
    SYNERGY_WEIGHTS,
    TIER_WEIGHTS,
    UNKNOWN_TIER_WEIGHT,
    UNOWNED_EIDOLON_PENALTY,
    score_to_granular,
)


class PullRatingAggregator:
    """Sums tier-weighted synergy votes and maps the total to a grade.

    The general advisor passes coverage penalties and leaves the multiplier
    at 1.0. The banner advisor passes a penalty of 1.0 and the eidolon
    requirement multiplier instead.
    """

    TIER_WEIGHTS = TIER_WEIGHTS
    SYNERGY_WEIGHTS = SYNERGY_WEIGHTS
    CANDIDATE_MULTIPLIERS = CANDIDATE_TIER_MULTIPLIERS

    def contribution_weight(self, contribution: PullContribution) -> float:
        tier_weight = self.TIER_WEIGHTS.get(contribution.wanting_tier.value, UNKNOWN_TIER_WEIGHT)
        synergy_weight = self.SYNERGY_WEIGHTS.get(contribution.rating.value, 0.0)
        return tier_weight * synergy_weight * contribution.penalty * contribution.multiplier

    def aggregate(
        self,
        contributions: list[PullContribution],
        candidate_tier: Optional[TierRating] = None,
    ) -> tuple[GranularRating, float]:
        """Grade and score for one candidate. No contributions -> (D, 0.0)."""
        if not contributions:
            return GranularRating.D, 0.0

        total = sum(self.contribution_weight(c) for c in contributions)
        if candidate_tier is not None:
            total *= self.CANDIDATE_MULTIPLIERS.get(candidate_tier.value, 1.0)

        score = round(total, 3)
        return score_to_granular(score), score

    @staticmethod
    def eidolon_requirement_multiplier(
        required_level: Optional[int],
        owned: bool,
        current_level: int = 0,
    ) -> float:
        """Boost for synergies that need a specific investment in the candidate.

        Owned: grows with the levels still missing, 1.0 once satisfied.
        Not owned: every level plus the base copy is missing, with an extra
        step for having no copy at all.
        """
        if not required_level:
            return 1.0
        if owned:
            missing = max(0, required_level - max(0, current_level))
            return round(1.0 + EIDOLON_STEP * missing, 3)
        return round(1.0 + EIDOLON_STEP * (required_level + 1) + UNOWNED_EIDOLON_PENALTY, 3)
