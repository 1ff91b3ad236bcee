"""Harmonic penalty for teammates whose role the roster already covers."""
from typing import Optional

from starguide.models.character import Character, RoleCategory
from starguide.utils.scales import COVERAGE_WEIGHTS, DEFAULT_COVERAGE_DECAY


class CoveragePenaltyCalculator:
    """Scores how redundant a candidate is for one wanting character.

    penalty = 1 / (1 + coverage * decay), where coverage sums the coverage
    weights of owned characters already in the wanting character's list for
    the same category.
    """

    COVERAGE_WEIGHTS = COVERAGE_WEIGHTS

    def __init__(self, decay: float = DEFAULT_COVERAGE_DECAY):
        if decay <= 0:
            raise ValueError(f"Coverage decay must be positive, got {decay}")
        self.decay = decay

    def coverage(
        self,
        wanting: Character,
        category: RoleCategory,
        owned_ids,
        exclude_id: Optional[str] = None,
    ) -> float:
        total = 0.0
        for edge in wanting.teammates.get(category, ()):
            teammate_id = edge.teammate_id
            if teammate_id == exclude_id or teammate_id == wanting.id:
                continue
            if teammate_id in owned_ids:
                total += self.COVERAGE_WEIGHTS.get(edge.rating.value, 0.0)
        return total

    def coverage_penalty(
        self,
        wanting: Character,
        category: RoleCategory,
        owned_ids,
        exclude_id: Optional[str] = None,
    ) -> float:
        """Penalty factor in (0, 1]; exactly 1.0 when nothing is covered."""
        coverage = self.coverage(wanting, category, owned_ids, exclude_id)
        return self.penalty_for(coverage)

    def penalty_for(self, coverage: float) -> float:
        if coverage <= 0:
            return 1.0
        return 1.0 / (1.0 + coverage * self.decay)
