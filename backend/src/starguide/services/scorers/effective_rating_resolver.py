"""Applies investment modifiers to teammate synergy ratings."""
from typing import Optional

from starguide.models.character import (
    Character,
    InvestmentModifier,
    RoleCategory,
    TeammateRating,
    TeammateRecommendation,
)
from starguide.models.roster import RosterSnapshot
from starguide.utils.role_normalizer import normalize_category
from starguide.utils.scales import shift_rating


class EffectiveRatingResolver:
    """Resolves the rating an edge has for the user's current investment.

    Modifiers are keyed by the wanting character's eidolon level. The modifier
    in force is the one with the highest threshold not above the current
    level; when the character is below every threshold the lowest one applies.
    """

    def effective_rating(
        self,
        wanting: Character,
        teammate_id: str,
        base_rating: TeammateRating,
        roster: RosterSnapshot,
        category: Optional[RoleCategory] = None,
    ) -> TeammateRating:
        """Rating of ``wanting -> teammate_id`` after investment modifiers.

        ``category`` picks the edge when the teammate is listed in several
        categories; without it the first listing with modifiers is used.
        """
        modifiers = self._modifiers_for(wanting, teammate_id, category)
        return self._apply(wanting.id, modifiers, TeammateRating(base_rating), roster)

    def rating_for_edge(self, edge: TeammateRecommendation, roster: RosterSnapshot) -> TeammateRating:
        return self._apply(edge.character_id, edge.modifiers, TeammateRating(edge.rating), roster)

    def _apply(self, wanting_id: str, modifiers, base: TeammateRating, roster: RosterSnapshot) -> TeammateRating:
        if not modifiers:
            return base

        investment = roster.investment(wanting_id)
        if investment is None:
            return base

        modifier = self.select_modifier(modifiers, investment.effective_level)
        return shift_rating(base, modifier.delta)

    @staticmethod
    def _modifiers_for(wanting: Character, teammate_id: str, category=None) -> tuple[InvestmentModifier, ...]:
        if category is not None:
            listings = [wanting.teammates.get(normalize_category(category), ())]
        else:
            listings = wanting.teammates.values()
        for edges in listings:
            for edge in edges:
                if edge.teammate_id == teammate_id and edge.modifiers:
                    return edge.modifiers
        return ()

    @staticmethod
    def select_modifier(modifiers, level: int) -> InvestmentModifier:
        level = max(0, level)
        ordered = sorted(modifiers, key=lambda m: m.level)
        qualifying = [m for m in ordered if m.level <= level]
        return qualifying[-1] if qualifying else ordered[0]

    @staticmethod
    def significant_requirement(edge: TeammateRecommendation) -> Optional[InvestmentModifier]:
        """The modifier that matters most: largest |delta|, higher level on ties.

        Zero-delta modifiers never count as a requirement.
        """
        candidates = [m for m in edge.modifiers if m.delta != 0]
        if not candidates:
            return None
        return max(candidates, key=lambda m: (abs(m.delta), m.level))

    def requirement_note(self, wanting_name: str, edge: TeammateRecommendation, roster: RosterSnapshot) -> Optional[str]:
        """e.g. "Needs Acheron E2 for S+" when the owner is below that level."""
        modifier = self.significant_requirement(edge)
        if modifier is None or modifier.delta < 0:
            return None
        if roster.level_of(edge.character_id) >= modifier.level:
            return None
        boosted = shift_rating(TeammateRating(edge.rating), modifier.delta)
        return f"Needs {wanting_name} E{modifier.level} for {boosted.value}"
