"""General pull recommendations for a roster.

Two disjoint views:
    for_dps       non-DPS candidates wanted by owned DPS
    for_supports  DPS candidates wanted by owned supports
"""
import logging
from dataclasses import replace
from typing import Optional

from starguide.models.character import Character, GameMode, GranularRating, TeammateRecommendation
from starguide.models.recommendations import (
    PullAdvice,
    PullContribution,
    PullRecommendation,
)
from starguide.models.roster import RosterSnapshot
from starguide.repositories.knowledge_base import KnowledgeBase
from starguide.services.recommendation_cache import RecommendationCache
from starguide.services.roster_analyzer import RosterAnalyzer
from starguide.services.scorers import (
    CoveragePenaltyCalculator,
    EffectiveRatingResolver,
    PullRatingAggregator,
    TierResolver,
)
from starguide.services.scoring_logger import ScoringLogger
from starguide.services.synergy_service import SynergyService
from starguide.services.verdict_service import VerdictSynthesizer
from starguide.utils.role_normalizer import normalize_mode_strict
from starguide.utils.scales import DEFAULT_COVERAGE_DECAY, granular_rank

logger = logging.getLogger(__name__)

TRANSFORMATIVE_EIDOLON_PENALTY = 30
SIGNATURE_IMPORTANT_GAP = 20
SIGNATURE_RECOMMENDED_GAP = 10


def get_investment_notes(character: Character) -> list[str]:
    """Investment hints from the knowledge base entry."""
    if character.investment is None:
        return []

    notes = []
    if character.investment.minimum_viable:
        notes.append(f"Minimum: {character.investment.minimum_viable}")

    for eidolon in character.investment.eidolons:
        if abs(eidolon.penalty) >= TRANSFORMATIVE_EIDOLON_PENALTY:
            notes.append(f"E{eidolon.level} is transformative")

    signature = next((lc for lc in character.investment.light_cones if lc.is_signature), None)
    if signature is not None:
        gap = abs(signature.penalty_s1)
        if gap >= SIGNATURE_IMPORTANT_GAP:
            notes.append(f"Signature LC important (-{gap} without)")
        elif gap >= SIGNATURE_RECOMMENDED_GAP:
            notes.append("Signature LC recommended")
        else:
            notes.append("F2P LC works well")
    return notes


class PullAdvisorService:
    """Ranks unowned characters by how much the user's owned roster wants them."""

    def __init__(
        self,
        knowledge_base: Optional[KnowledgeBase] = None,
        synergy_service: Optional[SynergyService] = None,
        coverage_decay: float = DEFAULT_COVERAGE_DECAY,
        cache: Optional[RecommendationCache] = None,
        scoring_logger: Optional[ScoringLogger] = None,
    ):
        self.knowledge_base = knowledge_base or KnowledgeBase()
        self.synergy_service = synergy_service or SynergyService(self.knowledge_base)
        self.tier_resolver = TierResolver(self.knowledge_base)
        self.rating_resolver = EffectiveRatingResolver()
        self.coverage_calculator = CoveragePenaltyCalculator(coverage_decay)
        self.aggregator = PullRatingAggregator()
        self.analyzer = RosterAnalyzer(self.knowledge_base, self.tier_resolver)
        self.verdicts = VerdictSynthesizer()
        self.cache = cache
        self.scoring_logger = scoring_logger

    def get_advice(
        self,
        roster: RosterSnapshot,
        mode=GameMode.MOC,
        include_unwanted: bool = False,
        min_rating: Optional[GranularRating] = None,
    ) -> PullAdvice:
        """Both recommendation views for a roster in a game mode.

        ``min_rating`` drops candidates graded below it.

        Raises:
            ValueError: If the mode or the minimum rating is unknown
        """
        game_mode = normalize_mode_strict(mode)
        if min_rating is not None:
            min_rating = GranularRating(min_rating)
        if self.cache is None:
            return self._compute_advice(roster, game_mode, include_unwanted, min_rating)

        scope = f"advice:{include_unwanted}:{min_rating.value if min_rating else ''}"
        key = RecommendationCache.make_key(roster, game_mode, self.knowledge_base.version, scope=scope)
        return self.cache.get_or_compute(
            key, lambda: self._compute_advice(roster, game_mode, include_unwanted, min_rating)
        )

    def _compute_advice(
        self,
        roster: RosterSnapshot,
        mode: GameMode,
        include_unwanted: bool,
        min_rating: Optional[GranularRating] = None,
    ) -> PullAdvice:
        advice = PullAdvice(mode=mode.value)

        for character in self.knowledge_base.characters:
            if roster.is_owned(character.id):
                continue
            recommendation = self.recommend(character, roster, mode)
            if not recommendation.wanted_by and not include_unwanted:
                continue
            if min_rating is not None and granular_rank(recommendation.rating) > granular_rank(min_rating):
                continue
            if character.is_dps:
                advice.for_supports.append(recommendation)
            else:
                advice.for_dps.append(recommendation)

        advice.for_dps.sort(key=lambda r: (-r.score, r.character_id))
        advice.for_supports.sort(key=lambda r: (-r.score, r.character_id))

        logger.info(
            f"Pull advice ({mode.value}): {len(advice.for_dps)} support candidates, "
            f"{len(advice.for_supports)} DPS candidates for {len(roster.owned_ids)} owned"
        )
        if self.scoring_logger is not None:
            self.scoring_logger.log_pull_advice(roster.content_hash(), advice)
        return advice

    def wanting_edges(self, character: Character, roster: RosterSnapshot) -> list[TeammateRecommendation]:
        """Best edges from owned wanters on the opposite side of the DPS split."""
        edges = []
        for edge in self.synergy_service.best_edges_for(character.id, roster.owned_ids):
            wanting = self.knowledge_base.get_character(edge.character_id)
            if wanting is None or wanting.is_dps == character.is_dps:
                continue
            edges.append(edge)
        return edges

    def recommend(self, character: Character, roster: RosterSnapshot, mode=GameMode.MOC) -> PullRecommendation:
        """Score one candidate against the roster."""
        mode = normalize_mode_strict(mode)
        owned_ids = roster.owned_ids
        candidate_tier = self.tier_resolver.best_tier(character.id, mode)

        edges = self.wanting_edges(character, roster)
        contributions = []
        effective_edges = []
        wanted_by = []
        for edge in edges:
            wanting = self.knowledge_base.get_character(edge.character_id)
            rating = self.rating_resolver.rating_for_edge(edge, roster)
            penalty = self.coverage_calculator.coverage_penalty(
                wanting, edge.category, owned_ids, exclude_id=character.id
            )
            contributions.append(PullContribution(
                wanting_id=wanting.id,
                wanting_tier=self.tier_resolver.best_tier(wanting.id, mode),
                rating=rating,
                penalty=penalty,
            ))
            effective_edges.append(replace(edge, rating=rating))
            wanted_by.append(self.synergy_service.to_entry(edge, rating=rating))

        grade, score = self.aggregator.aggregate(contributions, candidate_tier)

        notes = get_investment_notes(character)
        for edge in edges:
            wanting = self.knowledge_base.get_character(edge.character_id)
            note = self.rating_resolver.requirement_note(wanting.name, edge, roster)
            if note and note not in notes:
                notes.append(note)

        recommendation = PullRecommendation(
            character_id=character.id,
            character_name=character.name,
            rating=grade,
            score=score,
            wanted_by=wanted_by,
            investment_notes=notes,
            is_planned=character.id in roster.planned_ids,
        )

        if character.is_dps:
            analysis = self.analyzer.analyze_for_dps(character.id, owned_ids, mode)
            recommendation.dps_analysis = analysis
            recommendation.verdict = self.verdicts.compute_dps_verdict(analysis, candidate_tier, is_owned=False)
        else:
            analysis = self.analyzer.analyze(character.id, owned_ids, effective_edges, mode)
            recommendation.team_analysis = analysis.team_analysis
            recommendation.verdict = self.verdicts.compute_verdict(
                analysis.team_analysis, candidate_tier, is_owned=False
            )
        return recommendation

