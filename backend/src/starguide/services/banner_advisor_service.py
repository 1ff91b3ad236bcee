"""Banner evaluation: featured characters graded against the user's roster."""
import logging
from dataclasses import replace
from datetime import date
from typing import Optional

from starguide.models.character import Banner, FeaturedCharacter, GameMode, GranularRating
from starguide.models.recommendations import (
    BannerAnalysis,
    BannerCharacterAnalysis,
    PullContribution,
    PullVerdict,
    VerdictLevel,
)
from starguide.models.roster import RosterSnapshot
from starguide.repositories.knowledge_base import KnowledgeBase
from starguide.services.pull_advisor_service import PullAdvisorService, get_investment_notes
from starguide.services.scoring_logger import ScoringLogger
from starguide.utils.role_normalizer import normalize_mode_strict

logger = logging.getLogger(__name__)

MAX_WANTED_BY_REASONS = 3


class BannerAdvisorService:
    """Grades banner characters and splits them into supports and DPS.

    Uses the banner variant of the aggregator: no coverage penalty, scaled by
    how much investment in the featured character the wanters need.
    """

    def __init__(
        self,
        knowledge_base: Optional[KnowledgeBase] = None,
        pull_advisor: Optional[PullAdvisorService] = None,
        scoring_logger: Optional[ScoringLogger] = None,
    ):
        self.knowledge_base = knowledge_base or KnowledgeBase()
        self.pull_advisor = pull_advisor or PullAdvisorService(self.knowledge_base)
        self.scoring_logger = scoring_logger

    def active_banners(self, today: Optional[date] = None) -> list[Banner]:
        """Banners that have not ended yet, by start date then id."""
        today = today or date.today()
        return [b for b in self.knowledge_base.banners if b.end_date >= today]

    def analyze_active_banners(
        self,
        roster: RosterSnapshot,
        mode=GameMode.MOC,
        today: Optional[date] = None,
    ) -> list[BannerAnalysis]:
        today = today or date.today()
        return [self.analyze_banner(banner, roster, mode, today) for banner in self.active_banners(today)]

    def analyze_banner(
        self,
        banner: Banner,
        roster: RosterSnapshot,
        mode=GameMode.MOC,
        today: Optional[date] = None,
    ) -> BannerAnalysis:
        """Grade every featured character and group them into two buckets.

        Each bucket is ordered by verdict score, then aggregate score (both
        descending), then character id.
        """
        game_mode = normalize_mode_strict(mode)
        analysis = BannerAnalysis(
            banner_id=banner.id,
            banner_name=banner.name,
            start_date=banner.start_date,
            end_date=banner.end_date,
            is_live=banner.is_active_on(today or date.today()),
        )

        for featured in banner.featured:
            item = self.analyze_character(featured, roster, game_mode)
            character = self.knowledge_base.get_character(featured.id)
            if character is not None and character.is_dps:
                analysis.dps.append(item)
            else:
                analysis.supports.append(item)

        def sort_key(item: BannerCharacterAnalysis):
            verdict_score = item.verdict.score if item.verdict else 0.0
            return (-verdict_score, -item.score, item.character_id)

        analysis.supports.sort(key=sort_key)
        analysis.dps.sort(key=sort_key)

        if self.scoring_logger is not None:
            self.scoring_logger.log_banner_analysis(roster.content_hash(), analysis)
        return analysis

    def analyze_character(
        self,
        featured: FeaturedCharacter,
        roster: RosterSnapshot,
        mode=GameMode.MOC,
    ) -> BannerCharacterAnalysis:
        character = self.knowledge_base.get_character(featured.id)
        is_owned = roster.is_owned(featured.id)
        if character is None:
            logger.warning(f"Banner features unknown character '{featured.id}'")
            return BannerCharacterAnalysis(
                character_id=featured.id,
                character_name=featured.id,
                is_new=featured.is_new,
                is_owned=is_owned,
                rating=GranularRating.D,
                score=0.0,
                reasoning=["Not in the knowledge base"],
                verdict=PullVerdict(VerdictLevel.SKIP, "No team data available", 0.0),
            )

        advisor = self.pull_advisor
        tier = advisor.tier_resolver.best_tier(character.id, mode)
        current_level = roster.level_of(character.id)

        edges = advisor.wanting_edges(character, roster)
        contributions = []
        effective_edges = []
        wanted_by = []
        requirement_notes = []
        for edge in edges:
            rating = advisor.rating_resolver.rating_for_edge(edge, roster)
            multiplier = advisor.aggregator.eidolon_requirement_multiplier(
                edge.required_level, is_owned, current_level
            )
            contributions.append(PullContribution(
                wanting_id=edge.character_id,
                wanting_tier=advisor.tier_resolver.best_tier(edge.character_id, mode),
                rating=rating,
                penalty=1.0,
                multiplier=multiplier,
            ))
            effective_edges.append(replace(edge, rating=rating))
            wanted_by.append(advisor.synergy_service.to_entry(edge, rating=rating))
            if edge.required_level and (not is_owned or current_level < edge.required_level):
                wanting = self.knowledge_base.get_character(edge.character_id)
                requirement_notes.append(f"{wanting.name} wants E{edge.required_level}")

        rating, score = advisor.aggregator.aggregate(contributions, tier)

        if character.is_dps:
            dps_analysis = advisor.analyzer.analyze_for_dps(character.id, roster.owned_ids, mode)
            team_analysis = []
            verdict = advisor.verdicts.compute_dps_verdict(dps_analysis, tier, is_owned)
        else:
            dps_analysis = None
            analysis = advisor.analyzer.analyze(character.id, roster.owned_ids, effective_edges, mode)
            team_analysis = analysis.team_analysis
            verdict = advisor.verdicts.compute_verdict(team_analysis, tier, is_owned)

        reasoning = []
        if is_owned:
            reasoning.append(f"Owned at E{current_level}")
        if wanted_by:
            summary = advisor.synergy_service.wanted_by_summary(wanted_by)
            counts = ", ".join(f"{r} x{n}" for r, n in summary.items())
            reasoning.append(f"Wanted by {len(wanted_by)} of your characters ({counts})")
            for entry in wanted_by[:MAX_WANTED_BY_REASONS]:
                reasoning.append(f"{entry.character_name}: {entry.rating.value} {entry.category.value}")
        else:
            reasoning.append("None of your characters want this character")
        reasoning.extend(requirement_notes)
        reasoning.extend(get_investment_notes(character))

        return BannerCharacterAnalysis(
            character_id=character.id,
            character_name=character.name,
            is_new=featured.is_new,
            is_owned=is_owned,
            rating=rating,
            score=score,
            wanted_by=wanted_by,
            reasoning=reasoning,
            verdict=verdict,
            team_analysis=team_analysis,
            dps_analysis=dps_analysis,
        )
