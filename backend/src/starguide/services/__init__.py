"""Business logic services."""

from starguide.services.banner_advisor_service import BannerAdvisorService
from starguide.services.pull_advisor_service import PullAdvisorService, get_investment_notes
from starguide.services.recommendation_cache import RecommendationCache
from starguide.services.roster_analyzer import RosterAnalyzer
from starguide.services.synergy_service import SynergyService
from starguide.services.verdict_service import VerdictSynthesizer

__all__ = [
    "BannerAdvisorService",
    "PullAdvisorService",
    "get_investment_notes",
    "RecommendationCache",
    "RosterAnalyzer",
    "SynergyService",
    "VerdictSynthesizer",
]
