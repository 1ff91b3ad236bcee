"""Core scoring components for the recommendation engine."""
from starguide.services.scorers.tier_resolver import TierResolver
from starguide.services.scorers.effective_rating_resolver import EffectiveRatingResolver
from starguide.services.scorers.coverage_penalty import CoveragePenaltyCalculator
from starguide.services.scorers.pull_rating_aggregator import PullRatingAggregator

__all__ = [
    "TierResolver",
    "EffectiveRatingResolver",
    "CoveragePenaltyCalculator",
    "PullRatingAggregator",
]
