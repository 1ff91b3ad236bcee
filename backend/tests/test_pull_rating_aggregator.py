"""Tests for pull rating aggregation and the granular scale."""
import pytest

from starguide.models.character import GranularRating, TeammateRating, TierRating
from starguide.models.recommendations import PullContribution
from starguide.services.scorers.pull_rating_aggregator import PullRatingAggregator
from starguide.utils.scales import score_to_granular, shift_rating


@pytest.fixture
def aggregator():
    return PullRatingAggregator()


def _contribution(tier, rating, penalty=1.0, multiplier=1.0):
    return PullContribution("w", TierRating(tier), TeammateRating(rating), penalty, multiplier)


def test_empty_contributions(aggregator):
    assert aggregator.aggregate([]) == (GranularRating.D, 0.0)


def test_single_contribution(aggregator):
    rating, score = aggregator.aggregate([_contribution("T0", "S")])
    assert score == pytest.approx(2.4)
    assert rating == GranularRating.B_MINUS


def test_contributions_sum(aggregator):
    rating, score = aggregator.aggregate([_contribution("T0", "S"), _contribution("T1", "S")])
    assert score == pytest.approx(4.2)
    assert rating == GranularRating.B_PLUS


def test_candidate_tier_scales_total(aggregator):
    rating, score = aggregator.aggregate([_contribution("T0", "S"), _contribution("T1", "S")], TierRating.T0)
    assert score == pytest.approx(5.04)
    assert rating == GranularRating.B_PLUS


def test_penalty_and_multiplier(aggregator):
    _, score = aggregator.aggregate([_contribution("T2", "A", penalty=0.5, multiplier=1.4)])
    assert score == pytest.approx(0.7)


def test_score_rounded(aggregator):
    _, score = aggregator.aggregate([_contribution("T0", "S", penalty=1 / 3)])
    assert score == 0.8


@pytest.mark.parametrize("score,expected", [
    (16.0, GranularRating.S),
    (15.99, GranularRating.S_MINUS),
    (9.0, GranularRating.A_PLUS),
    (5.5, GranularRating.A_MINUS),
    (2.0, GranularRating.B_MINUS),
    (1.25, GranularRating.C_PLUS),
    (0.25, GranularRating.C_MINUS),
    (0.249, GranularRating.D),
    (0.0, GranularRating.D),
])
def test_granular_thresholds(score, expected):
    assert score_to_granular(score) == expected


def test_shift_rating_clamps():
    assert shift_rating(TeammateRating.S, 1) == TeammateRating.S_PLUS
    assert shift_rating(TeammateRating.S_PLUS, 2) == TeammateRating.S_PLUS
    assert shift_rating(TeammateRating.C, -4) == TeammateRating.D


@pytest.mark.parametrize("required,owned,current,expected", [
    (None, False, 0, 1.0),
    (0, True, 0, 1.0),
    (2, True, 0, 1.4),
    (2, True, 1, 1.2),
    (2, True, 3, 1.0),
    (1, False, 0, 1.9),
    (2, False, 0, 2.1),
])
def test_eidolon_requirement_multiplier(required, owned, current, expected):
    multiplier = PullRatingAggregator.eidolon_requirement_multiplier(required, owned, current)
    assert multiplier == pytest.approx(expected)
