"""Tests for the general pull advisor."""
import pytest

from starguide.models.character import GameMode, GranularRating, TeammateRating
from starguide.models.recommendations import VerdictLevel
from starguide.models.roster import OwnershipStatus, RosterSnapshot, UserCharacterInvestment
from starguide.services.pull_advisor_service import PullAdvisorService, get_investment_notes
from starguide.services.recommendation_cache import RecommendationCache

DPS_TIERS = {
    "d0": {"moc": {"dps": "T0"}},
    "d1": {"moc": {"dps": "T1"}},
    "d2": {"moc": {"dps": "T2"}},
    "d3": {"moc": {"dps": "T3"}},
}


@pytest.fixture
def four_dps_kb(build_kb, make_character):
    """Four DPS at T0-T3; only the T0 and T1 units want support x."""
    wants_x = {"amplifiers": [{"id": "x", "rating": "S"}]}
    return build_kb(
        [
            make_character("d0", teammates=wants_x),
            make_character("d1", teammates=wants_x),
            make_character("d2"),
            make_character("d3"),
            make_character("x", roles=["Amplifier"]),
        ],
        tiers=DPS_TIERS,
    )


def test_four_dps_scenario(four_dps_kb):
    advisor = PullAdvisorService(four_dps_kb)
    advice = advisor.get_advice(RosterSnapshot.from_owned(["d0", "d1", "d2", "d3"]), GameMode.MOC)

    assert [r.character_id for r in advice.for_dps] == ["x"]
    assert advice.for_supports == []

    x = advice.for_dps[0]
    assert [(w.character_id, w.rating) for w in x.wanted_by] == [
        ("d0", TeammateRating.S),
        ("d1", TeammateRating.S),
    ]
    # (2.0 * 1.2) + (1.5 * 1.2), candidate has no tier data (T2, x1.0)
    assert x.score == pytest.approx(4.2)
    assert x.rating == GranularRating.B_PLUS
    assert x.verdict.level in {VerdictLevel.CRITICAL, VerdictLevel.STRONG, VerdictLevel.FLEX}


def test_owned_characters_never_recommended(four_dps_kb):
    advisor = PullAdvisorService(four_dps_kb)
    advice = advisor.get_advice(RosterSnapshot.from_owned(["d0", "x"]))
    assert advice.for_dps == []


def test_tie_broken_by_id(build_kb, make_character):
    kb = build_kb([
        make_character("d0", teammates={"amplifiers": [
            {"id": "zeta", "rating": "A"},
            {"id": "alpha", "rating": "A"},
        ]}),
        make_character("zeta", roles=["Amplifier"], name="Aaa"),
        make_character("alpha", roles=["Amplifier"], name="Zzz"),
    ])
    advice = PullAdvisorService(kb).get_advice(RosterSnapshot.from_owned(["d0"]))

    assert advice.for_dps[0].score == advice.for_dps[1].score
    assert [r.character_id for r in advice.for_dps] == ["alpha", "zeta"]


def test_include_unwanted(four_dps_kb):
    advisor = PullAdvisorService(four_dps_kb)
    roster = RosterSnapshot.from_owned(["d2"])

    assert advisor.get_advice(roster).for_dps == []

    advice = advisor.get_advice(roster, include_unwanted=True)
    x = next(r for r in advice.for_dps if r.character_id == "x")
    assert x.wanted_by == []
    assert x.score == 0.0
    assert x.rating == GranularRating.D
    assert {r.character_id for r in advice.for_supports} == {"d0", "d1", "d3"}


def test_coverage_penalty_applied(build_kb, make_character):
    kb = build_kb(
        [
            make_character("d0", teammates={"amplifiers": [
                {"id": "x", "rating": "S"},
                {"id": "y", "rating": "S"},
            ]}),
            make_character("x", roles=["Amplifier"]),
            make_character("y", roles=["Amplifier"]),
        ],
        tiers={"d0": {"moc": {"dps": "T0"}}},
    )
    advice = PullAdvisorService(kb).get_advice(RosterSnapshot.from_owned(["d0", "y"]))

    # y covers the slot: penalty 1 / (1 + 1.0 * 0.5)
    x = advice.for_dps[0]
    assert x.score == pytest.approx(1.6)
    assert x.rating == GranularRating.C_PLUS


def test_investment_modifier_raises_rating(build_kb, make_character):
    kb = build_kb(
        [
            make_character("d0", teammates={"amplifiers": [{
                "id": "x",
                "rating": "S",
                "modifiers": [{"level": 1, "delta": 0}, {"level": 2, "delta": 1}],
            }]}),
            make_character("x", roles=["Amplifier"]),
        ],
        tiers={"d0": {"moc": {"dps": "T0"}}},
    )
    advisor = PullAdvisorService(kb)

    boosted = advisor.get_advice(RosterSnapshot.from_owned(["d0"], {"d0": 2})).for_dps[0]
    assert boosted.wanted_by[0].rating == TeammateRating.S_PLUS
    assert boosted.score == pytest.approx(3.0)
    assert "Needs D0 E2 for S+" not in boosted.investment_notes

    base = advisor.get_advice(RosterSnapshot.from_owned(["d0"])).for_dps[0]
    assert base.wanted_by[0].rating == TeammateRating.S
    assert "Needs D0 E2 for S+" in base.investment_notes


def test_dps_candidates_for_supports(build_kb, make_character):
    kb = build_kb([
        make_character("k", teammates={"amplifiers": [{"id": "s1", "rating": "S"}]}),
        make_character("s1", roles=["Amplifier"], teammates={"dps": [{"id": "k", "rating": "S"}]}),
    ])
    advice = PullAdvisorService(kb).get_advice(RosterSnapshot.from_owned(["s1"]))

    assert advice.for_dps == []
    k = advice.for_supports[0]
    assert k.character_id == "k"
    assert k.dps_analysis is not None
    assert k.dps_analysis.amplifier_slots.filled == 1
    assert k.team_analysis == []
    assert k.verdict.level in {VerdictLevel.READY, VerdictLevel.VIABLE, VerdictLevel.WEAK, VerdictLevel.SKIP}


def test_planned_character_flagged(four_dps_kb):
    roster = RosterSnapshot({
        "d0": UserCharacterInvestment(OwnershipStatus.OWNED),
        "x": UserCharacterInvestment(OwnershipStatus.PLANNED),
    })
    advice = PullAdvisorService(four_dps_kb).get_advice(roster)
    assert advice.for_dps[0].character_id == "x"
    assert advice.for_dps[0].is_planned


def test_cache_reuses_result(four_dps_kb):
    cache = RecommendationCache()
    advisor = PullAdvisorService(four_dps_kb, cache=cache)
    roster = RosterSnapshot.from_owned(["d0", "d1"])

    first = advisor.get_advice(roster, "moc")
    second = advisor.get_advice(RosterSnapshot.from_owned(["d1", "d0"]), "moc")

    assert second == first
    assert second is not first
    assert cache.hits == 1
    advisor.get_advice(roster, "pf")
    assert len(cache) == 2


def test_unknown_mode_raises(four_dps_kb):
    with pytest.raises(ValueError):
        PullAdvisorService(four_dps_kb).get_advice(RosterSnapshot(), "arena")


def test_views_are_disjoint_on_shipped_knowledge(real_kb):
    roster = RosterSnapshot.from_owned(["acheron", "kafka", "pela", "aventurine"])
    advice = PullAdvisorService(real_kb).get_advice(roster, "moc")

    for_dps = {r.character_id for r in advice.for_dps}
    for_supports = {r.character_id for r in advice.for_supports}
    assert "jiaoqiu" in for_dps
    assert for_dps.isdisjoint(for_supports)
    assert not (for_dps | for_supports) & roster.owned_ids
    for recommendation in advice.for_dps + advice.for_supports:
        assert {w.character_id for w in recommendation.wanted_by} <= roster.owned_ids

    scores = [r.score for r in advice.for_dps]
    assert scores == sorted(scores, reverse=True)


def test_to_dict_is_plain(real_kb):
    advice = PullAdvisorService(real_kb).get_advice(RosterSnapshot.from_owned(["acheron"]))
    data = advice.to_dict()
    first = data["for_dps"][0]
    assert isinstance(first["rating"], str)
    assert isinstance(first["wanted_by"][0]["category"], str)
    assert isinstance(first["verdict"]["level"], str)


def test_investment_notes(real_kb):
    notes = get_investment_notes(real_kb.get_character("acheron"))
    assert notes == [
        "Minimum: E0 with Good Night and Sleep Well",
        "E2 is transformative",
        "Signature LC important (-22 without)",
    ]
    assert get_investment_notes(real_kb.get_character("robin")) == [
        "Minimum: E0 with For Tomorrow's Journey",
        "F2P LC works well",
    ]
    assert get_investment_notes(real_kb.get_character("pela")) == []


def test_repeated_advice_is_identical(real_kb):
    roster = RosterSnapshot.from_owned(["acheron", "kafka", "pela", "robin"], {"acheron": 2})

    first = PullAdvisorService(real_kb).get_advice(roster, "moc").to_dict()
    second = PullAdvisorService(real_kb).get_advice(roster, "moc").to_dict()
    assert first == second
    assert [r["character_id"] for r in first["for_dps"]] == [r["character_id"] for r in second["for_dps"]]


def test_min_rating_filter(four_dps_kb):
    advisor = PullAdvisorService(four_dps_kb)
    roster = RosterSnapshot.from_owned(["d0", "d1", "d2", "d3"])

    # x grades B+
    assert [r.character_id for r in advisor.get_advice(roster, min_rating="B").for_dps] == ["x"]
    assert [r.character_id for r in advisor.get_advice(roster, min_rating=GranularRating.B_PLUS).for_dps] == ["x"]
    assert advisor.get_advice(roster, min_rating="A-").for_dps == []


def test_min_rating_unknown_raises(four_dps_kb):
    with pytest.raises(ValueError):
        PullAdvisorService(four_dps_kb).get_advice(RosterSnapshot(), min_rating="Z")


def test_min_rating_is_part_of_cache_key(four_dps_kb):
    cache = RecommendationCache()
    advisor = PullAdvisorService(four_dps_kb, cache=cache)
    roster = RosterSnapshot.from_owned(["d0", "d1", "d2", "d3"])

    assert advisor.get_advice(roster).for_dps
    assert advisor.get_advice(roster, min_rating="A").for_dps == []
    assert len(cache) == 2
