"""Tests for roster slot and overlap analysis."""
import pytest

from starguide.models.character import RoleCategory, TeammateRating, TierRating
from starguide.models.recommendations import OwnedOption
from starguide.services.roster_analyzer import RosterAnalyzer


@pytest.fixture
def kb(build_kb, make_character):
    return build_kb(
        [
            make_character("d1", teammates={
                "amplifiers": [
                    {"id": "amp1", "rating": "S"},
                    {"id": "amp2", "rating": "A"},
                    {"id": "amp3", "rating": "B"},
                ],
                "sustains": [{"id": "sus1", "rating": "S"}],
            }),
            make_character("d2", teammates={
                "amplifiers": [{"id": "amp1", "rating": "S"}],
                "sustains": [{"id": "sus1", "rating": "S"}],
            }, compositions=[
                {"id": "duo", "name": "Duo", "is_primary": True},
                {"id": "hyper", "name": "Hyper", "structure": {"dps": 2, "amplifier": 1, "sustain": 1}},
            ]),
            make_character("amp1", roles=["Amplifier"]),
            make_character("amp2", roles=["Amplifier"]),
            make_character("amp3", roles=["Amplifier"]),
            make_character("sus1", roles=["Sustain"]),
        ],
        tiers={"d1": {"moc": {"dps": "T0"}}},
    )


@pytest.fixture
def analyzer(kb):
    return RosterAnalyzer(kb)


def _edge_to(kb, wanting_id, teammate_id):
    for edges in kb.get_character(wanting_id).teammates.values():
        for edge in edges:
            if edge.teammate_id == teammate_id:
                return edge
    raise AssertionError(f"No edge {wanting_id} -> {teammate_id}")


def test_fills_empty_category(analyzer, kb):
    result = analyzer.analyze("amp1", {"d1"}, [_edge_to(kb, "d1", "amp1")], mode="moc")

    assert len(result.slot_gaps) == 1
    gap = result.slot_gaps[0]
    assert gap.category == RoleCategory.AMPLIFIERS
    assert (gap.slots_needed, gap.slots_filled, gap.coverage_percent) == (2, 0, 0)
    assert gap.composition_name == "Standard team"

    team = result.team_analysis[0]
    assert team.dps_id == "d1"
    assert team.dps_tier == TierRating.T0
    assert team.composition_id is None
    assert team.status == "fills"
    assert team.message == "Fills critical gap (need 2 amplifiers, you have none)"
    assert [o.id for o in team.owned_supports[RoleCategory.AMPLIFIERS]] == ["amp1"]
    assert result.role_overlap == []


def test_already_covered(analyzer, kb):
    owned = {"d1", "amp1", "amp2", "sus1"}
    result = analyzer.analyze("amp3", owned, [_edge_to(kb, "d1", "amp3")])

    # Full coverage with no open slot: no composition is selected
    assert result.slot_gaps == []
    team = result.team_analysis[0]
    assert team.status == "low"
    assert team.message == "Already covered (Amp1 fills this role)"
    assert team.coverage_percent == 100
    assert team.dps_tier == TierRating.T2

    assert {(o.character_id, o.relationship) for o in result.role_overlap} == {
        ("amp1", "downgrade"),
        ("amp2", "downgrade"),
    }


def test_upgrade_over_owned(analyzer, kb):
    owned = {"d1", "amp2", "amp3"}
    result = analyzer.analyze("amp1", owned, [_edge_to(kb, "d1", "amp1")])

    team = result.team_analysis[0]
    assert team.status == "upgrades"
    assert team.message == "Upgrade over Amp2 (A → S)"
    # Only S/A alternatives count as overlap
    assert [(o.character_id, o.relationship) for o in result.role_overlap] == [("amp2", "upgrade")]


def test_duplicate_wanter_analyzed_once(analyzer, kb):
    edge = _edge_to(kb, "d1", "amp1")
    result = analyzer.analyze("amp1", {"d1"}, [edge, edge])
    assert len(result.team_analysis) == 1


def test_team_status_significant_upgrade():
    options = [
        OwnedOption("c", "Cand", TeammateRating.S),
        OwnedOption("x", "Xan", TeammateRating.B),
    ]
    status, message = RosterAnalyzer.team_status(
        options, 1, "c", TeammateRating.S, "amplifiers", "Team", {"x"}
    )
    assert status == "upgrades"
    assert message == "Significant upgrade over Xan (B → S)"


def test_team_status_completes_composition():
    options = [
        OwnedOption("c", "Cand", TeammateRating.A),
        OwnedOption("x", "Xan", TeammateRating.A),
    ]
    status, message = RosterAnalyzer.team_status(
        options, 2, "c", TeammateRating.A, "amplifiers", "Duo", {"x"}
    )
    assert status == "fills"
    assert message == "Completes Duo (need 2 amplifiers, you have 1)"


def test_team_status_only_one_owned():
    options = [OwnedOption("c", "Cand", TeammateRating.S)]
    status, message = RosterAnalyzer.team_status(
        options, 1, "c", TeammateRating.S, "sustains", "Team", {"c"}
    )
    assert status == "fills"
    assert message == "Fills critical gap (need 1 sustains, this is your only one)"


def test_team_status_sidegrade():
    options = [
        OwnedOption("x", "Xan", TeammateRating.A),
        OwnedOption("c", "Cand", TeammateRating.A),
    ]
    status, message = RosterAnalyzer.team_status(
        options, 1, "c", TeammateRating.A, "sustains", "Team", {"x"}
    )
    assert status == "sidegrade"
    assert message == "Alternative option (same tier as Xan)"


def test_dps_analysis_partial(analyzer):
    analysis = analyzer.analyze_for_dps("d1", {"amp1", "sus1"})

    assert analysis.amplifier_slots.needed == 2
    assert analysis.amplifier_slots.filled == 1
    assert analysis.sustain_slots.filled == 1
    assert analysis.coverage_percent == 67
    assert analysis.quality_score == pytest.approx(0.9)
    assert [o.id for o in analysis.missing_recommendations[RoleCategory.AMPLIFIERS]] == ["amp2"]
    assert analysis.status == "partial"
    assert analysis.status_message == "Partially ready, need 1 amplifier (Amp2 recommended)"


def test_dps_analysis_ready(analyzer):
    analysis = analyzer.analyze_for_dps("d1", {"amp1", "amp2", "sus1"})
    assert analysis.coverage_percent == 100
    assert analysis.quality_score == pytest.approx(0.867)
    assert analysis.status == "ready"
    assert analysis.status_message == "Ready to build with strong teammates!"
    assert analysis.missing_recommendations == {}


def test_dps_analysis_nothing_owned(analyzer):
    analysis = analyzer.analyze_for_dps("d1", set())
    assert analysis.coverage_percent == 0
    assert analysis.quality_score == 0.0
    assert analysis.status == "hard"
    assert analysis.status_message == "Missing key teammates. Consider pulling Amp1, Amp2, Sus1."


def test_dps_analysis_picks_best_composition(analyzer):
    """One amplifier and one sustain fully cover the 2/1/1 team."""
    analysis = analyzer.analyze_for_dps("d2", {"amp1", "sus1"})
    assert analysis.composition_id == "hyper"
    assert analysis.dps_slots.needed == 1
    assert analysis.dps_slots.filled == 0


def test_dps_analysis_unknown(analyzer):
    assert analyzer.analyze_for_dps("nobody", set()) is None


@pytest.fixture
def weak_kb(build_kb, make_character):
    """Single composition that struggles in Pure Fiction."""
    t0 = {"moc": {"dps": "T0"}, "pf": {"dps": "T0"}}
    return build_kb(
        [
            make_character("w", teammates={
                "amplifiers": [{"id": "amp1", "rating": "S"}],
                "sustains": [{"id": "sus1", "rating": "S"}],
            }, compositions=[{
                "id": "mono",
                "name": "Mono",
                "is_primary": True,
                "structure": {"dps": 1, "amplifier": 1, "sustain": 1},
                "weak_modes": ["pf"],
            }]),
            make_character("amp1", roles=["Amplifier"]),
            make_character("sus1", roles=["Sustain"]),
        ],
        tiers={"w": t0, "amp1": t0, "sus1": t0},
    )


def test_dps_team_tier_with_weak_mode(weak_kb):
    analyzer = RosterAnalyzer(weak_kb)
    owned = {"amp1", "sus1"}

    moc = analyzer.analyze_for_dps("w", owned, "moc")
    assert (moc.team_tier, moc.weak_in_mode) == (TierRating.T0, False)

    # 100 * 0.85 = 85
    pf = analyzer.analyze_for_dps("w", owned, "pf")
    assert (pf.team_tier, pf.weak_in_mode) == (TierRating.T0_5, True)

    no_mode = analyzer.analyze_for_dps("w", owned)
    assert (no_mode.team_tier, no_mode.weak_in_mode) == (None, False)


def test_team_analysis_projects_candidate_lineup(weak_kb):
    analyzer = RosterAnalyzer(weak_kb)
    edge = _edge_to(weak_kb, "w", "amp1")

    team = analyzer.analyze("amp1", {"w", "sus1"}, [edge], mode="pf").team_analysis[0]
    assert team.composition_id == "mono"
    assert team.status == "fills"
    assert (team.team_tier, team.weak_in_mode) == (TierRating.T0_5, True)

    team = analyzer.analyze("amp1", {"w", "sus1"}, [edge], mode="moc").team_analysis[0]
    assert (team.team_tier, team.weak_in_mode) == (TierRating.T0, False)
