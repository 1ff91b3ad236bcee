"""Tests for synergy service."""
import pytest

from starguide.models.character import RoleCategory, TeammateRating
from starguide.services.synergy_service import SynergyService


@pytest.fixture
def service(real_kb):
    return SynergyService(real_kb)


def test_who_wants_single(service):
    entries = service.get_characters_who_want("pela")
    assert [(e.character_id, e.rating, e.category) for e in entries] == [
        ("acheron", TeammateRating.S, RoleCategory.AMPLIFIERS),
    ]


def test_who_wants_sorted_by_rating(service):
    entries = service.get_characters_who_want("jiaoqiu")
    assert [(e.character_id, e.rating.value) for e in entries] == [("acheron", "S"), ("kafka", "B")]


def test_composition_raises_rating(service):
    """A composition edge replaces the base edge only when it rates higher."""
    entries = service.get_characters_who_want("kafka", owned_ids={"acheron"})
    assert len(entries) == 1
    entry = entries[0]
    assert entry.rating == TeammateRating.A
    assert entry.composition_id == "acheron-dot"
    assert entry.composition_name == "Acheron DoT"


def test_base_edge_kept_when_composition_excludes(service):
    entries = service.get_characters_who_want("sparkle", owned_ids={"acheron"})
    assert [(e.character_id, e.rating.value, e.composition_id) for e in entries] == [("acheron", "A", None)]


def test_owned_filter(service):
    entries = service.get_characters_who_want("ruan-mei", owned_ids={"kafka", "the-herta"})
    assert {e.character_id for e in entries} == {"kafka", "the-herta"}
    assert service.get_characters_who_want("ruan-mei", owned_ids=set()) == []


def test_unknown_character(service):
    assert service.get_characters_who_want("nobody") == []
    assert service.edges_for("nobody") == []


def test_group_wanted_by_role(service):
    grouped = service.group_wanted_by_role(service.get_characters_who_want("acheron"))
    assert [e.character_id for e in grouped["dps"]] == ["black-swan"]
    assert {e.character_id for e in grouped["supports"]} == {"pela", "jiaoqiu", "sparkle"}
    assert {e.character_id for e in grouped["sustains"]} == {"aventurine", "fu-xuan", "gallagher"}


def test_wanted_by_summary(service):
    summary = service.wanted_by_summary(service.get_characters_who_want("acheron"))
    assert summary == {"S": 3, "A": 4}
    assert list(summary) == ["S", "A"]


def test_who_avoids(service):
    assert service.get_characters_who_avoid("fu-xuan") == [{
        "character_id": "lingsha",
        "character_name": "Lingsha",
        "reason": "Two sustains leave no room for amplifiers",
    }]
    assert service.get_characters_who_avoid("pela") == []


def test_one_way_edges(service):
    one_way = service.find_one_way_edges()
    assert {"from": "acheron", "to": "huohuo", "category": "sustains", "rating": "B"} in one_way
    assert not any(e["from"] == "pela" and e["to"] == "acheron" for e in one_way)
    assert one_way == sorted(one_way, key=lambda e: (e["from"], e["to"], e["category"]))


def test_one_way_edges_symmetric_graph(build_kb, make_character):
    kb = build_kb([
        make_character("d1", teammates={"amplifiers": [{"id": "amp", "rating": "S"}]}),
        make_character("amp", roles=["Amplifier"], teammates={"dps": [{"id": "d1", "rating": "S"}]}),
    ])
    assert SynergyService(kb).find_one_way_edges() == []


def test_self_edges_ignored(build_kb, make_character):
    kb = build_kb([
        make_character("d1", teammates={"sub_dps": [{"id": "d1", "rating": "S"}]}),
    ])
    assert SynergyService(kb).get_characters_who_want("d1") == []
