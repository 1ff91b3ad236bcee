"""Shared fixtures: small knowledge directories written to tmp_path."""
import json

import pytest

from starguide.repositories.knowledge_base import KnowledgeBase
from starguide.services.scoring_logger import reset_scoring_logger


def _character(char_id, roles=("DPS",), **extra):
    entry = {
        "id": char_id,
        "name": extra.pop("name", char_id.title()),
        "element": extra.pop("element", "Fire"),
        "path": extra.pop("path", "Destruction"),
        "rarity": extra.pop("rarity", 5),
        "roles": list(roles),
    }
    entry.update(extra)
    return entry


@pytest.fixture
def make_character():
    """Factory for raw characters.json entries."""
    return _character


@pytest.fixture
def write_knowledge(tmp_path):
    """Write the three knowledge files and return the directory."""
    def _write(characters, tiers=None, banners=None):
        knowledge_dir = tmp_path / "knowledge"
        knowledge_dir.mkdir(exist_ok=True)
        (knowledge_dir / "characters.json").write_text(json.dumps({"characters": characters}))
        (knowledge_dir / "tier_data.json").write_text(json.dumps({"tiers": tiers or {}}))
        (knowledge_dir / "banners.json").write_text(json.dumps({"banners": banners or []}))
        return knowledge_dir

    return _write


@pytest.fixture
def build_kb(write_knowledge):
    def _build(characters, tiers=None, banners=None):
        return KnowledgeBase(write_knowledge(characters, tiers, banners))

    return _build


@pytest.fixture(scope="session")
def real_kb():
    """Knowledge base shipped with the repository."""
    return KnowledgeBase()


@pytest.fixture(autouse=True)
def _isolate_diagnostics(monkeypatch):
    monkeypatch.delenv("SCORING_DIAGNOSTICS", raising=False)
    reset_scoring_logger()
    yield
    reset_scoring_logger()
