"""Tests for scoring diagnostics."""
import json

from starguide.models.character import GranularRating
from starguide.models.recommendations import PullAdvice, PullRecommendation, PullVerdict, VerdictLevel
from starguide.models.roster import RosterSnapshot
from starguide.services.pull_advisor_service import PullAdvisorService
from starguide.services.scoring_logger import ScoringLogger, get_scoring_logger


def _advice():
    return PullAdvice(
        mode="moc",
        for_dps=[PullRecommendation(
            character_id="pela",
            character_name="Pela",
            rating=GranularRating.B,
            score=3.2,
            verdict=PullVerdict(VerdictLevel.FLEX, "Critical for Acheron", 6.0),
        )],
    )


def test_disabled_by_default(tmp_path):
    logger = ScoringLogger(output_dir=tmp_path)
    logger.start_session("session", "moc")
    logger.log_pull_advice("hash", _advice())
    assert logger.entries == []
    assert logger.save() is None


def test_env_overrides_flag(tmp_path, monkeypatch):
    monkeypatch.setenv("SCORING_DIAGNOSTICS", "false")
    assert not ScoringLogger(output_dir=tmp_path, enabled=True).enabled

    monkeypatch.setenv("SCORING_DIAGNOSTICS", "true")
    assert ScoringLogger(output_dir=tmp_path).enabled


def test_save_writes_summary(tmp_path):
    logger = ScoringLogger(output_dir=tmp_path, enabled=True)
    logger.start_session("session-123", "moc", {"owned": 4})
    logger.log_pull_advice("abc", _advice())
    logger.log_error("boom")

    path = logger.save()
    data = json.loads(path.read_text())

    assert path.parent == tmp_path
    assert data["metadata"]["owned"] == 4
    assert data["summary"]["total_advice_events"] == 1
    assert data["summary"]["total_errors"] == 1
    assert data["summary"]["rating_distribution"] == {"B": 1}
    assert data["summary"]["verdict_distribution"] == {"flex": 1}
    advice_event = next(e for e in data["entries"] if e["event"] == "pull_advice")
    assert advice_event["for_dps"][0]["character"] == "pela"


def test_global_logger_is_shared():
    assert get_scoring_logger() is get_scoring_logger()


def test_save_clears_entries(tmp_path):
    logger = ScoringLogger(output_dir=tmp_path, enabled=True)
    logger.log_pull_advice("abc", _advice())

    assert logger.save() is not None
    assert logger.entries == []
    assert logger.save() is None


def test_entries_flushed_at_limit(tmp_path):
    logger = ScoringLogger(output_dir=tmp_path, enabled=True, max_entries=3)
    for _ in range(7):
        logger.log_pull_advice("abc", _advice())

    parts = sorted(p.name for p in tmp_path.glob("*.json"))
    assert len(parts) == 2
    assert parts[0].endswith("_part1.json") and parts[1].endswith("_part2.json")
    assert len(logger.entries) == 1
    data = json.loads((tmp_path / parts[0]).read_text())
    assert data["summary"]["total_advice_events"] == 3


def test_advisor_runs_stay_bounded(tmp_path, build_kb, make_character):
    kb = build_kb([
        make_character("d0", teammates={"amplifiers": [{"id": "x", "rating": "S"}]}),
        make_character("x", roles=["Amplifier"]),
    ])
    logger = ScoringLogger(output_dir=tmp_path / "scoring", enabled=True, max_entries=5)
    advisor = PullAdvisorService(kb, scoring_logger=logger)

    for _ in range(12):
        advisor.get_advice(RosterSnapshot.from_owned(["d0"]))

    assert len(list((tmp_path / "scoring").glob("*.json"))) == 2
    assert len(logger.entries) == 2
