"""Diagnostic logging for recommendation scoring analysis.

Captures the full scoring output of advisor runs so weight tables can be
tuned offline.

Usage:
    from starguide.services.scoring_logger import ScoringLogger

    logger = ScoringLogger()
    logger.start_session("session-123", "moc", {...metadata})
    logger.log_pull_advice(roster_hash, advice)
    logger.log_banner_analysis(roster_hash, analysis)
    logger.save()

Entries are flushed to numbered part files once max_entries accumulate, so a
long-running server never holds more than that many in memory.
"""
import json
import logging
import os
from collections import Counter
from datetime import datetime
from pathlib import Path
from typing import Optional

from starguide.models.recommendations import BannerAnalysis, PullAdvice

module_logger = logging.getLogger("starguide.scoring_diagnostics")

# Entries held in memory before they are flushed to a part file
DEFAULT_MAX_ENTRIES = 500


class ScoringLogger:
    """Captures detailed scoring diagnostics for analysis."""

    def __init__(
        self,
        output_dir: Optional[Path] = None,
        enabled: bool = False,
        max_entries: int = DEFAULT_MAX_ENTRIES,
    ):
        """Initialize scoring logger.

        Args:
            output_dir: Directory to save diagnostic files. Defaults to logs/scoring/
            enabled: Whether logging is active. SCORING_DIAGNOSTICS env var overrides it.
            max_entries: Entries kept in memory; reaching it saves a part file and clears them.
        """
        env_enabled = os.environ.get("SCORING_DIAGNOSTICS", "").lower()
        if env_enabled == "true":
            enabled = True
        elif env_enabled == "false":
            enabled = False

        self.enabled = enabled
        self.output_dir = output_dir or Path(__file__).parents[4] / "logs" / "scoring"
        self.max_entries = max(1, max_entries)
        self.entries: list[dict] = []
        self.parts_saved = 0
        self.session_id: str = ""
        self.mode: str = ""
        self._metadata: dict = {}

        if self.enabled:
            self.output_dir.mkdir(parents=True, exist_ok=True)
            module_logger.info(f"Scoring diagnostics enabled, output dir: {self.output_dir}")

    def start_session(self, session_id: str, mode: str, extra_metadata: Optional[dict] = None):
        """Begin a new diagnostic session, discarding unsaved entries."""
        if not self.enabled:
            return

        self.session_id = session_id
        self.mode = mode
        self.entries = []
        self.parts_saved = 0
        self._metadata = {
            "session_id": session_id,
            "mode": mode,
            "started_at": datetime.now().isoformat(),
            **(extra_metadata or {})
        }
        self.entries.append({
            "event": "session_start",
            "timestamp": datetime.now().isoformat(),
            **self._metadata
        })

    def log_pull_advice(self, roster_hash: str, advice: PullAdvice, limit: int = 10):
        """Log the top of both pull advisor views."""
        if not self.enabled:
            return

        def summarize(recommendations):
            return [
                {
                    "rank": i + 1,
                    "character": rec.character_id,
                    "rating": rec.rating.value,
                    "score": rec.score,
                    "verdict": rec.verdict.level.value if rec.verdict else None,
                    "verdict_score": rec.verdict.score if rec.verdict else None,
                    "wanted_by": [w.character_id for w in rec.wanted_by],
                }
                for i, rec in enumerate(recommendations[:limit])
            ]

        self._record({
            "event": "pull_advice",
            "timestamp": datetime.now().isoformat(),
            "roster_hash": roster_hash,
            "mode": advice.mode,
            "for_dps": summarize(advice.for_dps),
            "for_supports": summarize(advice.for_supports),
        })

    def log_banner_analysis(self, roster_hash: str, analysis: BannerAnalysis):
        """Log the grouped verdicts of one banner."""
        if not self.enabled:
            return

        def summarize(items):
            return [
                {
                    "character": item.character_id,
                    "rating": item.rating.value,
                    "score": item.score,
                    "verdict": item.verdict.level.value if item.verdict else None,
                    "verdict_score": item.verdict.score if item.verdict else None,
                }
                for item in items
            ]

        self._record({
            "event": "banner_analysis",
            "timestamp": datetime.now().isoformat(),
            "roster_hash": roster_hash,
            "banner_id": analysis.banner_id,
            "supports": summarize(analysis.supports),
            "dps": summarize(analysis.dps),
        })

    def log_error(self, error_message: str):
        """Log an error that occurred during processing."""
        if not self.enabled:
            return

        self._record({
            "event": "error",
            "timestamp": datetime.now().isoformat(),
            "error": error_message,
        })
        module_logger.error(f"Scoring error logged: {error_message[:200]}...")

    def _record(self, entry: dict):
        self.entries.append(entry)
        if len(self.entries) >= self.max_entries:
            self.parts_saved += 1
            self.save(suffix=f"_part{self.parts_saved}")

    def save(self, suffix: str = "") -> Optional[Path]:
        """Save diagnostics to JSON file and clear the saved entries.

        Returns:
            Path to saved file, or None if disabled/empty
        """
        if not self.enabled or not self.entries:
            return None

        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        session_short = self.session_id[:8] if self.session_id else "unknown"
        filename = f"{self.mode or 'advisor'}_{session_short}_{timestamp}{suffix}.json"
        output_path = self.output_dir / filename

        with open(output_path, "w") as f:
            json.dump({
                "metadata": self._metadata,
                "summary": self._compute_summary(),
                "entries": self.entries,
            }, f, indent=2)

        module_logger.info(f"Scoring diagnostics saved: {output_path}")
        self.entries = []
        return output_path

    def _compute_summary(self) -> dict:
        """Rating and verdict distributions over logged runs."""
        advice_events = [e for e in self.entries if e["event"] == "pull_advice"]
        banner_events = [e for e in self.entries if e["event"] == "banner_analysis"]

        ratings: Counter = Counter()
        verdicts: Counter = Counter()
        scores: list[float] = []
        for event in advice_events:
            for rec in event["for_dps"] + event["for_supports"]:
                ratings[rec["rating"]] += 1
                verdicts[rec["verdict"]] += 1
                scores.append(rec["score"])
        for event in banner_events:
            for item in event["supports"] + event["dps"]:
                ratings[item["rating"]] += 1
                verdicts[item["verdict"]] += 1
                scores.append(item["score"])

        return {
            "total_advice_events": len(advice_events),
            "total_banner_events": len(banner_events),
            "total_errors": len([e for e in self.entries if e["event"] == "error"]),
            "rating_distribution": dict(ratings),
            "verdict_distribution": {str(k): v for k, v in verdicts.items()},
            "score_stats": {
                "avg": round(sum(scores) / len(scores), 3),
                "min": round(min(scores), 3),
                "max": round(max(scores), 3),
            } if scores else {},
        }


# Singleton instance for easy access across the application
_global_logger: Optional[ScoringLogger] = None


def get_scoring_logger(enabled: bool = False, max_entries: int = DEFAULT_MAX_ENTRIES) -> ScoringLogger:
    """Get the global scoring logger instance.

    Disabled by default. Set SCORING_DIAGNOSTICS=true to enable.
    """
    global _global_logger
    if _global_logger is None:
        _global_logger = ScoringLogger(enabled=enabled, max_entries=max_entries)
    return _global_logger


def reset_scoring_logger():
    """Reset the global logger (e.g., between tests)."""
    global _global_logger
    _global_logger = None
