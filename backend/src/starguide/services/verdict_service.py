"""Pull verdicts synthesized from team and DPS readiness analysis."""
from typing import Optional

from starguide.models.character import RoleCategory, TeamStructure, TierRating
from starguide.models.recommendations import (
    DPSTeamAnalysis,
    PullVerdict,
    TeamAnalysis,
    VerdictLevel,
)
from starguide.utils.scales import (
    CANDIDATE_TIER_MULTIPLIERS,
    DPS_VERDICT_THRESHOLDS,
    STATUS_BASE_SCORES,
    STRONG_RATINGS,
    SUPPORT_VERDICT_THRESHOLDS,
    SYNERGY_WEIGHTS,
    TIER_WEIGHTS,
    UNKNOWN_TIER_WEIGHT,
)


def already_owned() -> PullVerdict:
    return PullVerdict(VerdictLevel.SKIP, "Already owned", 0.0)


class VerdictSynthesizer:
    """Turns analysis results into a priority level, reason and sort score."""

    STATUS_BASE_SCORES = STATUS_BASE_SCORES
    SUPPORT_THRESHOLDS = SUPPORT_VERDICT_THRESHOLDS
    DPS_THRESHOLDS = DPS_VERDICT_THRESHOLDS
    BREADTH_STEP = 0.1
    BREADTH_CAP = 1.5

    @staticmethod
    def _tier_weight(tier: Optional[TierRating]) -> float:
        if tier is None:
            return UNKNOWN_TIER_WEIGHT
        return TIER_WEIGHTS.get(tier.value, UNKNOWN_TIER_WEIGHT)

    @staticmethod
    def calculate_coverage(
        structure: TeamStructure,
        owned_amplifiers: int,
        owned_sustains: int,
        owned_sub_dps: int,
        candidate_owned: bool,
    ) -> float:
        """Percent of support slots filled. An unowned candidate does not fill its slot yet."""
        sub_dps_slots = structure.dps - 1 if structure.dps > 1 else 0
        total = structure.amplifier + structure.sustain + sub_dps_slots
        if total == 0:
            return 100.0

        filled = min(owned_amplifiers, structure.amplifier) + min(owned_sustains, structure.sustain)
        if sub_dps_slots:
            filled += min(owned_sub_dps, sub_dps_slots)
        if not candidate_owned:
            filled = max(0, filled - 1)
        return filled / total * 100

    @staticmethod
    def _coverage_bonus(coverage: float) -> float:
        if coverage >= 80:
            return 1.3
        if coverage >= 60:
            return 1.1
        return 1.0

    def compute_verdict(
        self,
        team_analysis: list[TeamAnalysis],
        candidate_tier: Optional[TierRating] = None,
        is_owned: bool = False,
    ) -> PullVerdict:
        """Support verdict: critical / strong / flex / skip."""
        if is_owned:
            return already_owned()
        if not team_analysis:
            return PullVerdict(VerdictLevel.SKIP, "No teams benefit from this character", 0.0)

        team_scores = []
        for team in team_analysis:
            base = self.STATUS_BASE_SCORES.get(team.status, 0.0)
            if base == 0:
                continue

            amplifiers = [
                o for o in team.owned_supports.get(RoleCategory.AMPLIFIERS, [])
                if o.id != team.dps_id
            ]
            coverage = self.calculate_coverage(
                team.structure,
                len(amplifiers),
                len(team.owned_supports.get(RoleCategory.SUSTAINS, [])),
                len(team.owned_supports.get(RoleCategory.SUB_DPS, [])),
                is_owned,
            )
            score = (
                base
                * self._tier_weight(team.dps_tier)
                * SYNERGY_WEIGHTS.get(team.candidate_rating.value, 0.5)
                * self._coverage_bonus(coverage)
            )
            team_scores.append({"dps_name": team.dps_name, "score": score, "status": team.status})

        team_scores.sort(key=lambda t: (-t["score"], t["dps_name"]))

        total = sum(t["score"] / (2 ** i) for i, t in enumerate(team_scores))

        strong_count = len([t for t in team_analysis if t.candidate_rating.value in STRONG_RATINGS])
        total *= min(1 + strong_count * self.BREADTH_STEP, self.BREADTH_CAP)
        if candidate_tier is not None:
            total *= CANDIDATE_TIER_MULTIPLIERS.get(candidate_tier.value, 1.0)
        total = round(total, 3)

        if total >= self.SUPPORT_THRESHOLDS["critical"]:
            level = VerdictLevel.CRITICAL
        elif total >= self.SUPPORT_THRESHOLDS["strong"]:
            level = VerdictLevel.STRONG
        elif total >= self.SUPPORT_THRESHOLDS["flex"]:
            level = VerdictLevel.FLEX
        else:
            level = VerdictLevel.SKIP

        return PullVerdict(level, self._support_reason(team_scores), total)

    @staticmethod
    def _support_reason(team_scores: list[dict]) -> str:
        if not team_scores:
            return "Low priority for your roster"

        fills = [t for t in team_scores if t["status"] == "fills"]
        upgrades = [t for t in team_scores if t["status"] == "upgrades"]
        sidegrades = [t for t in team_scores if t["status"] == "sidegrade"]

        parts = []
        if fills:
            parts.append(f"Critical for {' & '.join(t['dps_name'] for t in fills[:2])}")

        if upgrades and len(parts) < 2:
            top = upgrades[:2 - len(parts)]
            if len(top) == 1:
                parts.append(f"Upgrades {top[0]['dps_name']}")
            else:
                parts.append(f"Upgrades {len(top)} teams")

        if not parts and sidegrades:
            if len(sidegrades) == 1:
                parts.append(f"Adds flexibility for {sidegrades[0]['dps_name']}")
            else:
                parts.append(f"Adds flexibility for {len(sidegrades)} teams")

        if not parts:
            return "Low priority for your roster"
        return ", ".join(parts)

    def compute_dps_verdict(
        self,
        analysis: Optional[DPSTeamAnalysis],
        candidate_tier: Optional[TierRating] = None,
        is_owned: bool = False,
    ) -> PullVerdict:
        """DPS verdict: ready / viable / weak / skip, from how buildable the team is."""
        if is_owned:
            return already_owned()
        if analysis is None:
            return PullVerdict(VerdictLevel.SKIP, "No team data available", 0.0)

        base = analysis.coverage_percent / 100 * analysis.quality_score * 10
        total = round(base * self._tier_weight(candidate_tier), 3)

        if total >= self.DPS_THRESHOLDS["ready"]:
            level = VerdictLevel.READY
        elif total >= self.DPS_THRESHOLDS["viable"]:
            level = VerdictLevel.VIABLE
        elif total >= self.DPS_THRESHOLDS["weak"]:
            level = VerdictLevel.WEAK
        else:
            level = VerdictLevel.SKIP

        return PullVerdict(level, self._dps_reason(analysis, candidate_tier), total)

    @staticmethod
    def _dps_reason(analysis: DPSTeamAnalysis, candidate_tier: Optional[TierRating]) -> str:
        tier_label = f" ({candidate_tier.value})" if candidate_tier else ""

        if analysis.status == "ready":
            return f"Ready to build{tier_label}"
        if analysis.status == "almost":
            return f"Almost ready{tier_label}"
        if analysis.status == "partial":
            names = [o.name for options in analysis.missing_recommendations.values() for o in options]
            if names:
                return f"Need {', '.join(names[:2])}"
            return f"Partially ready{tier_label}"
        return "Missing key supports"
