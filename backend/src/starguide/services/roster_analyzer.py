"""Role/slot gap and overlap analysis of a candidate against the user's roster.

Two directions:
    analyze()          candidate support -> each owned character that wants it
    analyze_for_dps()  candidate DPS -> which of its supports the roster has
"""
import logging
import math
from typing import Optional

from starguide.models.character import (
    DEFAULT_STRUCTURE,
    Character,
    RoleCategory,
    TeamComposition,
    TeammateRating,
    TeammateRecommendation,
    TeamStructure,
    TierRating,
)
from starguide.models.recommendations import (
    DPSTeamAnalysis,
    OwnedOption,
    RoleOverlap,
    RosterAnalysis,
    SlotCoverage,
    SlotGapEntry,
    TeamAnalysis,
)
from starguide.repositories.knowledge_base import KnowledgeBase
from starguide.services.scorers.tier_resolver import TierResolver
from starguide.utils.role_normalizer import normalize_mode
from starguide.utils.scales import (
    QUALITY_SCORES,
    STRONG_RATINGS,
    USABLE_RATINGS,
    rating_index,
)

logger = logging.getLogger(__name__)

# Support categories checked for a candidate, in lookup order
SUPPORT_CATEGORIES = (RoleCategory.AMPLIFIERS, RoleCategory.SUSTAINS, RoleCategory.SUB_DPS)

CATEGORY_LABELS = {
    RoleCategory.AMPLIFIERS: "amplifiers",
    RoleCategory.SUSTAINS: "sustains",
    RoleCategory.SUB_DPS: "sub-DPS",
}

# Compositions below this coverage that already have owned fillers are not worth building toward
MIN_VIABLE_COVERAGE = 40
MAX_MISSING_PER_CATEGORY = 3

DEFAULT_COMPOSITION = TeamComposition(
    id="default",
    name="Standard team",
    is_primary=True,
    structure=DEFAULT_STRUCTURE,
)


def slots_needed(structure: TeamStructure, category: RoleCategory) -> int:
    """Slots a composition has for a category. The main DPS takes one dps slot."""
    if category == RoleCategory.AMPLIFIERS:
        return structure.amplifier
    if category == RoleCategory.SUSTAINS:
        return structure.sustain
    return max(0, structure.dps - 1)


def _round_percent(filled: int, needed: int) -> int:
    if needed <= 0:
        return 100
    return int(math.floor(filled / needed * 100 + 0.5))


class RosterAnalyzer:
    """Cross-references wanted teammates against the owned roster."""

    QUALITY_SCORES = QUALITY_SCORES

    def __init__(
        self,
        knowledge_base: Optional[KnowledgeBase] = None,
        tier_resolver: Optional[TierResolver] = None,
    ):
        self.knowledge_base = knowledge_base or KnowledgeBase()
        self.tier_resolver = tier_resolver or TierResolver(self.knowledge_base)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def compositions_of(character: Character) -> list[TeamComposition]:
        """Knowledge compositions, or an implicit 1/2/1 team over base teammates."""
        return list(character.compositions) or [DEFAULT_COMPOSITION]

    def _teammates(self, character: Character, composition: TeamComposition) -> dict[RoleCategory, list[TeammateRecommendation]]:
        if composition is DEFAULT_COMPOSITION:
            return self.knowledge_base.teammates_for(character)
        return self.knowledge_base.teammates_for(character, composition.id)

    def _name(self, character_id: str) -> str:
        character = self.knowledge_base.get_character(character_id)
        return character.name if character else character_id

    def _options(
        self,
        edges: list[TeammateRecommendation],
        owned_ids,
        include_id: Optional[str] = None,
        ratings=USABLE_RATINGS,
    ) -> list[OwnedOption]:
        """Owned (or explicitly included) teammates with an allowed rating, best first."""
        options = [
            OwnedOption(edge.teammate_id, self._name(edge.teammate_id), edge.rating)
            for edge in edges
            if edge.rating.value in ratings
            and self.knowledge_base.has_character(edge.teammate_id)
            and (edge.teammate_id in owned_ids or edge.teammate_id == include_id)
        ]
        return sorted(options, key=lambda o: rating_index(o.rating))

    def _projected_tier(
        self,
        lead_id: str,
        composition: TeamComposition,
        options: dict[RoleCategory, list[OwnedOption]],
        mode,
        candidate_id: Optional[str] = None,
        candidate_category: Optional[RoleCategory] = None,
    ) -> tuple[Optional[TierRating], bool]:
        """Team tier of the lead plus the best option per open slot, and the weak-mode flag.

        The candidate always takes a slot in its own category.
        """
        game_mode = normalize_mode(mode)
        if game_mode is None:
            return None, False

        lineup = [lead_id]
        for category in SUPPORT_CATEGORIES:
            ids = [o.id for o in options.get(category, []) if o.id not in lineup]
            if category == candidate_category and candidate_id in ids:
                ids = [candidate_id] + [i for i in ids if i != candidate_id]
            lineup.extend(ids[:slots_needed(composition.structure, category)])

        weak = game_mode in composition.weak_modes
        return self.tier_resolver.team_tier(lineup, game_mode, weak_mode=weak), weak

    @staticmethod
    def _find(edges: list[TeammateRecommendation], teammate_id: str) -> Optional[TeammateRecommendation]:
        return next((e for e in edges if e.teammate_id == teammate_id), None)

    # ------------------------------------------------------------------
    # Composition selection
    # ------------------------------------------------------------------

    def select_best_composition(self, wanting: Character, owned_ids, candidate_id: str) -> Optional[dict]:
        """Highest-coverage composition where the candidate fills an open slot.

        Coverage counts owned S+/S/A options, capped at the slots needed.
        Returns None when no composition qualifies.
        """
        best = None
        best_coverage = -1.0

        for composition in self.compositions_of(wanting):
            structure = composition.structure
            teammates = self._teammates(wanting, composition)

            slot_analysis = {}
            total_slots = 0
            filled_slots = 0
            for category in SUPPORT_CATEGORIES:
                needed = slots_needed(structure, category)
                owned = [
                    e for e in teammates.get(category, [])
                    if e.teammate_id in owned_ids and e.rating.value in STRONG_RATINGS
                ][:needed]
                slot_analysis[category] = {"needed": needed, "filled": len(owned), "owned": owned}
                total_slots += needed
                filled_slots += len(owned)

            coverage = (filled_slots / total_slots * 100) if total_slots > 0 else 100.0

            in_category = {
                category: self._find(teammates.get(category, []), candidate_id)
                for category in SUPPORT_CATEGORIES
            }
            if not any(in_category.values()):
                continue

            candidate_category = None
            fills_gap = False
            for category in SUPPORT_CATEGORIES:
                edge = in_category[category]
                if edge is not None and edge.rating.value in USABLE_RATINGS:
                    candidate_category = category
                    slot = slot_analysis[category]
                    fills_gap = slot["filled"] < slot["needed"]
                    break

            if not fills_gap and coverage >= MIN_VIABLE_COVERAGE:
                continue
            if coverage < MIN_VIABLE_COVERAGE and filled_slots > 0:
                continue

            if fills_gap and coverage > best_coverage:
                best_coverage = coverage
                best = {
                    "composition": composition,
                    "coverage_percent": coverage,
                    "slot_analysis": slot_analysis,
                    "candidate_category": candidate_category,
                }

        return best

    # ------------------------------------------------------------------
    # Candidate support -> wanting characters
    # ------------------------------------------------------------------

    def analyze(
        self,
        candidate_id: str,
        owned_ids,
        wanting_edges: list[TeammateRecommendation],
        mode=None,
    ) -> RosterAnalysis:
        """Overlap, slot gaps and per-team status for a candidate.

        ``wanting_edges`` are edges pointing at the candidate; their ratings
        are taken as the candidate's (effective) rating for each wanter.
        """
        owned_ids = set(owned_ids)
        result = RosterAnalysis()

        seen = set()
        for edge in sorted(wanting_edges, key=lambda e: (rating_index(e.rating), e.character_id)):
            if edge.character_id in seen:
                continue
            wanting = self.knowledge_base.get_character(edge.character_id)
            if wanting is None:
                logger.warning(f"Skipping unknown wanting character {edge.character_id}")
                continue
            seen.add(edge.character_id)

            result.role_overlap.extend(self.find_role_overlap(candidate_id, owned_ids, wanting, edge.rating))

            selection = self.select_best_composition(wanting, owned_ids, candidate_id)
            if selection is not None:
                gap = self._slot_gap(wanting, selection)
                if gap is not None:
                    result.slot_gaps.append(gap)

            team = self._team_analysis(candidate_id, owned_ids, wanting, edge.rating, selection, mode)
            if team is not None:
                result.team_analysis.append(team)

        return result

    def find_role_overlap(
        self,
        candidate_id: str,
        owned_ids,
        wanting: Character,
        candidate_rating: TeammateRating,
    ) -> list[RoleOverlap]:
        """Owned S+/S/A alternatives in the candidate's category for one wanter."""
        overlaps = []
        teammates = self.knowledge_base.teammates_for(wanting)
        for category in SUPPORT_CATEGORIES:
            edges = teammates.get(category, [])
            if self._find(edges, candidate_id) is None:
                continue
            for edge in edges:
                if edge.teammate_id == candidate_id or edge.teammate_id not in owned_ids:
                    continue
                if edge.rating.value not in STRONG_RATINGS:
                    continue
                if not self.knowledge_base.has_character(edge.teammate_id):
                    continue

                candidate_idx = rating_index(candidate_rating)
                alternative_idx = rating_index(edge.rating)
                if candidate_idx < alternative_idx:
                    relationship = "upgrade"
                elif candidate_idx == alternative_idx:
                    relationship = "sidegrade"
                else:
                    relationship = "downgrade"

                overlaps.append(RoleOverlap(
                    wanting_id=wanting.id,
                    character_id=edge.teammate_id,
                    character_name=self._name(edge.teammate_id),
                    rating=edge.rating,
                    relationship=relationship,
                ))
        return overlaps

    def _slot_gap(self, wanting: Character, selection: dict) -> Optional[SlotGapEntry]:
        category = selection["candidate_category"]
        if category is None:
            return None
        slot = selection["slot_analysis"][category]
        return SlotGapEntry(
            wanting_id=wanting.id,
            composition_name=selection["composition"].name,
            category=category,
            slots_needed=slot["needed"],
            slots_filled=slot["filled"],
            owned_options=[e.teammate_id for e in slot["owned"]],
            coverage_percent=int(math.floor(selection["coverage_percent"] + 0.5)),
        )

    def _team_analysis(
        self,
        candidate_id: str,
        owned_ids,
        wanting: Character,
        candidate_rating: TeammateRating,
        selection: Optional[dict],
        mode,
    ) -> Optional[TeamAnalysis]:
        if selection is not None:
            composition = selection["composition"]
        else:
            composition = wanting.primary_composition or DEFAULT_COMPOSITION

        teammates = self._teammates(wanting, composition)
        candidate_category = next(
            (c for c in SUPPORT_CATEGORIES if self._find(teammates.get(c, []), candidate_id)),
            None,
        )
        if candidate_category is None:
            return None

        owned_supports = {
            category: self._options(teammates.get(category, []), owned_ids, include_id=candidate_id)
            for category in SUPPORT_CATEGORIES
        }
        needed = slots_needed(composition.structure, candidate_category)
        status, message = self.team_status(
            owned_supports[candidate_category],
            needed,
            candidate_id,
            candidate_rating,
            CATEGORY_LABELS[candidate_category],
            composition.name,
            owned_ids,
        )

        structure = composition.structure
        total = sum(slots_needed(structure, c) for c in SUPPORT_CATEGORIES)
        filled = sum(
            min(
                len([o for o in owned_supports[c] if o.id in owned_ids and o.id != wanting.id]),
                slots_needed(structure, c),
            )
            for c in SUPPORT_CATEGORIES
        )
        team_tier, weak = self._projected_tier(
            wanting.id, composition, owned_supports, mode, candidate_id, candidate_category
        )

        return TeamAnalysis(
            dps_id=wanting.id,
            dps_name=wanting.name,
            dps_tier=self.tier_resolver.best_tier(wanting.id, mode) if mode else self.tier_resolver.DEFAULT_TIER,
            composition_id=None if composition is DEFAULT_COMPOSITION else composition.id,
            composition_name=composition.name,
            structure=structure,
            owned_supports=owned_supports,
            candidate_category=candidate_category,
            candidate_rating=candidate_rating,
            status=status,
            message=message,
            coverage_percent=_round_percent(filled, total),
            team_tier=team_tier,
            weak_in_mode=weak,
        )

    @staticmethod
    def team_status(
        in_category: list[OwnedOption],
        needed: int,
        candidate_id: str,
        candidate_rating: TeammateRating,
        label: str,
        composition_name: str,
        owned_ids,
    ) -> tuple[str, str]:
        """Status type and message for how the candidate changes one team."""
        owned_count = len([o for o in in_category if o.id in owned_ids])
        candidate_owned = candidate_id in owned_ids

        if owned_count == 0:
            return "fills", f"Fills critical gap (need {needed} {label}, you have none)"

        if owned_count == 1 and candidate_owned:
            return "fills", f"Fills critical gap (need {needed} {label}, this is your only one)"

        if owned_count < needed:
            if owned_count == needed - 1:
                return "fills", f"Completes {composition_name} (need {needed} {label}, you have {owned_count})"
            return "fills", f"Fills critical gap (need {needed} {label}, only have {owned_count})"

        others = [o for o in in_category if o.id != candidate_id and o.id in owned_ids]
        if not others:
            return "sidegrade", f"Extra {label} slot ({owned_count}/{needed} filled)"

        best_other = others[0]
        candidate_idx = rating_index(candidate_rating)
        best_idx = rating_index(best_other.rating)

        if candidate_idx < best_idx:
            if best_idx - candidate_idx >= 2:
                return "upgrades", (
                    f"Significant upgrade over {best_other.name} "
                    f"({best_other.rating.value} → {candidate_rating.value})"
                )
            return "upgrades", f"Upgrade over {best_other.name} ({best_other.rating.value} → {candidate_rating.value})"

        if candidate_idx > best_idx:
            if owned_count == needed:
                return "low", f"Already covered ({best_other.name} fills this role)"
            if owned_count > needed:
                return "low", f"Not needed (you have {owned_count} options, only need {needed})"
            return "low", f"{best_other.name} is better ({best_other.rating.value} vs {candidate_rating.value})"

        top_n = others[:needed]
        if top_n:
            worst = top_n[-1]
            if candidate_idx < rating_index(worst.rating):
                return "upgrades", f"Upgrade over {worst.name} ({worst.rating.value} → {candidate_rating.value})"

        if owned_count == needed:
            return "sidegrade", f"Alternative option (same tier as {best_other.name})"
        return "sidegrade", f"Extra {label} slot ({owned_count}/{needed} filled)"

    # ------------------------------------------------------------------
    # Candidate DPS -> supports the roster can field
    # ------------------------------------------------------------------

    def analyze_for_dps(self, dps_id: str, owned_ids, mode=None) -> Optional[DPSTeamAnalysis]:
        """Readiness of the roster to field a team for ``dps_id``.

        With a mode, also projects the tier of the best owned lineup. Returns
        None for characters missing from the knowledge base.
        """
        dps = self.knowledge_base.get_character(dps_id)
        if dps is None:
            return None
        owned_ids = set(owned_ids)

        compositions = self.compositions_of(dps)
        composition = dps.primary_composition or compositions[0]
        best_coverage = -1.0
        for comp in compositions:
            teammates = self._teammates(dps, comp)
            amps = len(self._options(teammates.get(RoleCategory.AMPLIFIERS, []), owned_ids))
            sustains = len(self._options(teammates.get(RoleCategory.SUSTAINS, []), owned_ids))
            amp_cov = min(amps, comp.structure.amplifier) / max(comp.structure.amplifier, 1)
            sus_cov = min(sustains, comp.structure.sustain) / max(comp.structure.sustain, 1)
            coverage = (amp_cov + sus_cov) / 2
            if coverage > best_coverage:
                best_coverage = coverage
                composition = comp

        structure = composition.structure
        teammates = self._teammates(dps, composition)
        owned = {
            category: self._options(teammates.get(category, []), owned_ids)
            for category in SUPPORT_CATEGORIES
        }
        needed = {category: slots_needed(structure, category) for category in SUPPORT_CATEGORIES}
        filled = {category: min(len(owned[category]), needed[category]) for category in SUPPORT_CATEGORIES}

        total_needed = sum(needed.values())
        total_filled = sum(filled.values())
        coverage_percent = _round_percent(total_filled, total_needed)

        quality_values = [
            self.QUALITY_SCORES.get(option.rating.value, 0.5)
            for category in SUPPORT_CATEGORIES
            for option in owned[category][:needed[category]]
        ]
        quality = sum(quality_values) / len(quality_values) if quality_values else 0.0

        missing: dict[RoleCategory, list[OwnedOption]] = {}
        for category in SUPPORT_CATEGORIES:
            if filled[category] >= needed[category]:
                continue
            options = [
                OwnedOption(e.teammate_id, self._name(e.teammate_id), e.rating)
                for e in teammates.get(category, [])
                if e.rating.value in STRONG_RATINGS
                and e.teammate_id not in owned_ids
                and self.knowledge_base.has_character(e.teammate_id)
            ][:MAX_MISSING_PER_CATEGORY]
            if options:
                missing[category] = options

        status, message = self.dps_build_status(coverage_percent, quality, needed, filled, missing)
        team_tier, weak = self._projected_tier(dps.id, composition, owned, mode)

        return DPSTeamAnalysis(
            dps_id=dps.id,
            composition_id=None if composition is DEFAULT_COMPOSITION else composition.id,
            composition_name=composition.name,
            owned_amplifiers=owned[RoleCategory.AMPLIFIERS],
            owned_sustains=owned[RoleCategory.SUSTAINS],
            owned_sub_dps=owned[RoleCategory.SUB_DPS],
            amplifier_slots=SlotCoverage(needed[RoleCategory.AMPLIFIERS], filled[RoleCategory.AMPLIFIERS]),
            sustain_slots=SlotCoverage(needed[RoleCategory.SUSTAINS], filled[RoleCategory.SUSTAINS]),
            dps_slots=SlotCoverage(needed[RoleCategory.SUB_DPS], filled[RoleCategory.SUB_DPS]),
            coverage_percent=coverage_percent,
            quality_score=round(quality, 3),
            missing_recommendations=missing,
            status=status,
            status_message=message,
            team_tier=team_tier,
            weak_in_mode=weak,
        )

    @staticmethod
    def dps_build_status(
        coverage: int,
        quality: float,
        needed: dict[RoleCategory, int],
        filled: dict[RoleCategory, int],
        missing: dict[RoleCategory, list[OwnedOption]],
    ) -> tuple[str, str]:
        missing_slots = []
        for category, singular in (
            (RoleCategory.AMPLIFIERS, "amplifier"),
            (RoleCategory.SUSTAINS, "sustain"),
        ):
            count = needed[category] - filled[category]
            if count > 0:
                missing_slots.append(f"{count} {singular}{'s' if count > 1 else ''}")
        sub_dps_count = needed[RoleCategory.SUB_DPS] - filled[RoleCategory.SUB_DPS]
        if sub_dps_count > 0:
            missing_slots.append(f"{sub_dps_count} sub-DPS")

        missing_names = [option.name for options in missing.values() for option in options]

        if coverage >= 100:
            if quality >= 0.85:
                return "ready", "Ready to build with strong teammates!"
            if quality >= 0.7:
                return "ready", "Ready to build with decent teammates."
            return "partial", "Can build, but your teammates are weak. Consider upgrading."

        if coverage >= 80:
            return "almost", f"Almost ready, need {', '.join(missing_slots)}"

        if coverage >= 50:
            names = ", ".join(missing_names[:2])
            suffix = f" ({names} recommended)" if names else ""
            return "partial", f"Partially ready, need {', '.join(missing_slots)}{suffix}"

        names = ", ".join(missing_names[:3])
        suffix = f" Consider pulling {names}." if names else ""
        return "hard", f"Missing key teammates.{suffix}"
