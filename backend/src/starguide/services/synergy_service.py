"""Teammate relationship lookups over the knowledge base edge graph."""
import logging
from collections import Counter, defaultdict
from typing import Optional

from starguide.models.character import Role, RoleCategory, TeammateRecommendation
from starguide.models.recommendations import WantedByEntry
from starguide.repositories.knowledge_base import KnowledgeBase
from starguide.utils.scales import RATING_ORDER, rating_index

logger = logging.getLogger(__name__)


class SynergyService:
    """Answers "who wants this character" from a materialized wanted-by index."""

    def __init__(self, knowledge_base: Optional[KnowledgeBase] = None):
        self.knowledge_base = knowledge_base or KnowledgeBase()
        self._wanted_by: dict[str, list[TeammateRecommendation]] = defaultdict(list)
        self._build_index()

    def _build_index(self):
        """Index every base and composition edge by the wanted teammate."""
        edge_count = 0
        for character in self.knowledge_base.characters:
            for edge in self.knowledge_base.all_edges(character):
                if edge.teammate_id == character.id:
                    continue
                if not self.knowledge_base.has_character(edge.teammate_id):
                    logger.warning(f"Ignoring edge {character.id} -> {edge.teammate_id}: unknown teammate")
                    continue
                self._wanted_by[edge.teammate_id].append(edge)
                edge_count += 1
        logger.info(f"Wanted-by index built: {edge_count} edges over {len(self._wanted_by)} teammates")

    def edges_for(self, character_id: str) -> list[TeammateRecommendation]:
        """All raw edges pointing at a character."""
        return list(self._wanted_by.get(character_id, []))

    def best_edges_for(self, character_id: str, owned_ids=None) -> list[TeammateRecommendation]:
        """Best edge per (wanting character, category).

        A composition edge only replaces the base edge when it rates the
        character strictly higher. Optionally limited to owned wanters.
        """
        best: dict[tuple[str, RoleCategory], TeammateRecommendation] = {}
        for edge in self._wanted_by.get(character_id, []):
            if owned_ids is not None and edge.character_id not in owned_ids:
                continue
            key = (edge.character_id, edge.category)
            current = best.get(key)
            if current is None:
                best[key] = edge
                continue
            if rating_index(edge.rating) < rating_index(current.rating):
                best[key] = edge
            elif (
                rating_index(edge.rating) == rating_index(current.rating)
                and current.composition_id is not None
                and edge.composition_id is None
            ):
                best[key] = edge

        def sort_key(edge: TeammateRecommendation):
            wanting = self.knowledge_base.get_character(edge.character_id)
            name = wanting.name if wanting else edge.character_id
            return (rating_index(edge.rating), name, edge.category.value)

        return sorted(best.values(), key=sort_key)

    def to_entry(self, edge: TeammateRecommendation, rating=None) -> WantedByEntry:
        wanting = self.knowledge_base.get_character(edge.character_id)
        composition = wanting.get_composition(edge.composition_id) if (wanting and edge.composition_id) else None
        return WantedByEntry(
            character_id=edge.character_id,
            character_name=wanting.name if wanting else edge.character_id,
            rating=rating or edge.rating,
            category=edge.category,
            reason=edge.reason,
            composition_id=composition.id if composition else None,
            composition_name=composition.name if composition else None,
            roles=[r.value for r in wanting.roles] if wanting else [],
        )

    def get_characters_who_want(self, character_id: str, owned_ids=None) -> list[WantedByEntry]:
        """Characters that list ``character_id`` as a teammate, best rating first."""
        return [self.to_entry(edge) for edge in self.best_edges_for(character_id, owned_ids)]

    @staticmethod
    def group_wanted_by_role(entries: list[WantedByEntry]) -> dict[str, list[WantedByEntry]]:
        """Split wanters into DPS, sustains and other supports."""
        grouped: dict[str, list[WantedByEntry]] = {"dps": [], "supports": [], "sustains": []}
        for entry in entries:
            if any("DPS" in role for role in entry.roles):
                grouped["dps"].append(entry)
            elif Role.SUSTAIN.value in entry.roles:
                grouped["sustains"].append(entry)
            else:
                grouped["supports"].append(entry)
        return grouped

    @staticmethod
    def wanted_by_summary(entries: list[WantedByEntry]) -> dict[str, int]:
        """Count of wanters per rating, in scale order."""
        counts = Counter(entry.rating.value for entry in entries)
        return {rating: counts[rating] for rating in RATING_ORDER if counts[rating]}

    def get_characters_who_avoid(self, character_id: str) -> list[dict]:
        """Characters whose restrictions list ``character_id`` as one to avoid."""
        result = []
        for character in self.knowledge_base.characters:
            for avoided_id, reason in character.avoid:
                if avoided_id == character_id:
                    result.append({
                        "character_id": character.id,
                        "character_name": character.name,
                        "reason": reason,
                    })
        return result

    def find_one_way_edges(self) -> list[dict]:
        """Base edges where A rates B but B has no base edge back to A."""
        rated: dict[str, set[str]] = {}
        for character in self.knowledge_base.characters:
            rated[character.id] = {
                edge.teammate_id
                for edges in character.teammates.values()
                for edge in edges
            }

        one_way = []
        for character in self.knowledge_base.characters:
            for category, edges in character.teammates.items():
                for edge in edges:
                    if character.id not in rated.get(edge.teammate_id, set()):
                        one_way.append({
                            "from": character.id,
                            "to": edge.teammate_id,
                            "category": category.value,
                            "rating": edge.rating.value,
                        })
        return sorted(one_way, key=lambda e: (e["from"], e["to"], e["category"]))
