"""Static knowledge base: characters, teammate edges, tiers and banners.

Loads three JSON files from the knowledge directory:

    characters.json  {"characters": [{id, name, element, path, rarity, roles,
                      teammates, compositions, investment, restrictions}]}
    tier_data.json   {"tiers": {character_id: {mode: {role: tier}}}}
    banners.json     {"banners": [{id, name, start_date, end_date, featured}]}

Missing or malformed files are logged and treated as empty. Teammate edges that
name unknown characters are dropped and recorded in ``dropped_edges``.
"""

import hashlib
import json
import logging
from datetime import date
from pathlib import Path
from typing import Optional

from starguide.models.character import (
    Banner,
    Character,
    CharacterInvestment,
    EidolonDefinition,
    Element,
    FeaturedCharacter,
    GameMode,
    InvestmentModifier,
    LightConeDefinition,
    Path as CharacterPath,
    Role,
    RoleCategory,
    TeamComposition,
    TeammateOverride,
    TeammateRating,
    TeammateRecommendation,
    TeamStructure,
    TierRating,
)
from starguide.utils.role_normalizer import normalize_category, normalize_mode, sort_by_category

logger = logging.getLogger(__name__)

KNOWLEDGE_FILES = ("characters.json", "tier_data.json", "banners.json")


class KnowledgeBase:
    """Read-only, id-indexed view over the knowledge files."""

    def __init__(self, knowledge_dir: Optional[Path] = None):
        if knowledge_dir is None:
            knowledge_dir = Path(__file__).parents[4] / "knowledge"
        self.knowledge_dir = Path(knowledge_dir)
        self._characters: dict[str, Character] = {}
        self._tiers: dict[str, dict[GameMode, dict[str, TierRating]]] = {}
        self._banners: dict[str, Banner] = {}
        self.dropped_edges: list[dict] = []
        self._version = ""
        self._load_data()

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def _read_json(self, filename: str) -> Optional[dict]:
        path = self.knowledge_dir / filename
        if not path.exists():
            logger.warning(f"Knowledge file not found: {path}")
            return None
        try:
            with open(path) as f:
                return json.load(f)
        except (json.JSONDecodeError, OSError) as e:
            logger.warning(f"Failed to load {path}: {e}")
            return None

    def _load_data(self):
        """Load characters, tiers and banners, then prune dangling edges."""
        digest = hashlib.sha256()
        for filename in KNOWLEDGE_FILES:
            path = self.knowledge_dir / filename
            if path.exists():
                digest.update(filename.encode("utf-8"))
                digest.update(path.read_bytes())
        self._version = digest.hexdigest()[:12]

        data = self._read_json("characters.json") or {}
        raw_characters = {}
        for raw in data.get("characters", []):
            char_id = raw.get("id")
            if not char_id:
                logger.warning("Skipping character entry without id")
                continue
            raw_characters[char_id] = raw

        for char_id, raw in raw_characters.items():
            try:
                self._characters[char_id] = self._parse_character(raw, raw_characters.keys())
            except (KeyError, ValueError, TypeError) as e:
                logger.warning(f"Skipping malformed character {char_id}: {e}")

        tier_data = self._read_json("tier_data.json") or {}
        for char_id, modes in tier_data.get("tiers", {}).items():
            self._tiers[char_id] = self._parse_tiers(char_id, modes)

        banner_data = self._read_json("banners.json") or {}
        for raw in banner_data.get("banners", []):
            try:
                banner = self._parse_banner(raw)
            except (KeyError, ValueError, TypeError) as e:
                logger.warning(f"Skipping malformed banner {raw.get('id')}: {e}")
                continue
            self._banners[banner.id] = banner

        logger.info(
            f"Knowledge base loaded from {self.knowledge_dir}: "
            f"{len(self._characters)} characters, {len(self._banners)} banners, "
            f"{len(self.dropped_edges)} dropped edges (version {self._version})"
        )

    def _drop_edge(self, wanting_id: str, teammate_id: str, category: str, composition_id: Optional[str]):
        self.dropped_edges.append({
            "character_id": wanting_id,
            "teammate_id": teammate_id,
            "category": category,
            "composition_id": composition_id,
        })
        logger.warning(
            f"Dropping edge {wanting_id} -> {teammate_id} ({category}): unknown character id"
        )

    def _parse_character(self, raw: dict, known_ids) -> Character:
        char_id = raw["id"]
        teammates: dict[RoleCategory, tuple[TeammateRecommendation, ...]] = {}
        for category_name, entries in (raw.get("teammates") or {}).items():
            category = normalize_category(category_name)
            if category is None:
                logger.warning(f"{char_id}: unknown teammate category '{category_name}'")
                continue
            edges = []
            for entry in entries:
                if entry.get("id") not in known_ids:
                    self._drop_edge(char_id, entry.get("id"), category.value, None)
                    continue
                edges.append(self._parse_edge(char_id, category, entry))
            teammates[category] = teammates.get(category, ()) + tuple(edges)

        compositions = tuple(
            self._parse_composition(char_id, comp, known_ids)
            for comp in raw.get("compositions", [])
        )

        restrictions = raw.get("restrictions") or {}
        avoid = tuple(
            (item["id"], item.get("reason", ""))
            for item in restrictions.get("avoid", [])
            if item.get("id")
        )

        return Character(
            id=char_id,
            name=raw.get("name", char_id),
            element=Element(raw["element"]),
            path=CharacterPath(raw["path"]),
            rarity=int(raw.get("rarity", 5)),
            roles=tuple(Role(r) for r in raw.get("roles", [])),
            teammates=teammates,
            compositions=compositions,
            investment=self._parse_investment(raw.get("investment")),
            avoid=avoid,
        )

    @staticmethod
    def _parse_edge(char_id: str, category: RoleCategory, entry: dict,
                    composition_id: Optional[str] = None) -> TeammateRecommendation:
        modifiers = tuple(
            InvestmentModifier(
                level=int(mod["level"]),
                delta=int(mod.get("delta", 0)),
                note=mod.get("note", ""),
            )
            for mod in entry.get("modifiers", [])
        )
        required_level = entry.get("required_level")
        return TeammateRecommendation(
            character_id=char_id,
            teammate_id=entry["id"],
            category=category,
            rating=TeammateRating(entry.get("rating", "B")),
            reason=entry.get("reason", ""),
            modifiers=tuple(sorted(modifiers, key=lambda m: m.level)),
            required_level=int(required_level) if required_level is not None else None,
            composition_id=composition_id,
        )

    def _parse_composition(self, char_id: str, raw: dict, known_ids) -> TeamComposition:
        overrides: dict[RoleCategory, tuple[TeammateOverride, ...]] = {}
        for category_name, entries in (raw.get("overrides") or {}).items():
            category = normalize_category(category_name)
            if category is None:
                logger.warning(f"{char_id}/{raw.get('id')}: unknown override category '{category_name}'")
                continue
            kept = []
            for entry in entries:
                if entry.get("id") not in known_ids:
                    self._drop_edge(char_id, entry.get("id"), category.value, raw.get("id"))
                    continue
                rating = entry.get("rating")
                kept.append(TeammateOverride(
                    id=entry["id"],
                    rating=TeammateRating(rating) if rating else None,
                    reason=entry.get("reason"),
                    excluded=bool(entry.get("excluded", False)),
                ))
            overrides[category] = tuple(kept)

        structure = raw.get("structure") or {}
        weak_modes = []
        for item in raw.get("weak_modes", []):
            mode = normalize_mode(item["mode"] if isinstance(item, dict) else item)
            if mode is not None:
                weak_modes.append(mode)

        return TeamComposition(
            id=raw["id"],
            name=raw.get("name", raw["id"]),
            is_primary=bool(raw.get("is_primary", False)),
            description=raw.get("description", ""),
            structure=TeamStructure(
                dps=int(structure.get("dps", 1)),
                amplifier=int(structure.get("amplifier", 2)),
                sustain=int(structure.get("sustain", 1)),
            ),
            overrides=overrides,
            weak_modes=tuple(weak_modes),
        )

    @staticmethod
    def _parse_investment(raw: Optional[dict]) -> Optional[CharacterInvestment]:
        if not raw:
            return None
        eidolons = tuple(
            EidolonDefinition(
                level=int(e["level"]),
                penalty=min(0, int(e.get("penalty", 0))),
                description=e.get("description", ""),
            )
            for e in raw.get("eidolons", [])
        )
        light_cones = tuple(
            LightConeDefinition(
                id=lc["id"],
                name=lc.get("name", lc["id"]),
                is_signature=bool(lc.get("is_signature", False)),
                penalty_s1=int((lc.get("penalties") or {}).get("s1", 0)),
                penalty_s5=int((lc.get("penalties") or {}).get("s5", 0)),
                source=lc.get("source", "standard"),
            )
            for lc in raw.get("light_cones", [])
        )
        return CharacterInvestment(
            eidolons=eidolons,
            light_cones=light_cones,
            minimum_viable=raw.get("minimum_viable"),
            priority=raw.get("priority"),
        )

    @staticmethod
    def _parse_tiers(char_id: str, modes: dict) -> dict[GameMode, dict[str, TierRating]]:
        parsed: dict[GameMode, dict[str, TierRating]] = {}
        for mode_name, roles in (modes or {}).items():
            mode = normalize_mode(mode_name)
            if mode is None:
                logger.warning(f"{char_id}: unknown game mode '{mode_name}' in tier data")
                continue
            role_tiers = {}
            for role, tier in (roles or {}).items():
                try:
                    role_tiers[role] = TierRating(tier)
                except ValueError:
                    logger.warning(f"{char_id}: invalid tier '{tier}' for {mode_name}/{role}")
            parsed[mode] = role_tiers
        return parsed

    @staticmethod
    def _parse_banner(raw: dict) -> Banner:
        featured = tuple(
            FeaturedCharacter(id=item, is_new=False) if isinstance(item, str)
            else FeaturedCharacter(id=item["id"], is_new=bool(item.get("is_new", False)))
            for item in raw.get("featured", [])
        )
        return Banner(
            id=raw["id"],
            name=raw.get("name", raw["id"]),
            start_date=date.fromisoformat(raw["start_date"]),
            end_date=date.fromisoformat(raw["end_date"]),
            featured=featured,
        )

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    @property
    def version(self) -> str:
        """Short content hash of the knowledge files."""
        return self._version

    @property
    def characters(self) -> list[Character]:
        return [self._characters[cid] for cid in sorted(self._characters)]

    def get_character(self, character_id: str) -> Optional[Character]:
        return self._characters.get(character_id)

    def has_character(self, character_id: str) -> bool:
        return character_id in self._characters

    def tiers_for(self, character_id: str) -> dict[GameMode, dict[str, TierRating]]:
        return self._tiers.get(character_id, {})

    @property
    def banners(self) -> list[Banner]:
        return sorted(self._banners.values(), key=lambda b: (b.start_date, b.id))

    def get_banner(self, banner_id: str) -> Optional[Banner]:
        return self._banners.get(banner_id)

    def teammates_for(
        self,
        character: Character,
        composition_id: Optional[str] = None,
    ) -> dict[RoleCategory, list[TeammateRecommendation]]:
        """Teammate lists for a character, with a composition's overrides applied.

        Overrides update an existing entry, add a new one when they carry a
        rating, and remove the entry when ``excluded`` is set.
        """
        resolved = {category: list(edges) for category, edges in character.teammates.items()}
        composition = character.get_composition(composition_id) if composition_id else None
        if composition is None:
            return resolved

        for category, overrides in composition.overrides.items():
            edges = resolved.setdefault(category, [])
            for override in overrides:
                index = next((i for i, e in enumerate(edges) if e.teammate_id == override.id), None)
                if override.excluded:
                    if index is not None:
                        edges.pop(index)
                    continue
                if index is not None:
                    base = edges[index]
                    edges[index] = TeammateRecommendation(
                        character_id=base.character_id,
                        teammate_id=base.teammate_id,
                        category=category,
                        rating=override.rating or base.rating,
                        reason=override.reason or base.reason,
                        modifiers=base.modifiers,
                        required_level=base.required_level,
                        composition_id=composition.id,
                    )
                elif override.rating is not None:
                    edges.append(TeammateRecommendation(
                        character_id=character.id,
                        teammate_id=override.id,
                        category=category,
                        rating=override.rating,
                        reason=override.reason or "",
                        composition_id=composition.id,
                    ))
        return {category: resolved[category] for category in sort_by_category(resolved)}

    def all_edges(self, character: Character) -> list[TeammateRecommendation]:
        """Base edges plus every composition-resolved edge for a character."""
        edges = [e for category_edges in character.teammates.values() for e in category_edges]
        for comp in character.compositions:
            for category_edges in self.teammates_for(character, comp.id).values():
                edges.extend(e for e in category_edges if e.composition_id == comp.id)
        return edges
