"""REST endpoints for character relationship and tier lookups."""

from typing import Optional

from fastapi import APIRouter, HTTPException, Query, Request

from starguide.api.routes.common import get_services, resolve_mode
from starguide.models.recommendations import to_plain_dict

router = APIRouter(prefix="/api/characters", tags=["characters"])


@router.get("/{character_id}/wanted-by")
async def get_wanted_by(
    request: Request,
    character_id: str,
    owned: Optional[list[str]] = Query(default=None),
):
    """Characters that want this one, optionally limited to owned ids."""
    knowledge_base, synergy_service, _, _ = get_services(request)
    if not knowledge_base.has_character(character_id):
        raise HTTPException(status_code=404, detail="Character not found")

    entries = synergy_service.get_characters_who_want(
        character_id, set(owned) if owned is not None else None
    )
    grouped = synergy_service.group_wanted_by_role(entries)
    return {
        "character_id": character_id,
        "wanted_by": [to_plain_dict(e) for e in entries],
        "grouped": {group: [e.character_id for e in items] for group, items in grouped.items()},
        "summary": synergy_service.wanted_by_summary(entries),
        "avoided_by": synergy_service.get_characters_who_avoid(character_id),
    }


@router.get("/{character_id}/tier")
async def get_tier(request: Request, character_id: str, mode: Optional[str] = None):
    """Best tier for a mode plus the raw per-role tier table."""
    knowledge_base, _, pull_advisor, _ = get_services(request)
    if not knowledge_base.has_character(character_id):
        raise HTTPException(status_code=404, detail="Character not found")
    game_mode = resolve_mode(mode)

    tiers = knowledge_base.tiers_for(character_id)
    return {
        "character_id": character_id,
        "mode": game_mode.value,
        "tier": pull_advisor.tier_resolver.best_tier(character_id, game_mode).value,
        "tiers": {
            m.value: {role: tier.value for role, tier in roles.items()}
            for m, roles in tiers.items()
        },
    }
