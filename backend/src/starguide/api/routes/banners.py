"""REST endpoints for banners and banner analysis."""

from datetime import date
from typing import Optional

from fastapi import APIRouter, HTTPException, Request

from starguide.api.routes.common import AdvisorRequest, get_services, resolve_mode
from starguide.models.character import Banner

router = APIRouter(prefix="/api/banners", tags=["banners"])


def _banner_to_dict(banner: Banner, today: date) -> dict:
    return {
        "id": banner.id,
        "name": banner.name,
        "start_date": banner.start_date.isoformat(),
        "end_date": banner.end_date.isoformat(),
        "featured": [{"id": f.id, "is_new": f.is_new} for f in banner.featured],
        "is_live": banner.is_active_on(today),
    }


@router.get("")
async def list_banners(request: Request, active_only: bool = False, today: Optional[date] = None):
    """All banners, or only those that have not ended yet."""
    knowledge_base, _, _, banner_advisor = get_services(request)
    today = today or date.today()
    if active_only:
        banners = banner_advisor.active_banners(today)
    else:
        banners = knowledge_base.banners
    return {"banners": [_banner_to_dict(b, today) for b in banners]}


@router.post("/analysis")
async def analyze_active_banners(request: Request, body: AdvisorRequest, today: Optional[date] = None):
    """Analyze every active banner against the submitted roster."""
    _, _, _, banner_advisor = get_services(request)
    mode = resolve_mode(body.mode)

    analyses = banner_advisor.analyze_active_banners(body.to_snapshot(), mode, today)
    return {"mode": mode.value, "banners": [a.to_dict() for a in analyses]}


@router.get("/{banner_id}")
async def get_banner(request: Request, banner_id: str):
    knowledge_base, _, _, _ = get_services(request)
    banner = knowledge_base.get_banner(banner_id)
    if banner is None:
        raise HTTPException(status_code=404, detail="Banner not found")
    return _banner_to_dict(banner, date.today())


@router.post("/{banner_id}/analysis")
async def analyze_banner(request: Request, banner_id: str, body: AdvisorRequest):
    """Featured characters graded and grouped into supports and DPS."""
    knowledge_base, _, _, banner_advisor = get_services(request)
    banner = knowledge_base.get_banner(banner_id)
    if banner is None:
        raise HTTPException(status_code=404, detail="Banner not found")
    mode = resolve_mode(body.mode)

    analysis = banner_advisor.analyze_banner(banner, body.to_snapshot(), mode)
    return {"mode": mode.value, **analysis.to_dict()}
