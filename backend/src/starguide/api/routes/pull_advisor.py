"""REST endpoint for general pull recommendations."""

from fastapi import APIRouter, Request

from starguide.api.routes.common import AdvisorRequest, get_services, resolve_mode

router = APIRouter(prefix="/api/pull-advisor", tags=["pull-advisor"])


@router.post("")
async def get_pull_advice(request: Request, body: AdvisorRequest):
    """Ranked pull recommendations for the submitted roster."""
    knowledge_base, _, pull_advisor, _ = get_services(request)
    mode = resolve_mode(body.mode)

    advice = pull_advisor.get_advice(
        body.to_snapshot(),
        mode,
        include_unwanted=body.include_unwanted,
        min_rating=body.min_rating,
    )
    return {
        "knowledge_version": knowledge_base.version,
        **advice.to_dict(),
    }
