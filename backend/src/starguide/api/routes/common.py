"""Request models and service wiring shared by the API routers."""

from typing import Literal, Optional

from fastapi import HTTPException, Request
from pydantic import BaseModel, Field

from starguide.config import settings
from starguide.models.character import GameMode, GranularRating
from starguide.models.roster import OwnershipStatus, RosterSnapshot, UserCharacterInvestment
from starguide.repositories.knowledge_base import KnowledgeBase
from starguide.services.banner_advisor_service import BannerAdvisorService
from starguide.services.pull_advisor_service import PullAdvisorService
from starguide.services.recommendation_cache import RecommendationCache
from starguide.services.scoring_logger import get_scoring_logger
from starguide.services.synergy_service import SynergyService
from starguide.utils.role_normalizer import normalize_mode


class RosterEntryModel(BaseModel):
    id: str
    ownership: Literal["owned", "planned", "none"] = "owned"
    level: int = Field(default=0, le=6)  # Negative levels are read as E0
    signature: bool = False


class AdvisorRequest(BaseModel):
    roster: list[RosterEntryModel] = Field(default_factory=list)
    mode: Optional[str] = None
    include_unwanted: bool = False
    min_rating: Optional[GranularRating] = None  # Pull advisor only

    def to_snapshot(self) -> RosterSnapshot:
        return RosterSnapshot({
            entry.id: UserCharacterInvestment(
                ownership=OwnershipStatus(entry.ownership),
                level=entry.level,
                signature_equipment=entry.signature,
            )
            for entry in self.roster
        })


def resolve_mode(mode: Optional[str]) -> GameMode:
    """Requested mode or the configured default; 400 if unknown."""
    game_mode = normalize_mode(mode or settings.default_game_mode)
    if game_mode is None:
        raise HTTPException(status_code=400, detail=f"Unknown game mode: {mode}")
    return game_mode


def get_services(request: Request) -> tuple[KnowledgeBase, SynergyService, PullAdvisorService, BannerAdvisorService]:
    """Get or create services from app state."""
    state = request.app.state
    if not hasattr(state, "knowledge_base"):
        state.knowledge_base = KnowledgeBase()

    # Lazily create advisor services on first use
    if not hasattr(state, "pull_advisor"):
        state.synergy_service = SynergyService(state.knowledge_base)
        state.pull_advisor = PullAdvisorService(
            state.knowledge_base,
            synergy_service=state.synergy_service,
            coverage_decay=settings.coverage_decay,
            cache=RecommendationCache(settings.recommendation_cache_size),
            scoring_logger=get_scoring_logger(settings.scoring_diagnostics, settings.scoring_max_entries),
        )
        state.banner_advisor = BannerAdvisorService(
            state.knowledge_base,
            pull_advisor=state.pull_advisor,
            scoring_logger=state.pull_advisor.scoring_logger,
        )

    return state.knowledge_base, state.synergy_service, state.pull_advisor, state.banner_advisor
