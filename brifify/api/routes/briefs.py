"""Brief generation and saved-brief endpoints."""

from datetime import datetime

from fastapi import APIRouter, Depends, Response
from pydantic import BaseModel, Field

from brifify.api.dependencies import get_container
from brifify.api.schemas import UserRequest
from brifify.briefs import StoredBrief
from brifify.container import ServiceContainer
from brifify.interview import BriefOutcome
from brifify.reasoning.schemas import QuestionnaireEntry, TechnicalBrief

router = APIRouter(tags=["Briefs"])


class GenerateBriefRequest(UserRequest):
    questionnaire: list[QuestionnaireEntry] = Field(default_factory=list)


class ShareLink(BaseModel):
    share_id: str
    path: str


class SharedBrief(BaseModel):
    """Public view of a shared brief; the owner is not exposed."""

    brief: TechnicalBrief
    created_at: datetime
    updated_at: datetime


@router.post("/briefs/generate", response_model=BriefOutcome)
async def generate_brief(
    body: GenerateBriefRequest,
    container: ServiceContainer = Depends(get_container),
):
    """Synthesize a brief from a finished questionnaire and charge one token."""
    return await container.workflow.generate(body.user_id, body.questionnaire)


@router.get("/users/{user_id}/briefs", response_model=list[StoredBrief])
async def list_briefs(
    user_id: str,
    container: ServiceContainer = Depends(get_container),
):
    return await container.library.list_briefs(user_id)


@router.get("/users/{user_id}/briefs/{brief_id}", response_model=StoredBrief)
async def get_brief(
    user_id: str,
    brief_id: str,
    container: ServiceContainer = Depends(get_container),
):
    return await container.library.get(user_id, brief_id)


@router.put("/users/{user_id}/briefs/{brief_id}", response_model=StoredBrief)
async def save_brief(
    user_id: str,
    brief_id: str,
    brief: TechnicalBrief,
    container: ServiceContainer = Depends(get_container),
):
    return await container.library.save(user_id, brief_id, brief)


@router.delete("/users/{user_id}/briefs/{brief_id}", status_code=204)
async def delete_brief(
    user_id: str,
    brief_id: str,
    container: ServiceContainer = Depends(get_container),
):
    await container.library.delete(user_id, brief_id)
    return Response(status_code=204)


@router.post("/users/{user_id}/briefs/{brief_id}/share", response_model=ShareLink)
async def share_brief(
    user_id: str,
    brief_id: str,
    container: ServiceContainer = Depends(get_container),
):
    """Create (or return the existing) public read-only link for a brief."""
    stored = await container.library.share(user_id, brief_id)
    return ShareLink(share_id=stored.share_id, path=f"/api/v1/shared/{stored.share_id}")


@router.get("/shared/{share_id}", response_model=SharedBrief)
async def get_shared_brief(
    share_id: str,
    container: ServiceContainer = Depends(get_container),
):
    stored = await container.library.get_shared(share_id)
    return SharedBrief(brief=stored.brief, created_at=stored.created_at, updated_at=stored.updated_at)
