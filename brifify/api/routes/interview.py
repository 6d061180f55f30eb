"""Interview endpoint."""

from typing import Annotated

from fastapi import APIRouter, Depends
from pydantic import Field

from brifify.api.dependencies import get_container
from brifify.api.schemas import UserRequest
from brifify.container import ServiceContainer
from brifify.interview import BriefReady, QuestionTurn
from brifify.reasoning.schemas import Turn

router = APIRouter(prefix="/interview", tags=["Interview"])


class AdvanceRequest(UserRequest):
    answer: str | None = None
    history: list[Turn] = Field(default_factory=list)
    thread_id: str | None = None


AdvanceResponse = Annotated[QuestionTurn | BriefReady, Field(discriminator="status")]


@router.post("/advance", response_model=AdvanceResponse)
async def advance_interview(
    body: AdvanceRequest,
    container: ServiceContainer = Depends(get_container),
):
    """
    Submit one answer.

    Returns `status: question` with the next question and the thread id to
    send back, or `status: complete` with the generated brief.
    """
    return await container.interview.submit_answer(
        body.user_id,
        body.history,
        body.answer,
        body.thread_id,
    )
