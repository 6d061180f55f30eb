"""Interview entry point: advance the conversation, synthesize when it ends."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Literal

import structlog
from pydantic import BaseModel

from brifify.interview.driver import ConversationDriver, InterviewComplete, QuestionTurn
from brifify.interview.workflow import BriefOutcome, BriefWorkflow
from brifify.reasoning.schemas import Turn

logger = structlog.get_logger()


class BriefReady(BaseModel):
    """The interview finished and produced a brief. No thread id is returned."""

    status: Literal["complete"] = "complete"
    history: list[Turn]
    outcome: BriefOutcome


class InterviewService:
    def __init__(self, driver: ConversationDriver, workflow: BriefWorkflow) -> None:
        self._driver = driver
        self._workflow = workflow

    async def submit_answer(
        self,
        client_id: str | None,
        history: Sequence[Turn],
        answer: str | None,
        thread_id: str | None = None,
    ) -> QuestionTurn | BriefReady:
        result = await self._driver.advance(client_id, history, answer, thread_id)
        if isinstance(result, QuestionTurn):
            return result

        return await self._finish(client_id, result)

    async def _finish(self, client_id: str | None, complete: InterviewComplete) -> BriefReady:
        outcome = await self._workflow.complete_interview(client_id, complete.history)
        return BriefReady(history=complete.history, outcome=outcome)
