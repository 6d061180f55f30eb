"""
Conversation Driver

Runs one turn of the interview state machine:

    NO_THREAD --first answer--> ACTIVE --"done"--> COMPLETE

The client owns the transcript and thread handle between requests and sends
them back with every answer. A zero balance is rejected before the reasoning
service is contacted.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Sequence
from typing import Literal

import structlog
from pydantic import BaseModel

from brifify.interview.completion import is_complete
from brifify.interview.questionnaire import validate_prior_history
from brifify.kernel.errors import (
    InsufficientTokensError,
    InvalidInputError,
    RunTimeoutError,
    UpstreamGenerationFailedError,
)
from brifify.ledger.identity import IdentityResolver
from brifify.reasoning.prompts import CLARIFYING_FALLBACK, build_interview_instructions
from brifify.reasoning.schemas import RunHandle, RunState, RunStatus, Turn
from brifify.reasoning.service import ReasoningService

logger = structlog.get_logger()


class QuestionTurn(BaseModel):
    """The interview continues with `next_question`."""

    status: Literal["question"] = "question"
    next_question: str
    thread_id: str
    history: list[Turn]


class InterviewComplete(BaseModel):
    """The model replied `done`; the thread is no longer needed."""

    status: Literal["complete"] = "complete"
    history: list[Turn]
    final_reply: str


class ConversationDriver:
    def __init__(
        self,
        identity: IdentityResolver,
        reasoning: ReasoningService,
        *,
        question_limit: int,
        opening_question: str,
        poll_interval_seconds: float = 1.0,
        poll_max_attempts: int = 30,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._identity = identity
        self._reasoning = reasoning
        self._instructions = build_interview_instructions(question_limit)
        self._opening_question = opening_question
        self._poll_interval = poll_interval_seconds
        self._max_attempts = max(1, int(poll_max_attempts))
        self._sleep = sleep

    async def advance(
        self,
        client_id: str | None,
        prior_history: Sequence[Turn],
        answer: str | None,
        thread_id: str | None = None,
    ) -> QuestionTurn | InterviewComplete:
        """Submit `answer` and return the next question or completion."""
        if not answer or not answer.strip():
            raise InvalidInputError(message="Missing answer")
        validate_prior_history(prior_history)

        resolved = await self._identity.resolve(client_id)
        account = resolved.account
        if account.tokens <= 0:
            logger.info("Interview blocked: no tokens", user_id=account.user_id)
            raise InsufficientTokensError(balance=account.tokens)

        history = list(prior_history) or [Turn(role="assistant", content=self._opening_question)]
        history.append(Turn(role="user", content=answer))

        handle = await self._reasoning.start_run(
            history,
            thread_id or None,
            instructions=self._instructions,
        )
        state = await self._await_run(handle)

        reply = (state.reply or "").strip()
        if not reply:
            logger.warning(
                "Run completed without an assistant message",
                thread_id=handle.thread_id,
                run_id=handle.run_id,
            )
            reply = CLARIFYING_FALLBACK

        history.append(Turn(role="assistant", content=reply))

        if is_complete(reply):
            logger.info(
                "Interview complete",
                user_id=account.user_id,
                thread_id=handle.thread_id,
                turns=len(history),
            )
            return InterviewComplete(history=history, final_reply=reply)

        logger.debug("Interview turn", user_id=account.user_id, thread_id=handle.thread_id, turns=len(history))
        return QuestionTurn(next_question=reply, thread_id=handle.thread_id, history=history)

    async def _await_run(self, handle: RunHandle) -> RunState:
        """Poll the run until it leaves queued/in_progress, up to the attempt ceiling.

        The upstream run cannot be aborted; giving up here only stops polling.
        """
        for attempt in range(1, self._max_attempts + 1):
            await self._sleep(self._poll_interval)
            state = await self._reasoning.get_run(handle)
            if state.status.is_pending:
                continue
            if state.status is RunStatus.COMPLETED:
                return state

            logger.warning(
                "Reasoning run failed",
                run_id=handle.run_id,
                status=state.status.value,
                error=state.error,
                attempt=attempt,
            )
            raise UpstreamGenerationFailedError(detail=state.error or f"run {state.status.value}")

        logger.warning("Reasoning run timed out", run_id=handle.run_id, attempts=self._max_attempts)
        raise RunTimeoutError(attempts=self._max_attempts)
