"""
Reasoning service port and the OpenAI implementation.

The interview talks to the model through three primitives:
- `start_run`: hand the full transcript plus the thread handle to the model
  and start generating a reply,
- `get_run`: read the run's status (and its reply once finished),
- `call_tool`: a single schema-constrained function call, used for briefs.

Polling, timeouts and completion detection live in the conversation driver.
"""

from __future__ import annotations

from typing import Any, Protocol

import openai
import structlog
from openai import AsyncOpenAI

from brifify.config import Settings
from brifify.kernel.errors import UpstreamGenerationFailedError
from brifify.reasoning.schemas import RunHandle, RunState, RunStatus, ToolCall, Turn

logger = structlog.get_logger()

# Conversations accept at most this many items per create call.
_CONVERSATION_ITEM_BATCH = 20


class ReasoningService(Protocol):
    async def start_run(
        self,
        history: list[Turn],
        thread_id: str | None,
        *,
        instructions: str,
    ) -> RunHandle:
        ...

    async def get_run(self, handle: RunHandle) -> RunState:
        ...

    async def call_tool(
        self,
        messages: list[dict[str, str]],
        tool: dict[str, Any],
    ) -> ToolCall | None:
        ...


def _message_item(turn: Turn) -> dict[str, str]:
    return {"type": "message", "role": turn.role, "content": turn.content}


class OpenAIReasoningService:
    """
    OpenAI-backed reasoning service.

    A thread is an OpenAI Conversation; a run is a background Response
    attached to it.

    The port always receives the full transcript. A new conversation is seeded
    with every turn before the latest one. For an existing conversation only
    the latest turn is sent; the earlier turns in `history` are ignored and the
    conversation is trusted to already hold them, so a client-edited
    transcript does not reach the model once a thread exists.
    """

    def __init__(
        self,
        client: AsyncOpenAI,
        *,
        interview_model: str,
        brief_model: str,
    ) -> None:
        self._client = client
        self.interview_model = interview_model
        self.brief_model = brief_model

    @classmethod
    def from_settings(cls, settings: Settings) -> "OpenAIReasoningService":
        client = AsyncOpenAI(
            api_key=settings.openai_api_key,
            timeout=settings.llm_request_timeout_seconds,
        )
        return cls(
            client,
            interview_model=settings.interview_model,
            brief_model=settings.brief_model,
        )

    async def aclose(self) -> None:
        await self._client.close()

    async def start_run(
        self,
        history: list[Turn],
        thread_id: str | None,
        *,
        instructions: str,
    ) -> RunHandle:
        """Start a background reply to `history[-1]`.

        Only `thread_id is None` reads the earlier turns; see the class docstring.
        """
        if not history:
            raise ValueError("history must contain at least the latest turn")

        latest = history[-1]
        try:
            if thread_id is None:
                thread_id = await self._open_thread(history[:-1])

            response = await self._client.responses.create(
                model=self.interview_model,
                instructions=instructions,
                conversation=thread_id,
                input=[{"role": latest.role, "content": latest.content}],
                background=True,
            )
        except openai.OpenAIError as exc:
            logger.warning("Reasoning run could not be started", thread_id=thread_id, error=str(exc))
            raise UpstreamGenerationFailedError(detail=str(exc)) from exc

        logger.debug("Reasoning run started", thread_id=thread_id, run_id=response.id)
        return RunHandle(run_id=response.id, thread_id=thread_id)

    async def _open_thread(self, seed: list[Turn]) -> str:
        first, rest = seed[:_CONVERSATION_ITEM_BATCH], seed[_CONVERSATION_ITEM_BATCH:]
        conversation = await self._client.conversations.create(
            items=[_message_item(turn) for turn in first],
        )
        while rest:
            batch, rest = rest[:_CONVERSATION_ITEM_BATCH], rest[_CONVERSATION_ITEM_BATCH:]
            await self._client.conversations.items.create(
                conversation.id,
                items=[_message_item(turn) for turn in batch],
            )
        logger.info("Conversation thread created", thread_id=conversation.id, seeded_turns=len(seed))
        return conversation.id

    async def get_run(self, handle: RunHandle) -> RunState:
        try:
            response = await self._client.responses.retrieve(handle.run_id)
        except openai.OpenAIError as exc:
            raise UpstreamGenerationFailedError(detail=str(exc)) from exc

        try:
            status = RunStatus(response.status)
        except ValueError:
            logger.warning("Unknown run status", run_id=handle.run_id, status=response.status)
            status = RunStatus.FAILED

        error: str | None = None
        if getattr(response, "error", None) is not None:
            error = response.error.message
        elif status is RunStatus.INCOMPLETE and getattr(response, "incomplete_details", None):
            error = f"incomplete: {response.incomplete_details.reason}"

        reply = response.output_text if status is RunStatus.COMPLETED else None
        return RunState(run_id=handle.run_id, status=status, reply=reply, error=error)

    async def call_tool(
        self,
        messages: list[dict[str, str]],
        tool: dict[str, Any],
    ) -> ToolCall | None:
        tool_name = tool["function"]["name"]
        try:
            response = await self._client.chat.completions.create(
                model=self.brief_model,
                messages=messages,
                tools=[tool],
                tool_choice={"type": "function", "function": {"name": tool_name}},
            )
        except openai.OpenAIError as exc:
            logger.warning("Tool call request failed", tool=tool_name, error=str(exc))
            raise UpstreamGenerationFailedError(detail=str(exc)) from exc

        if not response.choices:
            return None
        tool_calls = response.choices[0].message.tool_calls or []
        if not tool_calls:
            return None
        call = tool_calls[0]
        return ToolCall(name=call.function.name, arguments=call.function.arguments or "")
