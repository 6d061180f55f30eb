from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any

from brifify.reasoning.schemas import BRIEF_TOOL_NAME, RunHandle, RunState, RunStatus, ToolCall, Turn


def completed(reply: str | None) -> RunState:
    return RunState(run_id="", status=RunStatus.COMPLETED, reply=reply)


def pending() -> RunState:
    return RunState(run_id="", status=RunStatus.IN_PROGRESS)


def failed(error: str | None = "model exploded") -> RunState:
    return RunState(run_id="", status=RunStatus.FAILED, error=error)


def brief_call(**overrides: Any) -> ToolCall:
    arguments = {
        "project_title": "Dog Walker Booking",
        "description": "A mobile app for booking local dog walkers.",
        "features": ["Walker profiles", "Booking calendar", "In-app payments"],
        "platform": "iOS",
    }
    arguments.update(overrides)
    return ToolCall(name=BRIEF_TOOL_NAME, arguments=json.dumps(arguments))


@dataclass
class FakeReasoningService:
    """
    Deterministic stand-in for the OpenAI reasoning service.

    `replies` is consumed one entry per `start_run`; each entry is the list of
    states successive `get_run` calls will observe for that run (the last one
    repeats). `tool_calls` is consumed one entry per `call_tool`.
    """

    replies: list[list[RunState]] = field(default_factory=list)
    tool_calls: list[ToolCall | None] = field(default_factory=list)
    calls: list[dict[str, Any]] = field(default_factory=list)
    _runs: dict[str, list[RunState]] = field(default_factory=dict)
    _thread_counter: int = 0

    def script_turn(self, reply: str) -> None:
        self.replies.append([pending(), completed(reply)])

    async def start_run(self, history: list[Turn], thread_id: str | None, *, instructions: str) -> RunHandle:
        self.calls.append(
            {
                "method": "start_run",
                "history": list(history),
                "thread_id": thread_id,
                "instructions": instructions,
            }
        )
        if not self.replies:
            raise AssertionError("FakeReasoningService: no replies remaining")
        if thread_id is None:
            self._thread_counter += 1
            thread_id = f"conv_{self._thread_counter}"
        run_id = f"resp_{len(self.calls)}"
        self._runs[run_id] = list(self.replies.pop(0))
        return RunHandle(run_id=run_id, thread_id=thread_id)

    async def get_run(self, handle: RunHandle) -> RunState:
        self.calls.append({"method": "get_run", "run_id": handle.run_id})
        states = self._runs[handle.run_id]
        state = states.pop(0) if len(states) > 1 else states[0]
        return state.model_copy(update={"run_id": handle.run_id})

    async def call_tool(self, messages: list[dict[str, str]], tool: dict[str, Any]) -> ToolCall | None:
        self.calls.append({"method": "call_tool", "messages": messages, "tool": tool})
        if not self.tool_calls:
            raise AssertionError("FakeReasoningService: no tool_calls remaining")
        return self.tool_calls.pop(0)

    def count(self, method: str) -> int:
        return sum(1 for call in self.calls if call["method"] == method)


async def no_sleep(_seconds: float) -> None:
    return None
