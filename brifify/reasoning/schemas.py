"""
Conversation and brief schemas shared by the interview flow and the API.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Turn(BaseModel):
    """One message of the interview transcript."""

    model_config = ConfigDict(frozen=True)

    role: Literal["user", "assistant"]
    content: str


class QuestionnaireEntry(BaseModel):
    question: str
    answer: str


class TechnicalBrief(BaseModel):
    """Structured brief produced by the `generateTechnicalBrief` tool call."""

    model_config = ConfigDict(extra="ignore")

    project_title: str = Field(min_length=1)
    description: str = Field(min_length=1)
    features: list[str] = Field(min_length=1)
    technical_requirements: list[str] | None = None
    platform: str | None = None
    technology_stack: list[str] | None = None
    notes: str | None = None

    @field_validator("project_title", "description")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must not be blank")
        return value


class GeneratedBrief(BaseModel):
    """A synthesized brief with its identity stamped on."""

    brief_id: str
    created_at: datetime
    brief: TechnicalBrief


class RunStatus(str, Enum):
    """Lifecycle of one reasoning-service run."""

    QUEUED = "queued"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"
    INCOMPLETE = "incomplete"

    @property
    def is_pending(self) -> bool:
        return self in (RunStatus.QUEUED, RunStatus.IN_PROGRESS)


class RunState(BaseModel):
    run_id: str
    status: RunStatus
    reply: str | None = None
    error: str | None = None


class RunHandle(BaseModel):
    run_id: str
    thread_id: str


class ToolCall(BaseModel):
    name: str
    arguments: str


BRIEF_TOOL_NAME = "generateTechnicalBrief"

BRIEF_TOOL: dict[str, Any] = {
    "type": "function",
    "function": {
        "name": BRIEF_TOOL_NAME,
        "description": "Generate a structured technical brief for a developer",
        "parameters": {
            "type": "object",
            "properties": {
                "project_title": {
                    "type": "string",
                    "description": "A concise title describing the project",
                },
                "description": {
                    "type": "string",
                    "description": "A clear summary of what the project does",
                },
                "features": {
                    "type": "array",
                    "items": {"type": "string"},
                    "description": "List of key features required for the project",
                },
                "technical_requirements": {
                    "type": "array",
                    "items": {"type": "string"},
                    "description": "Technical specs or limitations to follow",
                },
                "platform": {
                    "type": "string",
                    "description": "The intended platform (e.g., Web, iOS, WordPress, etc.)",
                },
                "technology_stack": {
                    "type": "array",
                    "items": {"type": "string"},
                    "description": "Recommended or required technologies",
                },
                "notes": {
                    "type": "string",
                    "description": "Any additional notes or clarifications",
                },
            },
            "required": ["project_title", "description", "features"],
        },
    },
}
