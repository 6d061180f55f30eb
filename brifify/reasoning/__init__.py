"""Reasoning service access (OpenAI) and shared schemas."""

from brifify.reasoning.schemas import (
    BRIEF_TOOL,
    BRIEF_TOOL_NAME,
    GeneratedBrief,
    QuestionnaireEntry,
    RunHandle,
    RunState,
    RunStatus,
    TechnicalBrief,
    ToolCall,
    Turn,
)
from brifify.reasoning.service import OpenAIReasoningService, ReasoningService

__all__ = [
    "BRIEF_TOOL",
    "BRIEF_TOOL_NAME",
    "GeneratedBrief",
    "OpenAIReasoningService",
    "QuestionnaireEntry",
    "ReasoningService",
    "RunHandle",
    "RunState",
    "RunStatus",
    "TechnicalBrief",
    "ToolCall",
    "Turn",
]
