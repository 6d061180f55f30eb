"""Brief synthesis via a schema-constrained tool call."""

from __future__ import annotations

import json
from collections.abc import Callable, Sequence
from datetime import datetime

import structlog
from pydantic import ValidationError

from brifify.kernel.errors import BriefGenerationFailedError, InvalidInputError
from brifify.kernel.ids import new_brief_id
from brifify.kernel.time import utc_now
from brifify.reasoning.prompts import BRIEF_SYSTEM_PROMPT, format_questionnaire
from brifify.reasoning.schemas import (
    BRIEF_TOOL,
    BRIEF_TOOL_NAME,
    GeneratedBrief,
    QuestionnaireEntry,
    TechnicalBrief,
)
from brifify.reasoning.service import ReasoningService

logger = structlog.get_logger()


class BriefSynthesizer:
    """
    Turns a finished questionnaire into a `TechnicalBrief`.

    Only the arguments of a `generateTechnicalBrief` call are accepted. A reply
    without that call fails; there is no fallback to parsing free text.
    """

    def __init__(
        self,
        reasoning: ReasoningService,
        *,
        id_factory: Callable[[], str] = new_brief_id,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._reasoning = reasoning
        self._id_factory = id_factory
        self._clock = clock

    async def synthesize(self, questionnaire: Sequence[QuestionnaireEntry]) -> GeneratedBrief:
        if not questionnaire:
            raise InvalidInputError(message="Invalid or missing questionnaire array")

        messages = [
            {"role": "system", "content": BRIEF_SYSTEM_PROMPT},
            {"role": "user", "content": format_questionnaire(questionnaire)},
        ]
        call = await self._reasoning.call_tool(messages, BRIEF_TOOL)

        if call is None or call.name != BRIEF_TOOL_NAME:
            logger.warning(
                "Brief synthesis returned no tool call",
                tool=call.name if call else None,
                entries=len(questionnaire),
            )
            raise BriefGenerationFailedError(reason="missing_tool_call")

        try:
            payload = json.loads(call.arguments)
        except json.JSONDecodeError as exc:
            logger.warning("Brief tool arguments are not JSON", error=str(exc))
            raise BriefGenerationFailedError(reason="invalid_arguments") from exc

        try:
            brief = TechnicalBrief.model_validate(payload)
        except ValidationError as exc:
            logger.warning("Brief tool arguments failed validation", errors=exc.error_count())
            raise BriefGenerationFailedError(reason="schema_mismatch") from exc

        generated = GeneratedBrief(brief_id=self._id_factory(), created_at=self._clock(), brief=brief)
        logger.info(
            "Brief synthesized",
            brief_id=generated.brief_id,
            features=len(brief.features),
            entries=len(questionnaire),
        )
        return generated
