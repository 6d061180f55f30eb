"""Transcript -> questionnaire pairing."""

from __future__ import annotations

from collections.abc import Sequence

from brifify.kernel.errors import InvalidInputError
from brifify.reasoning.schemas import QuestionnaireEntry, Turn


def pair_history(history: Sequence[Turn]) -> list[QuestionnaireEntry]:
    """Pair turns 2i/2i+1 (assistant question, user answer).

    A trailing assistant turn without an answer (typically the final `done`)
    is dropped. Turns that break the assistant/user alternation are rejected.
    """
    entries: list[QuestionnaireEntry] = []
    for index in range(0, len(history) - 1, 2):
        question, answer = history[index], history[index + 1]
        if question.role != "assistant" or answer.role != "user":
            raise InvalidInputError(
                message="History must alternate assistant questions and user answers",
                meta={"index": index},
            )
        entries.append(QuestionnaireEntry(question=question.content, answer=answer.content))
    return entries


def validate_prior_history(history: Sequence[Turn]) -> None:
    """Reject a transcript that cannot precede a new user answer.

    It must be empty or alternate assistant/user starting with an assistant
    question and ending on one.
    """
    for index, turn in enumerate(history):
        expected = "assistant" if index % 2 == 0 else "user"
        if turn.role != expected:
            raise InvalidInputError(
                message="History must alternate assistant questions and user answers",
                meta={"index": index},
            )
    if history and history[-1].role != "assistant":
        raise InvalidInputError(
            message="History must end with an assistant question",
            meta={"index": len(history) - 1},
        )
