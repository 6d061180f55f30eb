"""Interview completion detection."""

from __future__ import annotations

import re
import string

_EDGE_CHARS = string.punctuation + string.whitespace + "‘’“”…"
_TOKEN_SPLIT_RE = re.compile(r"[\s.,!?;:]+")
_DONE = "done"


def normalize_reply(reply_text: str) -> str:
    """Lower-case and strip whitespace/punctuation from both ends."""
    return reply_text.strip().lower().strip(_EDGE_CHARS)


def is_complete(reply_text: str | None) -> bool:
    """True when the model signalled it has no more questions.

    Accepts `done` in any case with surrounding punctuation ("Done.", "DONE",
    "  done  ") and replies led by it ("Done. Thanks!"). A reply that merely
    contains the word ("I'm not done asking") or is itself a question keeps
    the interview going.

    The bare-word check runs before the question guard, so "Done?" completes:
    once edge punctuation is stripped it is the completion token and nothing
    else. "Done with features?" is still a question.
    """
    if not reply_text:
        return False

    normalized = normalize_reply(reply_text)
    if normalized == _DONE:
        return True
    if reply_text.rstrip().endswith("?"):
        return False
    lead = _TOKEN_SPLIT_RE.split(normalized, maxsplit=1)[0]
    return lead == _DONE
