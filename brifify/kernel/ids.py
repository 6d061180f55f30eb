from __future__ import annotations

import re
import secrets
import time
from uuid import uuid4


_PREFIX_RE = re.compile(r"^[a-z][a-z0-9]{1,24}$")
_BRIEF_ID_RE = re.compile(r"^\d{13,}-[0-9a-z]{10}$")
_SUFFIX_ALPHABET = "0123456789abcdefghijklmnopqrstuvwxyz"


def new_prefixed_id(prefix: str) -> str:
    """Generate a new ID using a short prefix.

    Format: `{prefix}_{uuidhex}`.
    """
    if not _PREFIX_RE.fullmatch(prefix):
        raise ValueError(
            "Invalid id prefix. Expected lowercase letters/digits, 2-25 chars, "
            "starting with a letter."
        )
    return f"{prefix}_{uuid4().hex}"


def new_brief_id(*, now_ms: int | None = None) -> str:
    """Generate a brief id: `{epoch_ms}-{10 random base36 chars}`.

    Sorts roughly by creation time. The suffix comes from `secrets`, giving
    ~51 bits of entropy per millisecond, which keeps concurrent callers apart.
    """
    millis = int(time.time() * 1000) if now_ms is None else int(now_ms)
    suffix = "".join(secrets.choice(_SUFFIX_ALPHABET) for _ in range(10))
    return f"{millis}-{suffix}"


def is_brief_id(value: str) -> bool:
    return bool(_BRIEF_ID_RE.fullmatch(value))


def new_share_id() -> str:
    """Unguessable public token for a shared brief (128 random bits, URL-safe)."""
    return secrets.token_urlsafe(16)
