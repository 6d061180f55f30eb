from __future__ import annotations

import re
from typing import Any


_ERROR_CODE_RE = re.compile(r"^[a-z][a-z0-9_]*(\.[a-z][a-z0-9_]*)*$")


class BrififyError(Exception):
    """Base typed error for Brifify.

    Every failure the core can surface is a subclass with:
    - a stable dotted `code` for programmatic handling by clients,
    - a human-readable `message`,
    - an HTTP `status_code` used by the API layer,
    - an optional `meta` payload (safe-to-expose only).
    """

    def __init__(
        self,
        *,
        code: str,
        message: str,
        status_code: int = 500,
        meta: dict[str, Any] | None = None,
    ) -> None:
        if not _ERROR_CODE_RE.fullmatch(code):
            raise ValueError(
                "Invalid error code. Expected dot-separated lowercase tokens, "
                f"got: {code!r}"
            )
        super().__init__(message)
        self.code = code
        self.message = message
        self.status_code = int(status_code)
        self.meta = dict(meta or {})

    def to_public_dict(self, *, request_id: str | None) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "detail": self.message,
            "code": self.code,
        }
        if request_id:
            payload["request_id"] = request_id
        if self.meta:
            payload["meta"] = self.meta
        return payload


class InvalidInputError(BrififyError):
    def __init__(
        self,
        *,
        message: str = "Invalid or missing request fields",
        code: str = "request.invalid_input",
        meta: dict[str, Any] | None = None,
    ):
        super().__init__(code=code, message=message, status_code=400, meta=meta)


class UnauthorizedError(BrififyError):
    def __init__(
        self,
        *,
        message: str = "Not authenticated",
        code: str = "auth.unauthorized",
        meta: dict[str, Any] | None = None,
    ):
        super().__init__(code=code, message=message, status_code=401, meta=meta)


class UserNotFoundError(BrififyError):
    def __init__(self, *, user_id: str, message: str = "User not found"):
        super().__init__(
            code="ledger.user_not_found",
            message=message,
            status_code=404,
            meta={"user_id": user_id},
        )


class BriefNotFoundError(BrififyError):
    def __init__(self, *, brief_id: str, message: str = "Brief not found"):
        super().__init__(
            code="brief.not_found",
            message=message,
            status_code=404,
            meta={"brief_id": brief_id},
        )


class InsufficientTokensError(BrififyError):
    """Balance exhausted. Always carries the balance so clients can react."""

    def __init__(self, *, balance: int = 0, message: str = "No tokens available"):
        super().__init__(
            code="ledger.insufficient_tokens",
            message=message,
            status_code=429,
            meta={"balance": max(0, int(balance))},
        )
        self.balance = max(0, int(balance))


class UpstreamGenerationFailedError(BrififyError):
    def __init__(
        self,
        *,
        message: str = "Reasoning service failed to produce a reply",
        detail: str | None = None,
    ):
        super().__init__(
            code="upstream.generation_failed",
            message=message,
            status_code=500,
            meta={"upstream_detail": detail} if detail else None,
        )
        self.detail = detail


class RunTimeoutError(BrififyError):
    def __init__(self, *, attempts: int, message: str = "Reasoning service did not finish in time"):
        super().__init__(
            code="upstream.run_timeout",
            message=message,
            status_code=500,
            meta={"attempts": attempts},
        )
        self.attempts = attempts


class BriefGenerationFailedError(BrififyError):
    def __init__(self, *, message: str = "Failed to generate structured brief.", reason: str | None = None):
        super().__init__(
            code="brief.generation_failed",
            message=message,
            status_code=500,
            meta={"reason": reason} if reason else None,
        )


class LedgerUnavailableError(BrififyError):
    def __init__(self, *, message: str = "Ledger storage is unavailable"):
        super().__init__(code="ledger.unavailable", message=message, status_code=500)


class BriefStoreUnavailableError(BrififyError):
    def __init__(self, *, message: str = "Brief storage is unavailable"):
        super().__init__(code="brief.store_unavailable", message=message, status_code=500)
