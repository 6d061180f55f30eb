import pytest

from brifify.kernel.errors import (
    BriefGenerationFailedError,
    BriefNotFoundError,
    BrififyError,
    InsufficientTokensError,
    InvalidInputError,
    LedgerUnavailableError,
    RunTimeoutError,
    UnauthorizedError,
    UpstreamGenerationFailedError,
    UserNotFoundError,
)

pytestmark = pytest.mark.unit


@pytest.mark.parametrize(
    ("error", "code", "status"),
    [
        (InvalidInputError(), "request.invalid_input", 400),
        (UnauthorizedError(), "auth.unauthorized", 401),
        (UserNotFoundError(user_id="u"), "ledger.user_not_found", 404),
        (BriefNotFoundError(brief_id="b"), "brief.not_found", 404),
        (InsufficientTokensError(), "ledger.insufficient_tokens", 429),
        (UpstreamGenerationFailedError(), "upstream.generation_failed", 500),
        (RunTimeoutError(attempts=30), "upstream.run_timeout", 500),
        (BriefGenerationFailedError(), "brief.generation_failed", 500),
        (LedgerUnavailableError(), "ledger.unavailable", 500),
    ],
)
def test_error_taxonomy_codes_and_statuses(error, code, status):
    assert isinstance(error, BrififyError)
    assert error.code == code
    assert error.status_code == status


def test_insufficient_tokens_always_exposes_balance():
    payload = InsufficientTokensError().to_public_dict(request_id="req_1")

    assert payload == {
        "detail": "No tokens available",
        "code": "ledger.insufficient_tokens",
        "request_id": "req_1",
        "meta": {"balance": 0},
    }


def test_invalid_error_code_is_rejected():
    with pytest.raises(ValueError):
        BrififyError(code="Not A Code", message="x")
