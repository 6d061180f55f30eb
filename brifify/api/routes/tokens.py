"""Internal token crediting (purchase fulfillment from trusted callers)."""

import hmac

import structlog
from fastapi import APIRouter, Depends, Header
from pydantic import BaseModel, Field

from brifify.api.dependencies import get_container
from brifify.api.schemas import IdentityPayload, UserRequest
from brifify.container import ServiceContainer
from brifify.kernel.errors import UnauthorizedError
from brifify.ledger.identity import require_client_id

logger = structlog.get_logger()

router = APIRouter(prefix="/tokens", tags=["Tokens"])


class CreditRequest(UserRequest):
    tokens: int = Field(strict=True)
    idempotency_key: str | None = Field(default=None, max_length=255)
    identity: IdentityPayload | None = None


class CreditResponse(BaseModel):
    user_id: str
    tokens: int


def _verify_internal_secret(container: ServiceContainer, presented: str | None) -> None:
    secret = container.settings.internal_api_secret
    if not secret:
        logger.warning("Internal API secret not configured; rejecting credit request")
        raise UnauthorizedError()
    if not presented or not hmac.compare_digest(presented, secret):
        raise UnauthorizedError()


@router.post("/credit", response_model=CreditResponse)
async def credit_tokens(
    body: CreditRequest,
    container: ServiceContainer = Depends(get_container),
    x_internal_secret: str | None = Header(None, alias="X-Internal-Secret"),
):
    _verify_internal_secret(container, x_internal_secret)

    user_id = require_client_id(body.user_id)
    identity = body.identity.to_identity(user_id) if body.identity else None
    balance = await container.tokens.credit(
        user_id,
        body.tokens,
        idempotency_key=body.idempotency_key,
        identity=identity,
    )
    return CreditResponse(user_id=user_id, tokens=balance)
