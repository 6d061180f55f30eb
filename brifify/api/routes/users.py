"""User identity and balance endpoints."""

from datetime import datetime

import structlog
from fastapi import APIRouter, Depends
from pydantic import BaseModel

from brifify.api.dependencies import get_container
from brifify.api.schemas import IdentityPayload, UserRequest
from brifify.container import ServiceContainer
from brifify.ledger.identity import require_client_id

logger = structlog.get_logger()

router = APIRouter(prefix="/users", tags=["Users"])


class ResolveUserRequest(UserRequest):
    identity: IdentityPayload | None = None


class AccountResponse(BaseModel):
    user_id: str
    is_anonymous: bool
    tokens: int
    is_new: bool
    email: str | None = None
    created_at: datetime


class BalanceResponse(BaseModel):
    user_id: str
    tokens: int


@router.post("/resolve", response_model=AccountResponse)
async def resolve_user(
    body: ResolveUserRequest,
    container: ServiceContainer = Depends(get_container),
):
    """
    Resolve a client id to its ledger row, creating it with the starting
    balance on first contact.
    """
    user_id = require_client_id(body.user_id)
    identity = body.identity.to_identity(user_id) if body.identity else None
    resolved = await container.identity.resolve(user_id, identity)
    account = resolved.account
    return AccountResponse(
        user_id=account.user_id,
        is_anonymous=account.is_anonymous,
        tokens=account.tokens,
        is_new=resolved.is_new,
        email=account.email,
        created_at=account.created_at,
    )


@router.get("/{user_id}/balance", response_model=BalanceResponse)
async def get_balance(
    user_id: str,
    container: ServiceContainer = Depends(get_container),
):
    tokens = await container.identity.balance(user_id)
    return BalanceResponse(user_id=user_id, tokens=tokens)
