"""Ledger domain types."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class ProviderIdentity:
    """Identity details presented by a registered (non-anonymous) client.

    `subject` is the identity provider's canonical id. It is treated as an
    opaque string; claim validation happens at the edge.
    """

    subject: str
    email: str | None = None
    provider_name: str | None = None
    external_id: str | None = None


@dataclass(frozen=True)
class UserAccount:
    user_id: str
    is_anonymous: bool
    tokens: int
    created_at: datetime
    last_updated: datetime
    email: str | None = None
    identity_provider: str | None = None
    external_id: str | None = None


@dataclass(frozen=True)
class ResolvedAccount:
    account: UserAccount
    is_new: bool


@dataclass(frozen=True)
class NewAccount:
    """Values for a create-if-absent write."""

    user_id: str
    is_anonymous: bool
    tokens: int
    email: str | None = None
    identity_provider: str | None = None
    external_id: str | None = None

    @classmethod
    def for_client(
        cls,
        user_id: str,
        *,
        starting_tokens: int,
        identity: ProviderIdentity | None = None,
    ) -> "NewAccount":
        if identity is None:
            return cls(user_id=user_id, is_anonymous=True, tokens=starting_tokens)
        return cls(
            user_id=user_id,
            is_anonymous=False,
            tokens=starting_tokens,
            email=identity.email,
            identity_provider=identity.provider_name or "cognito",
            external_id=identity.external_id or identity.subject,
        )
