"""
Payment Webhooks

Verifies payment-provider webhook signatures and turns completed checkouts
into token credits.

Signature header format: `t=<unix seconds>,v1=<hex digest>[,v1=...]` where the
digest is HMAC-SHA256 over `"{t}.{raw body}"`. Delivery is at-least-once, so
the provider event id is used as the credit's idempotency key.
"""

from __future__ import annotations

import hashlib
import hmac
import json
import time
from collections.abc import Callable
from typing import Any

import structlog
from pydantic import BaseModel

from brifify.kernel.errors import InvalidInputError, UnauthorizedError
from brifify.ledger.models import ProviderIdentity
from brifify.ledger.tokens import TokenLedger

logger = structlog.get_logger()

CHECKOUT_COMPLETED = "checkout.session.completed"

# Environments where an unset secret skips verification instead of rejecting.
UNVERIFIED_ENVIRONMENTS = frozenset({"development", "test"})


class FulfillmentResult(BaseModel):
    event_id: str
    event_type: str
    credited: bool
    user_id: str | None = None
    tokens: int | None = None
    balance: int | None = None


def parse_signature_header(header: str) -> tuple[int, list[str]]:
    """Split a signature header into its timestamp and v1 signatures."""
    timestamp: int | None = None
    signatures: list[str] = []
    for part in header.split(","):
        key, _, value = part.strip().partition("=")
        if key == "t":
            try:
                timestamp = int(value)
            except ValueError:
                raise InvalidInputError(message="Invalid signature header") from None
        elif key == "v1" and value:
            signatures.append(value)

    if timestamp is None or not signatures:
        raise InvalidInputError(message="Invalid signature header")
    return timestamp, signatures


def compute_signature(secret: str, timestamp: int, body: bytes) -> str:
    signed_payload = f"{timestamp}.".encode() + body
    return hmac.new(secret.encode(), signed_payload, hashlib.sha256).hexdigest()


def _parse_token_amount(raw: Any) -> int:
    if isinstance(raw, bool):
        raise InvalidInputError(message="Invalid token amount", meta={"tokens": raw})
    try:
        amount = int(str(raw).strip())
    except (TypeError, ValueError):
        raise InvalidInputError(message="Invalid token amount", meta={"tokens": raw}) from None
    if amount <= 0:
        raise InvalidInputError(message="Invalid token amount", meta={"tokens": raw})
    return amount


def _object_field(parent: dict[str, Any], key: str, event_id: str) -> dict[str, Any]:
    """Return a nested JSON object, treating absent or null as empty."""
    value = parent.get(key)
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise InvalidInputError(message="Malformed event payload", meta={"event_id": event_id, "field": key})
    return value


class PaymentWebhookHandler:
    def __init__(
        self,
        tokens: TokenLedger,
        *,
        secret: str,
        tolerance_seconds: int = 300,
        environment: str = "production",
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._tokens = tokens
        self._secret = secret
        self._tolerance = tolerance_seconds
        self._environment = environment
        self._clock = clock

    def verify(self, body: bytes, signature_header: str | None) -> None:
        if not self._secret:
            if self._environment not in UNVERIFIED_ENVIRONMENTS:
                logger.error("Payment webhook secret not configured", environment=self._environment)
                raise UnauthorizedError(message="Payment webhook verification is not configured")
            logger.warning("Payment webhook secret not configured, skipping verification")
            return
        if not signature_header:
            raise InvalidInputError(message="Missing signature")

        timestamp, signatures = parse_signature_header(signature_header)
        if abs(self._clock() - timestamp) > self._tolerance:
            logger.warning("Payment webhook timestamp outside tolerance", timestamp=timestamp)
            raise InvalidInputError(message="Signature timestamp outside tolerance")

        expected = compute_signature(self._secret, timestamp, body)
        if not any(hmac.compare_digest(expected, candidate) for candidate in signatures):
            logger.warning("Invalid payment webhook signature")
            raise InvalidInputError(message="Invalid signature")

    async def handle(self, body: bytes, signature_header: str | None) -> FulfillmentResult:
        self.verify(body, signature_header)

        try:
            event = json.loads(body)
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise InvalidInputError(message="Malformed event payload") from exc
        if not isinstance(event, dict) or not event.get("id") or not event.get("type"):
            raise InvalidInputError(message="Malformed event payload")

        event_id = str(event["id"])
        event_type = str(event["type"])
        if event_type != CHECKOUT_COMPLETED:
            logger.info("Payment event ignored", event_id=event_id, event_type=event_type)
            return FulfillmentResult(event_id=event_id, event_type=event_type, credited=False)

        data = _object_field(event, "data", event_id)
        session = _object_field(data, "object", event_id)
        metadata = _object_field(session, "metadata", event_id)
        user_id = metadata.get("userId")
        if not isinstance(user_id, str) or not user_id.strip():
            raise InvalidInputError(message="Missing userId", meta={"event_id": event_id})
        amount = _parse_token_amount(metadata.get("tokens"))

        email = _object_field(session, "customer_details", event_id).get("email")
        identity = ProviderIdentity(subject=user_id, email=email) if isinstance(email, str) and email else None

        balance = await self._tokens.credit(
            user_id,
            amount,
            idempotency_key=f"payment:{event_id}",
            identity=identity,
        )
        logger.info(
            "Checkout fulfilled",
            event_id=event_id,
            user_id=user_id,
            tokens=amount,
            balance=balance,
        )
        return FulfillmentResult(
            event_id=event_id,
            event_type=event_type,
            credited=True,
            user_id=user_id,
            tokens=amount,
            balance=balance,
        )
