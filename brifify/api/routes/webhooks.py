"""Payment provider webhooks."""

from fastapi import APIRouter, Depends, Header, Request

from brifify.api.dependencies import get_container
from brifify.container import ServiceContainer
from brifify.payments import FulfillmentResult

router = APIRouter(prefix="/webhooks", tags=["Webhooks"])


@router.post("/payments", response_model=FulfillmentResult)
async def payment_webhook(
    request: Request,
    container: ServiceContainer = Depends(get_container),
    stripe_signature: str | None = Header(None, alias="Stripe-Signature"),
):
    """
    Receive payment events.

    Only completed checkouts credit tokens; every other verified event is
    acknowledged so the provider stops redelivering it.
    """
    body = await request.body()
    return await container.payments.handle(body, stripe_signature)
