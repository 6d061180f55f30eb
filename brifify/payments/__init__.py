"""Payment fulfillment."""

from brifify.payments.webhook import FulfillmentResult, PaymentWebhookHandler

__all__ = ["FulfillmentResult", "PaymentWebhookHandler"]
