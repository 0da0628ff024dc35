"""Payment webhook endpoint.

Receives charge notifications relayed from the payment gateway, verifies the
HMAC signature over the raw body and settles the charge against the matching
order.
"""

import json

from fastapi import APIRouter, Request
from protean.exceptions import ValidationError
from protean.utils.globals import current_domain

from storefront.config import get_settings
from storefront.errors import ForbiddenError
from storefront.order.payment import SettleCharge
from storefront.payment.webhook import SIGNATURE_HEADER, parse_charge_notification, verify_signature
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

webhook_router = APIRouter(prefix="/webhooks", tags=["webhooks"])


@webhook_router.post("/payments")
async def payment_webhook(request: Request) -> dict:
    raw_body = await request.body()

    if not verify_signature(raw_body, request.headers.get(SIGNATURE_HEADER), get_settings().webhook_secret):
        logger.warning("webhook_signature_rejected", path=request.url.path)
        raise ForbiddenError({"signature": ["Invalid webhook signature"]})

    try:
        payload = json.loads(raw_body)
    except ValueError:
        raise ValidationError({"body": ["Webhook body is not valid JSON"]}) from None
    if not isinstance(payload, dict):
        raise ValidationError({"body": ["Webhook body must be a JSON object"]})

    notification = parse_charge_notification(payload)
    if notification is None:
        logger.info("webhook_ignored", webhook_event=payload.get("event"))
        return {"status": "ignored"}

    settlement = current_domain.process(
        SettleCharge(
            order_number=notification.order_number,
            transaction_reference=notification.transaction_reference,
        ),
        asynchronous=False,
    )
    return {"status": settlement}
