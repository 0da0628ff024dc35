"""Internal payment webhook: signature check and payload interpretation.

The relay in front of the gateway forwards charge notifications signed with
HMAC-SHA256 of the raw request body (hex digest in ``x-internal-signature``).
Only ``charge.success`` notifications whose data status is ``success`` confirm
a payment; everything else is acknowledged and ignored.
"""

import hashlib
import hmac
from dataclasses import dataclass

from protean.exceptions import ValidationError

SIGNATURE_HEADER = "x-internal-signature"


@dataclass(frozen=True)
class ChargeNotification:
    order_number: str
    transaction_reference: str | None
    amount: int | None = None


def sign_payload(raw_body: bytes, secret: str) -> str:
    return hmac.new(secret.encode(), raw_body, hashlib.sha256).hexdigest()


def verify_signature(raw_body: bytes, signature: str | None, secret: str | None) -> bool:
    if not secret or not signature:
        return False
    return hmac.compare_digest(sign_payload(raw_body, secret), signature)


def parse_charge_notification(payload: dict) -> ChargeNotification | None:
    """The successful charge this payload reports, or None when it reports anything else."""
    if payload.get("event") != "charge.success":
        return None

    data = payload.get("data") or {}
    if data.get("status") != "success":
        return None

    metadata = data.get("metadata") or {}
    order_number = metadata.get("orderId")
    if not order_number:
        raise ValidationError({"metadata": ["orderId is missing from the charge metadata"]})

    return ChargeNotification(
        order_number=str(order_number),
        transaction_reference=data.get("reference"),
        amount=data.get("amount"),
    )
