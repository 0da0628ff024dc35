"""Order document shape shared with the storefront front-end and legacy tooling."""

import json

from storefront.order.timeline import project_timeline


def _isoformat(value):
    return value.isoformat() if value else None


def _entry_statuses(order):
    # Stored entries keep the status they were recorded with, so report them against the present status
    projected = {stage.key: stage.status.value for stage in project_timeline(order.status, order.ordered_timeline)}
    return {entry.stage_key: projected.get(entry.stage_key, "completed") for entry in order.ordered_timeline}


def to_order_document(order) -> dict:
    """Render an Order in the camelCase document layout clients consume."""
    entry_statuses = _entry_statuses(order)
    return {
        "orderId": order.order_number,
        "userId": str(order.customer_id),
        "items": [
            {
                "productId": str(item.product_id),
                "variantId": str(item.variant_id) if item.variant_id else None,
                "name": item.name,
                "image": item.image_url,
                "price": item.unit_price,
                "quantity": item.quantity,
                "variant": json.loads(item.variant_options) if item.variant_options else {},
            }
            for item in order.items
        ],
        "pricing": {
            "subtotal": order.pricing.subtotal,
            "shipping": order.pricing.shipping,
            "tax": order.pricing.tax,
            "discount": order.pricing.discount,
            "total": order.pricing.total,
        },
        "payment": {
            "method": order.payment.method,
            "status": order.payment.status,
            "transactionId": order.payment.transaction_reference,
        },
        "status": order.status,
        "shippingDetails": {
            "name": order.shipping_details.name,
            "email": order.shipping_details.email,
            "phone": order.shipping_details.phone,
            "address": order.shipping_details.address,
        },
        "timeline": [
            {
                "key": entry.stage_key,
                "title": entry.title,
                "description": entry.description,
                "status": entry_statuses[entry.stage_key],
                "timestamp": _isoformat(entry.occurred_at),
            }
            for entry in order.ordered_timeline
        ],
        "voucherCode": order.voucher_code,
        "createdAt": _isoformat(order.created_at),
    }
