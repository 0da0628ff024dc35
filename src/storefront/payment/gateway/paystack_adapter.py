"""Paystack payment gateway adapter.

Talks to the Paystack REST API over ``requests``:
- POST /transaction/initialize opens a hosted checkout session
- GET /transaction/verify/{reference} reports the transaction outcome
- webhooks are signed with HMAC-SHA512 of the raw body using the secret key
"""

import hashlib
import hmac

import requests

from storefront.errors import ExternalServiceError
from storefront.payment.gateway.port import InitializationResult, PaymentGateway, VerificationResult
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


class PaystackGateway(PaymentGateway):
    def __init__(self, secret_key: str, base_url: str = "https://api.paystack.co", timeout: float = 10.0) -> None:
        self.secret_key = secret_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = requests.Session()
        self.session.headers.update(
            {
                "Authorization": f"Bearer {secret_key}",
                "Content-Type": "application/json",
            }
        )

    def _request(self, method: str, path: str, **kwargs) -> dict:
        url = f"{self.base_url}{path}"
        try:
            response = self.session.request(method, url, timeout=self.timeout, **kwargs)
            response.raise_for_status()
            body = response.json()
        except requests.RequestException as exc:
            logger.error("paystack_request_failed", method=method, path=path, error=str(exc))
            raise ExternalServiceError({"payment": ["Payment gateway is unavailable"]}) from exc
        except ValueError as exc:
            logger.error("paystack_invalid_response", method=method, path=path)
            raise ExternalServiceError({"payment": ["Payment gateway returned an invalid response"]}) from exc

        if not body.get("status"):
            logger.warning("paystack_request_rejected", path=path, message=body.get("message"))
        return body

    def initialize_transaction(
        self,
        email: str,
        amount: int,
        currency: str,
        reference: str,
        metadata: dict | None = None,
    ) -> InitializationResult:
        body = self._request(
            "POST",
            "/transaction/initialize",
            json={
                "email": email,
                "amount": amount,
                "currency": currency,
                "reference": reference,
                "metadata": metadata or {},
            },
        )
        if not body.get("status"):
            return InitializationResult(success=False, reference=reference, failure_reason=body.get("message"))

        data = body.get("data") or {}
        return InitializationResult(
            success=True,
            authorization_url=data.get("authorization_url"),
            access_code=data.get("access_code"),
            reference=data.get("reference", reference),
        )

    def verify_transaction(self, reference: str) -> VerificationResult:
        body = self._request("GET", f"/transaction/verify/{reference}")
        data = body.get("data") or {}
        return VerificationResult(
            status=data.get("status", "pending"),
            reference=data.get("reference", reference),
            amount=data.get("amount"),
            gateway_response=data.get("gateway_response"),
        )

    def verify_webhook_signature(self, payload: bytes, signature: str) -> bool:
        expected = hmac.new(self.secret_key.encode(), payload, hashlib.sha512).hexdigest()
        return hmac.compare_digest(expected, signature or "")
