"""Configurable fake payment gateway for development and testing.

Simulates the hosted-checkout flow without any external calls. Behaviour
can be switched at runtime (succeed, fail, stay pending) and every call is
recorded so tests can assert on what was sent.
"""

from uuid import uuid4

from storefront.payment.gateway.port import InitializationResult, PaymentGateway, VerificationResult


class FakeGateway(PaymentGateway):
    """Configurable fake payment gateway."""

    def __init__(self) -> None:
        self.should_succeed: bool = True
        self.verification_status: str = "success"
        self.failure_reason: str = "Declined"
        self.calls: list[dict] = []

    def configure(
        self,
        should_succeed: bool = True,
        verification_status: str = "success",
        failure_reason: str = "Declined",
    ) -> None:
        """Configure gateway behavior at runtime."""
        self.should_succeed = should_succeed
        self.verification_status = verification_status
        self.failure_reason = failure_reason

    def initialize_transaction(
        self,
        email: str,
        amount: int,
        currency: str,
        reference: str,
        metadata: dict | None = None,
    ) -> InitializationResult:
        self.calls.append(
            {
                "method": "initialize_transaction",
                "email": email,
                "amount": amount,
                "currency": currency,
                "reference": reference,
                "metadata": metadata or {},
            }
        )

        if self.should_succeed:
            access_code = f"fake_{uuid4().hex[:12]}"
            return InitializationResult(
                success=True,
                authorization_url=f"https://checkout.fake-gateway.test/{access_code}",
                access_code=access_code,
                reference=reference,
            )
        return InitializationResult(success=False, reference=reference, failure_reason=self.failure_reason)

    def verify_transaction(self, reference: str) -> VerificationResult:
        self.calls.append({"method": "verify_transaction", "reference": reference})
        return VerificationResult(
            status=self.verification_status,
            reference=reference,
            gateway_response=self.failure_reason if self.verification_status != "success" else "Approved",
        )

    def verify_webhook_signature(self, payload: bytes, signature: str) -> bool:  # noqa: ARG002
        return signature == "test-signature"
