"""Payment gateway port (abstract interface).

Defines the contract that all payment gateway adapters must implement.
This enables swapping between FakeGateway (dev/test) and PaystackGateway
(production) without changing any domain or application code.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class InitializationResult:
    """Result of opening a hosted checkout session."""

    success: bool
    authorization_url: str | None = None
    access_code: str | None = None
    reference: str | None = None
    failure_reason: str | None = None


@dataclass(frozen=True)
class VerificationResult:
    """What the gateway says about a transaction reference."""

    status: str  # success, failed, abandoned, pending, ...
    reference: str
    amount: int | None = None  # minor units
    gateway_response: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.status == "success"

    @property
    def failed(self) -> bool:
        return self.status in ("failed", "abandoned", "reversed")


class PaymentGateway(ABC):
    """Abstract payment gateway interface."""

    @abstractmethod
    def initialize_transaction(
        self,
        email: str,
        amount: int,
        currency: str,
        reference: str,
        metadata: dict | None = None,
    ) -> InitializationResult:
        """Open a checkout session for ``amount`` minor units."""
        ...

    @abstractmethod
    def verify_transaction(self, reference: str) -> VerificationResult:
        """Ask the gateway for the current state of a transaction."""
        ...

    @abstractmethod
    def verify_webhook_signature(
        self,
        payload: bytes,
        signature: str,
    ) -> bool:
        """Verify that a webhook payload is authentically from the gateway."""
        ...
