"""Bounded polling of an order's payment status.

Used after the customer returns from the hosted checkout: the confirmation
usually arrives by webhook within a few seconds, so the caller polls the
order instead of trusting the redirect. Running out of attempts is not a
failure; the payment may still complete, so the outcome is ``processing``.
"""

import time
from collections.abc import Callable
from dataclasses import dataclass

PROCESSING_MESSAGE = "Your payment is still processing. Check your order history for the final status."


@dataclass(frozen=True)
class PollOutcome:
    status: str  # completed, failed or processing
    attempts: int
    message: str | None = None


def poll_payment_status(
    fetch: Callable[[], str],
    max_attempts: int = 15,
    interval: float = 2.0,
    sleep: Callable[[float], None] = time.sleep,
) -> PollOutcome:
    """Call ``fetch`` until it reports ``completed`` or ``failed``, at most ``max_attempts`` times."""
    for attempt in range(1, max_attempts + 1):
        status = fetch()
        if status == "completed":
            return PollOutcome(status="completed", attempts=attempt)
        if status == "failed":
            return PollOutcome(status="failed", attempts=attempt, message="Payment was declined.")
        if attempt < max_attempts:
            sleep(interval)

    return PollOutcome(status="processing", attempts=max_attempts, message=PROCESSING_MESSAGE)
