"""Fulfillment timeline projection.

Orders record sparse timeline entries (one per stage actually reached). The
customer-facing timeline is the fixed stage template with those entries
joined onto it by stage key and every stage classified relative to the
order's present status:

- the stage matching the present status is ``current``
- stages with a recorded entry, or before the current stage, are ``completed``
- later stages are ``upcoming``

Cancelled orders keep the stages they reached, mark the rest ``skipped`` and
end with a terminal ``cancelled`` stage.
"""

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class StageStatus(Enum):
    COMPLETED = "completed"
    CURRENT = "current"
    UPCOMING = "upcoming"
    SKIPPED = "skipped"


@dataclass(frozen=True)
class StageTemplate:
    key: str
    title: str
    description: str


@dataclass(frozen=True)
class TimelineStage:
    key: str
    title: str
    description: str
    status: StageStatus
    occurred_at: datetime | None = None

    def as_dict(self) -> dict:
        return {
            "key": self.key,
            "title": self.title,
            "description": self.description,
            "status": self.status.value,
            "occurred_at": self.occurred_at.isoformat() if self.occurred_at else None,
        }


@dataclass(frozen=True)
class RecordedStage:
    """Minimal stand-in for a stored timeline entry."""

    stage_key: str
    occurred_at: datetime | None = None


ORDER_STAGES = (
    StageTemplate("pending", "Order Placed", "Your order has been received and is waiting for processing."),
    StageTemplate("processing", "Processing", "We are preparing your items for shipment at the warehouse."),
    StageTemplate("in-transit", "In Transit", "Your order has shipped and is on its way."),
    StageTemplate("delivered", "Delivered", "Your order has been successfully delivered. Thank you!"),
)

CANCELLED_STAGE = StageTemplate("cancelled", "Cancelled", "This order has been cancelled.")

STAGES_BY_KEY = {stage.key: stage for stage in ORDER_STAGES}
STAGES_BY_KEY[CANCELLED_STAGE.key] = CANCELLED_STAGE

# Order status (as stored on the Order) -> stage key
STATUS_TO_STAGE = {
    "Pending": "pending",
    "Confirmed": "pending",
    "Processing": "processing",
    "In transit": "in-transit",
    "Delivered": "delivered",
    "Cancelled": "cancelled",
}


def _first_occurrences(entries):
    recorded = {}
    for entry in entries:
        if entry.stage_key not in recorded:
            recorded[entry.stage_key] = entry.occurred_at
    return recorded


def project_timeline(order_status: str, entries: Iterable) -> list[TimelineStage]:
    """Project recorded entries onto the stage template for ``order_status``.

    ``entries`` are anything with ``stage_key`` and ``occurred_at`` attributes,
    in the order they were recorded.
    """
    if order_status not in STATUS_TO_STAGE:
        raise ValueError(f"Unknown order status: {order_status}")

    recorded = _first_occurrences(entries)
    keys = [stage.key for stage in ORDER_STAGES]

    if order_status == "Cancelled":
        reached = [keys.index(key) for key in recorded if key in keys]
        # An order exists, so it was at least placed
        last_reached = max(reached, default=0)

        stages = [
            TimelineStage(
                key=stage.key,
                title=stage.title,
                description=stage.description,
                status=(StageStatus.COMPLETED if i <= last_reached or stage.key in recorded else StageStatus.SKIPPED),
                occurred_at=recorded.get(stage.key),
            )
            for i, stage in enumerate(ORDER_STAGES)
        ]
        stages.append(
            TimelineStage(
                key=CANCELLED_STAGE.key,
                title=CANCELLED_STAGE.title,
                description=CANCELLED_STAGE.description,
                status=StageStatus.CURRENT,
                occurred_at=recorded.get(CANCELLED_STAGE.key),
            )
        )
        return stages

    current_index = keys.index(STATUS_TO_STAGE[order_status])

    stages = []
    for i, stage in enumerate(ORDER_STAGES):
        if i == current_index:
            status = StageStatus.CURRENT
        elif i < current_index or stage.key in recorded:
            status = StageStatus.COMPLETED
        else:
            status = StageStatus.UPCOMING

        stages.append(
            TimelineStage(
                key=stage.key,
                title=stage.title,
                description=stage.description,
                status=status,
                occurred_at=recorded.get(stage.key),
            )
        )
    return stages
