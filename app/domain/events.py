"""Approval outcome events published to other modules.

Consumers (agent activation, member activation, wallet deposit posting,
death-claim settlement, cash handover) subscribe by event name and filter
on workflow_code / entity_type.
"""

from dataclasses import asdict, dataclass
from datetime import datetime
from typing import Any

REQUEST_APPROVED = "RequestApproved"
REQUEST_REJECTED = "RequestRejected"


@dataclass(frozen=True)
class ApprovalOutcome:
    """Payload of RequestApproved / RequestRejected."""

    request_id: str
    workflow_code: str
    entity_type: str
    entity_id: str
    actor_user_id: str
    acted_at: datetime
    reason: str | None = None

    def to_payload(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class PendingEvent:
    """An event queued inside a transaction and published after commit."""

    name: str
    outcome: ApprovalOutcome
