"""Domain entities and aggregates.

Pure domain models; no ORM or persistence concerns.
"""

from app.domain.entities.approval import (
    ApprovalProgress,
    StageSpec,
    validate_stage_set,
)

__all__ = [
    "ApprovalProgress",
    "StageSpec",
    "validate_stage_set",
]
