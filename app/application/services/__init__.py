"""Application services: approver resolution and default workflow seeding."""

from app.application.services.approver_resolver import ApproverResolver

__all__ = ["ApproverResolver"]
