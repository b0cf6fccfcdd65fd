"""Shared cross-cutting helpers: logging and utilities. No business logic."""

from app.shared.utils import ensure_utc, generate_cuid, utc_now

__all__ = [
    "ensure_utc",
    "generate_cuid",
    "utc_now",
]
