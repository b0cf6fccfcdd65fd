"""Primary key generation (CUID2)."""

from cuid2 import cuid_wrapper

_cuid = cuid_wrapper()


def generate_cuid() -> str:
    """Return a new collision-resistant id for a database row."""
    return str(_cuid())
