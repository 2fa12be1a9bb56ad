"""Primary key generation (CUID2, shared by every table and execution record)."""

from cuid2 import cuid_wrapper

_next_cuid = cuid_wrapper()


def generate_cuid() -> str:
    """Return a new collision-resistant id, safe to create before the row is inserted."""
    return str(_next_cuid())
