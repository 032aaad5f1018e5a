from __future__ import annotations

import uuid


def new_uuid() -> str:
    """Generate a UUID4 string."""
    return str(uuid.uuid4())


def new_provider_id() -> str:
    """Generate a new provider id (stable across reconnects of the same handle)."""
    return new_uuid()
