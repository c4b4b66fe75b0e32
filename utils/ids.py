"""Identifier generation."""

from uuid import uuid4


def generate_id(prefix: str) -> str:
    """Opaque unique id, e.g. 'inv-3f2a...'."""
    return f"{prefix}-{uuid4().hex}"
