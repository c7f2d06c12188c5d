"""
Idempotency key helpers.
"""
import uuid
from typing import Union

from .exceptions import IdentifierError


def generate_idempotency_key() -> str:
    """
    Generate a fresh idempotency key.

    Returns:
        A random UUID v4 in its canonical 36-character text form
    """
    return str(uuid.uuid4())


def validate_idempotency_key(value: Union[str, uuid.UUID]) -> str:
    """
    Validate a caller-supplied idempotency key.

    Only the canonical 36-character hyphenated form is accepted (in either
    case). Braced, ``urn:uuid:`` and bare 32-digit spellings are rejected.
    The key is returned exactly as given so that retries reuse the same
    token byte for byte.

    Args:
        value: UUID text or ``uuid.UUID`` instance

    Returns:
        The key as text

    Raises:
        IdentifierError: If the value is not a valid UUID
    """
    if isinstance(value, uuid.UUID):
        return str(value)
    if not isinstance(value, str):
        raise IdentifierError(f"Idempotency key must be a string, got {type(value).__name__}")
    try:
        parsed = uuid.UUID(value)
    except ValueError as e:
        raise IdentifierError(f"Invalid idempotency key {value!r}: {e}") from e
    if str(parsed) != value.lower():
        raise IdentifierError(
            f"Invalid idempotency key {value!r}: expected the hyphenated 8-4-4-4-12 form"
        )
    return value
