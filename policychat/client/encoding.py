"""Document encoding and object naming for the store endpoint."""

import base64
import secrets
import time


def encode_data_url(content: bytes, mime_type: str) -> str:
    """Encode binary content as a base64 data URL."""
    encoded = base64.b64encode(content).decode("ascii")
    return f"data:{mime_type};base64,{encoded}"


def make_object_name(prefix: str) -> str:
    """Build a stored object name that never repeats.

    Millisecond time keeps names sortable; the random suffix separates
    two uploads started within the same millisecond.
    """
    return f"{prefix}{time.time_ns() // 1_000_000}_{secrets.token_hex(4)}"
