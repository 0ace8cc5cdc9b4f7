"""
Identifiers
===========
Random report ids and content-derived symbolication ids.

Both use the 8-4-4-4-12 lowercase hex layout. Report ids are 16 random
bytes and do not follow any particular UUID version's bit pattern.
"""
import hashlib
import secrets


def format_uuid(raw: bytes) -> str:
    """
    Format 16 bytes as 8-4-4-4-12 lowercase hex.

    Parameters
    ----------
    raw : bytes
        At least 16 bytes; anything past the 16th byte is ignored.

    Returns
    -------
    str
        Hyphen-separated identifier, e.g. "0f1e2d3c-4b5a-6978-8796-a5b4c3d2e1f0".
    """
    if len(raw) < 16:
        raise ValueError(f"Need 16 bytes to format an identifier, got {len(raw)}")
    h = raw[:16].hex()
    return f"{h[0:8]}-{h[8:12]}-{h[12:16]}-{h[16:20]}-{h[20:32]}"


def generate_report_uuid() -> str:
    """Return a new random report id from a cryptographic source."""
    return format_uuid(secrets.token_bytes(16))


def content_uuid(content: bytes) -> str:
    """Deterministic id for a file's bytes (same content → same id)."""
    return format_uuid(hashlib.sha256(content).digest())
