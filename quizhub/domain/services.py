# quizhub/domain/services.py
from __future__ import annotations

import hmac
import secrets


def generate_numeric_code(width: int = 6) -> str:
    """Zero-padded numeric code of exactly `width` digits."""
    if width < 1:
        raise ValueError("width must be >= 1")
    return f"{secrets.randbelow(10**width):0{width}d}"


def secure_compare(a: str, b: str) -> bool:
    """
    Constant-time comparison for secrets.
    Accepts strings; falls back to bytes if needed.
    """
    try:
        # hmac.compare_digest supports str if types match (ASCII only)
        return hmac.compare_digest(a, b)
    except TypeError:
        return hmac.compare_digest(a.encode("utf-8"), b.encode("utf-8"))


def normalize_email(email: str) -> str:
    return email.strip().lower()
