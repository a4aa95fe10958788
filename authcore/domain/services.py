# authcore/domain/services.py
from __future__ import annotations

import hashlib
import hmac
import re
import secrets

OTP_LENGTH = 6
DEFAULT_DURATION_SECONDS = 7 * 24 * 60 * 60

_DURATION_RE = re.compile(r"^(\d+)([smhd])$")
_UNIT_SECONDS = {"s": 1, "m": 60, "h": 60 * 60, "d": 24 * 60 * 60}


def generate_otp() -> str:
    """Zero-padded 6-digit numeric code, uniform over 000000-999999."""
    return f"{secrets.randbelow(10**OTP_LENGTH):0{OTP_LENGTH}d}"


def fingerprint_secret(secret: str) -> str:
    """
    One-way SHA-256 digest (hex) of an opaque bearer secret.
    Bearer secrets are high entropy, so no salt or work factor is needed.
    """
    return hashlib.sha256(secret.encode("utf-8")).hexdigest()


def secure_compare(a: str, b: str) -> bool:
    """
    Constant-time comparison for secrets.
    Accepts strings; falls back to bytes if needed.
    """
    try:
        # hmac.compare_digest supports str if both are ASCII
        return hmac.compare_digest(a, b)
    except TypeError:
        return hmac.compare_digest(a.encode("utf-8"), b.encode("utf-8"))


def parse_duration(value: str | None) -> int:
    """
    Convert "30s" / "15m" / "12h" / "7d" into seconds.
    A missing value falls back to 7 days; a malformed one raises ValueError.
    """
    if not value:
        return DEFAULT_DURATION_SECONDS
    match = _DURATION_RE.match(value.strip())
    if not match:
        raise ValueError(f"invalid duration: {value!r}")
    amount, unit = match.groups()
    return int(amount) * _UNIT_SECONDS[unit]
