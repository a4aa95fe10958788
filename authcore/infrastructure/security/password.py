from __future__ import annotations

from functools import lru_cache

from passlib.context import CryptContext

from authcore.settings import get_settings

# One global context; bcrypt is the only scheme we use.
_pwd = CryptContext(schemes=["bcrypt"], deprecated="auto")


def hash_password(plain: str, *, rounds: int | None = None) -> str:
    """
    Hash a password using bcrypt. If rounds is None, use settings.bcrypt_rounds.
    """
    if rounds is None:
        rounds = int(get_settings().bcrypt_rounds)
    return _pwd.hash(plain, rounds=rounds)


@lru_cache(maxsize=4)
def _dummy_hash(rounds: int) -> str:
    # Same cost as real hashes, so an unknown address costs as much as a wrong password.
    return _pwd.hash("authcore-timing-dummy", rounds=rounds)


def verify_password(plain: str, password_hash: str | None) -> bool:
    """
    Verify a password against its bcrypt hash (safe timing).
    A missing hash still runs a full-cost bcrypt check against a dummy.
    """
    if not password_hash:
        _pwd.verify(plain, _dummy_hash(int(get_settings().bcrypt_rounds)))
        return False
    try:
        return _pwd.verify(plain, password_hash)
    except ValueError:
        return False
