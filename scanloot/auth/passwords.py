"""
scrypt password hashes, stored as `N:r:p:keyLen:salt:hash` (salt and hash hex).

The parameters travel with the hash, so hashes made with the lighter dev
parameters still verify after the defaults change.
"""

from __future__ import annotations

import hashlib
import hmac
import secrets

from ..settings import settings

KEY_LEN = 64
SALT_BYTES = 16


def _params() -> tuple[int, int, int]:
    if settings.is_development:
        return 2**10, 8, 1
    return 2**14, 8, 1


def hash_password(password: str) -> str:
    n, r, p = _params()
    salt = secrets.token_bytes(SALT_BYTES)
    dk = hashlib.scrypt(password.encode("utf-8"), salt=salt, n=n, r=r, p=p, dklen=KEY_LEN)
    return f"{n}:{r}:{p}:{KEY_LEN}:{salt.hex()}:{dk.hex()}"


def verify_password(password: str, stored: str | None) -> bool:
    if not stored:
        return False
    try:
        n_s, r_s, p_s, len_s, salt_hex, hash_hex = stored.split(":")
        n, r, p, key_len = int(n_s), int(r_s), int(p_s), int(len_s)
        salt = bytes.fromhex(salt_hex)
        expected = bytes.fromhex(hash_hex)
        dk = hashlib.scrypt(password.encode("utf-8"), salt=salt, n=n, r=r, p=p, dklen=key_len)
    except ValueError:
        return False
    return hmac.compare_digest(dk, expected)
