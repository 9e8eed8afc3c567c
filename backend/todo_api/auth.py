from __future__ import annotations

import base64
import hashlib
import hmac
import secrets
from dataclasses import dataclass
from typing import Any

import jwt

DEFAULT_PBKDF2_ITERS = 200000


class InvalidTokenError(Exception):
    """Token is malformed, badly signed, or missing identity claims."""


@dataclass(frozen=True)
class TokenClaims:
    user_id: str
    email: str


def _b64(b: bytes) -> str:
    return base64.urlsafe_b64encode(b).decode("utf-8").rstrip("=")


def _b64d(s: str) -> bytes:
    pad = "=" * (-len(s) % 4)
    return base64.urlsafe_b64decode((s + pad).encode("utf-8"))


def hash_password(pw: str, iters: int = DEFAULT_PBKDF2_ITERS) -> str:
    # Format: pbkdf2_sha256$iters$salt$hash
    salt = secrets.token_bytes(16)
    dk = hashlib.pbkdf2_hmac("sha256", pw.encode("utf-8"), salt, iters, dklen=32)
    return f"pbkdf2_sha256${iters}${_b64(salt)}${_b64(dk)}"


def verify_password(pw: str, pw_hash: str) -> bool:
    try:
        algo, iters_s, salt_s, hash_s = pw_hash.split("$", 3)
        if algo != "pbkdf2_sha256":
            return False
        iters = int(iters_s)
        salt = _b64d(salt_s)
        expected = _b64d(hash_s)
    except (ValueError, TypeError, AttributeError):
        return False
    dk = hashlib.pbkdf2_hmac("sha256", pw.encode("utf-8"), salt, iters, dklen=len(expected))
    return hmac.compare_digest(dk, expected)


def make_token(user_id: int | str, email: str, secret: str, algorithm: str = "HS256") -> str:
    # no exp claim: tokens stay valid until the secret changes
    payload: dict[str, Any] = {
        "userId": str(user_id),
        "email": email,
    }
    return jwt.encode(payload, secret, algorithm=algorithm)


def decode_token(token: str, secret: str, algorithm: str = "HS256") -> TokenClaims:
    if not token:
        raise InvalidTokenError("empty token")
    try:
        payload = jwt.decode(token, secret, algorithms=[algorithm])
    except jwt.PyJWTError as exc:
        raise InvalidTokenError(str(exc)) from exc

    user_id = payload.get("userId")
    email = payload.get("email")
    if not user_id or not email:
        raise InvalidTokenError("missing identity claims")
    return TokenClaims(user_id=str(user_id), email=str(email))
