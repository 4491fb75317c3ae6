from __future__ import annotations

import math
from typing import Any

import jwt
from pydantic import BaseModel

from muusmart.core.exceptions import TokenDecodeError


class TokenClaims(BaseModel):
    subject: str | None = None
    exp: float
    raw: dict[str, Any]


def decode_token(token: str) -> TokenClaims:
    """Read the payload of a header.payload.signature token without verifying the signature.

    Raises TokenDecodeError for anything that is not a three-segment token with a numeric exp.
    """
    if not isinstance(token, str):
        raise TokenDecodeError("token is not a string")
    segments = token.split(".")
    if len(segments) != 3 or not all(segments):
        raise TokenDecodeError("token must have three non-empty segments")

    try:
        payload = jwt.decode(
            token,
            options={"verify_signature": False, "verify_exp": False},
        )
    except jwt.PyJWTError as exc:
        raise TokenDecodeError(f"token payload not decodable: {exc}") from exc

    if not isinstance(payload, dict):
        raise TokenDecodeError("token payload is not an object")

    exp = payload.get("exp")
    # bool is an int subclass; "exp": true is not an expiry
    if isinstance(exp, bool) or not isinstance(exp, (int, float)):
        raise TokenDecodeError("token has no numeric exp")
    try:
        exp = float(exp)
    except OverflowError as exc:
        raise TokenDecodeError("token exp out of range") from exc
    if not math.isfinite(exp):
        raise TokenDecodeError("token exp is not finite")

    subject = payload.get("sub") or payload.get("username")
    return TokenClaims(
        subject=str(subject) if subject is not None else None,
        exp=exp,
        raw=payload,
    )


def is_expired(claims: TokenClaims, now: float, leeway: float = 0.0) -> bool:
    return now * 1000 >= (claims.exp - leeway) * 1000


def expires_in(claims: TokenClaims, now: float) -> float:
    return max(0.0, claims.exp - now)
