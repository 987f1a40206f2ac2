"""
OAuth ``state`` tokens (CSRF protection for the install redirect).

Tokens are compact JWS strings signed with HMAC-SHA256::

    base64url(header) . base64url(payload) . base64url(signature)

The payload only carries ``iat`` / ``exp``; nothing is stored server side,
so a token stays replayable until it expires.
"""

from __future__ import annotations

import hashlib
import hmac
import json
import time
from base64 import urlsafe_b64decode, urlsafe_b64encode
from typing import Any, Dict, Optional

from connectors.errors import (
    ConfigurationError,
    ExpiredStateError,
    InvalidSignatureError,
    MalformedStateError,
)

STATE_TTL_SECONDS = 600
_ALGORITHM = "HS256"
_HEADER = {"alg": _ALGORITHM, "typ": "JWT"}
# Issued tokens are ~150 chars; anything far longer is rejected before decoding.
MAX_STATE_LENGTH = 512


def _b64encode(raw: bytes) -> str:
    return urlsafe_b64encode(raw).rstrip(b"=").decode("ascii")


def _b64decode(segment: str) -> bytes:
    padded = segment + "=" * (-len(segment) % 4)
    return urlsafe_b64decode(padded.encode("ascii"))


def _sign(signing_input: str, secret: str) -> str:
    digest = hmac.new(secret.encode(), signing_input.encode("ascii"), hashlib.sha256).digest()
    return _b64encode(digest)


def _decode_segment(segment: str) -> Dict[str, Any]:
    try:
        value = json.loads(_b64decode(segment))
    except (ValueError, UnicodeError, RecursionError) as exc:
        raise MalformedStateError(detail=f"undecodable segment: {exc}") from exc
    if not isinstance(value, dict):
        raise MalformedStateError(detail="segment is not a JSON object")
    return value


def issue_state(
    secret: str,
    ttl_seconds: int = STATE_TTL_SECONDS,
    *,
    now: Optional[float] = None,
) -> str:
    """Create a signed state token that expires ``ttl_seconds`` from now."""
    if not secret:
        raise ConfigurationError(detail="state signing secret is empty")

    issued_at = int(time.time() if now is None else now)
    payload = {"iat": issued_at, "exp": issued_at + ttl_seconds}

    header_segment = _b64encode(json.dumps(_HEADER, separators=(",", ":")).encode())
    payload_segment = _b64encode(json.dumps(payload, separators=(",", ":")).encode())
    signing_input = f"{header_segment}.{payload_segment}"
    return f"{signing_input}.{_sign(signing_input, secret)}"


def verify_state(
    token: Optional[str],
    secret: str,
    *,
    now: Optional[float] = None,
) -> Dict[str, Any]:
    """
    Verify a state token and return its payload.

    Raises
    ------
    MalformedStateError     token cannot be parsed
    InvalidSignatureError   wrong algorithm or signature mismatch
    ExpiredStateError       ``now >= exp`` (no clock-skew leeway)
    """
    if not secret:
        raise ConfigurationError(detail="state signing secret is empty")
    if not token:
        raise MalformedStateError(detail="missing state")
    if len(token) > MAX_STATE_LENGTH:
        raise MalformedStateError(detail="state too long")

    parts = token.split(".")
    if len(parts) != 3:
        raise MalformedStateError(detail="expected three segments")
    header_segment, payload_segment, signature = parts

    header = _decode_segment(header_segment)
    payload = _decode_segment(payload_segment)

    exp = payload.get("exp")
    if not isinstance(exp, int) or isinstance(exp, bool):
        raise MalformedStateError(detail="missing or non-integer exp")

    if header.get("alg") != _ALGORITHM:
        raise InvalidSignatureError(detail=f"unexpected algorithm {header.get('alg')!r}")

    try:
        signing_input = f"{header_segment}.{payload_segment}"
        expected = _sign(signing_input, secret)
    except UnicodeError as exc:
        raise MalformedStateError(detail="non-ascii segment") from exc
    if not hmac.compare_digest(signature.encode(), expected.encode()):
        raise InvalidSignatureError()

    current = time.time() if now is None else now
    if current >= exp:
        raise ExpiredStateError()

    return payload
