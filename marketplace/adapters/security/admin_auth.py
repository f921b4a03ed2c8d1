# marketplace/adapters/security/admin_auth.py
"""
Admin session tokens.

A token is ``base64url(header).base64url(payload).base64url(signature)``
where the signature is HMAC-SHA256 over ``header.payload`` with the server
secret. The payload must carry ``sub == "admin"`` and, when present, an
``exp`` (epoch seconds) that has not passed yet.
"""

import base64
import hashlib
import hmac
import json
import time
import uuid
from typing import Any, Callable, Dict, Optional

import structlog

from marketplace.core.domain.exceptions import AuthenticationError
from marketplace.core.domain.models import AdminClaims
from marketplace.shared.config import settings

logger = structlog.get_logger()

ADMIN_COOKIE_NAME = "admin_session"
ADMIN_SUBJECT = "admin"


def b64url_encode(raw: bytes) -> str:
    return base64.urlsafe_b64encode(raw).rstrip(b"=").decode("ascii")


def b64url_decode(segment: str) -> bytes:
    padding = "=" * (-len(segment) % 4)
    return base64.urlsafe_b64decode(segment + padding)


def _signature(secret: str, signing_input: str) -> str:
    digest = hmac.new(secret.encode("utf-8"), signing_input.encode("utf-8"), hashlib.sha256).digest()
    return b64url_encode(digest)


def sign_admin_token(
    secret: str,
    ttl_seconds: Optional[int] = settings.ADMIN_SESSION_TTL_SEC,
    *,
    now: Optional[float] = None,
    subject: str = ADMIN_SUBJECT,
    extra: Optional[Dict[str, Any]] = None,
) -> str:
    """
    Issue an HS256 token in the format ``AdminTokenVerifier`` accepts.
    The lifetime defaults to ``ADMIN_SESSION_TTL_SEC``;
    ``ttl_seconds=None`` produces a token without ``exp``.
    """
    issued_at = int(now if now is not None else time.time())
    payload: Dict[str, Any] = {"sub": subject, "iat": issued_at, "jti": str(uuid.uuid4())}
    if ttl_seconds is not None:
        payload["exp"] = issued_at + ttl_seconds
    if extra:
        payload.update(extra)

    header = b64url_encode(json.dumps({"alg": "HS256", "typ": "JWT"}, separators=(",", ":")).encode())
    body = b64url_encode(json.dumps(payload, separators=(",", ":")).encode())
    signing_input = f"{header}.{body}"
    return f"{signing_input}.{_signature(secret, signing_input)}"


class AdminTokenVerifier:
    """
    Verifies admin session tokens against the server-held secret.

    Every structural, cryptographic or expiry failure raises
    ``AuthenticationError``; callers let it propagate to abort the action.
    An empty secret rejects everything.
    """

    def __init__(self, secret: str, clock: Callable[[], float] = time.time):
        self._secret = secret or ""
        self._clock = clock

    def assert_admin(self, token: Optional[str]) -> AdminClaims:
        if not token or not self._secret:
            raise AuthenticationError()

        parts = token.split(".")
        if len(parts) != 3 or not all(parts):
            raise AuthenticationError()
        header, body, signature = parts

        expected = _signature(self._secret, f"{header}.{body}")
        if not hmac.compare_digest(expected.encode("ascii"), signature.encode("utf-8", "replace")):
            logger.warning("admin_token_bad_signature")
            raise AuthenticationError()

        try:
            payload = json.loads(b64url_decode(body).decode("utf-8"))
        except (ValueError, UnicodeDecodeError):
            raise AuthenticationError()
        if not isinstance(payload, dict):
            raise AuthenticationError()

        exp = payload.get("exp")
        if exp is not None:
            if isinstance(exp, bool) or not isinstance(exp, (int, float)):
                raise AuthenticationError()
            if int(self._clock()) >= exp:
                logger.info("admin_token_expired", exp=exp)
                raise AuthenticationError()

        if payload.get("sub") != ADMIN_SUBJECT:
            raise AuthenticationError()

        return AdminClaims(
            sub=payload["sub"],
            exp=int(exp) if exp is not None else None,
            iat=payload.get("iat") if isinstance(payload.get("iat"), int) else None,
            jti=payload.get("jti") if isinstance(payload.get("jti"), str) else None,
        )
