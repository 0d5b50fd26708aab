"""Signed, time-limited session credentials.

Credentials are HS256 JWTs with the payload ``{sub, phone, iat, exp}``. They
are self-contained: nothing is stored server-side, so a credential stays valid
until it expires even after logout. Logout only clears the client cookie.
"""

import base64
from datetime import datetime, timedelta
from typing import Any

import jwt

from propnet.core.modules.session.models import SessionToken
from propnet.utils import now

ALGORITHM = "HS256"


class InvalidCredentialError(Exception):
    """Raised when a credential is malformed, tampered with, or expired."""


def is_canonical_signature(token: str) -> bool:
    """Check that the signature segment is unpadded base64url in its one canonical spelling.

    A 32-byte signature leaves two unused bits in its last character. Only the
    spelling with those bits clear is accepted.
    """
    signature = token.rpartition(".")[2]
    try:
        raw = base64.urlsafe_b64decode(signature + "=" * (-len(signature) % 4))
    except ValueError:
        return False
    return base64.urlsafe_b64encode(raw).rstrip(b"=").decode("ascii") == signature


class CredentialCodec:
    """Issues and verifies session credentials with a server-held symmetric key."""

    def __init__(self, secret_key: str) -> None:
        if not secret_key:
            raise ValueError("Session secret key must not be empty")
        self._secret_key = secret_key

    def issue(self, subject_id: str, phone: str, ttl: timedelta, issued_at: datetime | None = None) -> SessionToken:
        """Sign a credential for ``subject_id`` valid for ``ttl`` from ``issued_at`` (default: now)."""
        issued_at = issued_at or now()
        payload = {
            "sub": subject_id,
            "phone": phone,
            "iat": int(issued_at.timestamp()),
            "exp": int((issued_at + ttl).timestamp()),
        }
        return SessionToken(jwt.encode(payload, self._secret_key, algorithm=ALGORITHM))

    def verify(self, token: str) -> dict[str, Any]:
        """Return the credential payload or raise InvalidCredentialError.

        Only the signature, structure and expiry are checked.
        """
        if not is_canonical_signature(token):
            raise InvalidCredentialError("Invalid credential: non-canonical signature encoding")
        try:
            payload: dict[str, Any] = jwt.decode(
                token,
                self._secret_key,
                algorithms=[ALGORITHM],
                options={"verify_aud": False, "verify_iss": False},
            )
        except jwt.ExpiredSignatureError as e:
            raise InvalidCredentialError("Credential expired") from e
        except jwt.InvalidTokenError as e:
            raise InvalidCredentialError(f"Invalid credential: {e}") from e
        return payload
