from typing import Any

import structlog
from pymongo.asynchronous.database import AsyncDatabase

from propnet.core.core import Service
from propnet.core.modules.profile.models import Profile
from propnet.core.modules.session.codec import CredentialCodec, InvalidCredentialError
from propnet.core.modules.session.models import LONG_SESSION_TTL, SHORT_SESSION_TTL, Identity, SessionGrant

logger = structlog.get_logger(__name__)


class SessionService(Service):
    """Issues session credentials and resolves them back into identities.

    Stateless: there is no session collection, verification only needs the key.
    """

    def __init__(self, database: AsyncDatabase[dict[str, Any]]) -> None:
        super().__init__(database)
        self._codec: CredentialCodec | None = None

    @property
    def codec(self) -> CredentialCodec:
        if self._codec is None:
            self._codec = CredentialCodec(self.core.config.secret_key)
        return self._codec

    def issue_session(self, profile: Profile, keep_logged_in: bool = True) -> SessionGrant:
        """Sign a credential for the profile, valid for 30 days or 1 day."""
        ttl = LONG_SESSION_TTL if keep_logged_in else SHORT_SESSION_TTL
        token = self.codec.issue(str(profile.id), profile.phone, ttl)
        return SessionGrant(token=token, max_age=int(ttl.total_seconds()))

    def resolve(self, token: str | None) -> Identity | None:
        """Resolve a session cookie value into an identity.

        Absent, expired, tampered and malformed credentials all resolve to None.
        """
        if not token:
            return None

        try:
            payload = self.codec.verify(token)
        except InvalidCredentialError as e:
            logger.debug("session_rejected", reason=str(e))
            return None

        # Credentials from older releases carry the subject under "id"
        subject_id = payload.get("sub") or payload.get("id")
        if not subject_id:
            logger.debug("session_rejected", reason="missing subject")
            return None
        return Identity(subject_id=str(subject_id), phone=str(payload.get("phone", "")))
