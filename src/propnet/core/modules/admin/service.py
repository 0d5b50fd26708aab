import secrets
from typing import Any

import bcrypt
import structlog
from pymongo.asynchronous.database import AsyncDatabase

from propnet.core.core import Service
from propnet.core.modules.admin.models import ADMIN_SESSION_TTL, AdminSession
from propnet.core.modules.session.models import AdminToken
from propnet.errors import AuthenticationError, ServiceUnavailableError
from propnet.utils import now

logger = structlog.get_logger(__name__)

BCRYPT_MAX_BYTES = 72


class AdminService(Service):
    """Administrator login with sessions persisted in MongoDB."""

    def __init__(self, database: AsyncDatabase[dict[str, Any]]) -> None:
        super().__init__(database)
        self._collection = database.get_collection("admin_sessions")

    async def on_start(self) -> None:
        """Create indexes on startup."""
        await self._collection.create_index([("auth_token", 1)], unique=True)
        # TTL index for automatic session cleanup
        await self._collection.create_index(
            [("created_at", 1)], expireAfterSeconds=int(ADMIN_SESSION_TTL.total_seconds())
        )
        if not self.core.config.admin_password_hash:
            logger.warning("admin_login_disabled", reason="admin_password_hash not configured")

    def verify_credentials(self, username: str, password: str) -> bool:
        config = self.core.config
        if not config.admin_password_hash:
            raise ServiceUnavailableError("Admin login is not configured")
        if username != config.admin_username or len(password.encode("utf-8")) > BCRYPT_MAX_BYTES:
            return False
        return bcrypt.checkpw(password.encode("utf-8"), config.admin_password_hash.encode("utf-8"))

    async def login(self, username: str, password: str) -> AdminToken:
        if not self.verify_credentials(username, password):
            logger.info("admin_login_failed", username=username)
            raise AuthenticationError("Invalid credentials")

        auth_token = AdminToken(secrets.token_urlsafe(32))
        await self._collection.insert_one(AdminSession(username=username, auth_token=auth_token).to_mongo())
        logger.info("admin_login", username=username)
        return auth_token

    async def get_admin_username(self, auth_token: str | None) -> str | None:
        """Return the username behind an admin session token, None when unknown or expired."""
        if not auth_token:
            return None
        doc = await self._collection.find_one({"auth_token": auth_token})
        if doc is None:
            return None
        session = AdminSession.model_validate(doc)
        # The TTL monitor runs about once a minute, so check age explicitly as well
        if now() - session.created_at > ADMIN_SESSION_TTL:
            return None
        return session.username

    async def logout(self, auth_token: str | None) -> None:
        if auth_token:
            await self._collection.delete_one({"auth_token": auth_token})
