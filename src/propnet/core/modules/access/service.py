from uuid import UUID

from propnet.core.core import Service
from propnet.core.modules.profile.models import Profile
from propnet.core.modules.session.models import Identity
from propnet.errors import AccessDeniedError, AuthenticationError, NotFoundError


class AccessService(Service):
    def ensure_identity(self, session_token: str | None) -> Identity:
        """Resolve the session cookie, raise AuthenticationError if it is absent or invalid."""
        identity = self.core.services.session.resolve(session_token)
        if identity is None:
            raise AuthenticationError("Not authenticated")
        return identity

    def ensure_subject_id(self, session_token: str | None) -> UUID:
        """Resolve the session cookie to a profile ID without loading the profile."""
        identity = self.ensure_identity(session_token)
        try:
            return UUID(identity.subject_id)
        except ValueError as e:
            raise AuthenticationError("Invalid session") from e

    async def ensure_authenticated(self, session_token: str | None) -> Profile:
        """Ensure the caller is signed in and their profile still exists."""
        profile_id = self.ensure_subject_id(session_token)
        try:
            return await self.core.services.profile.get_profile(profile_id)
        except NotFoundError as e:
            raise AuthenticationError("Invalid session") from e

    async def ensure_admin(self, admin_token: str | None) -> str:
        """Ensure the caller holds an admin session, return the admin username."""
        username = await self.core.services.admin.get_admin_username(admin_token)
        if username is None:
            raise AccessDeniedError("Admin privileges required")
        return username
