from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any
from uuid import UUID

import structlog
from pymongo import AsyncMongoClient

from propnet.config import Config
from propnet.core.core import Core
from propnet.core.modules.geocode.models import GeocodeResponse, PlaceSuggestion
from propnet.core.modules.profile.models import AccountStatus, PhoneCheck, ProfileDetails, ProfileUpdate, ProfileView
from propnet.core.modules.property.models import (
    ApprovalStatus,
    ConsentResult,
    ConsentView,
    PropertyDetails,
    PropertySubmission,
    PropertyView,
)
from propnet.core.modules.session.models import AdminToken, SessionGrant
from propnet.core.modules.task.models import Task
from propnet.core.db import PaginationResult
from propnet.errors import PhoneVerificationError

logger = structlog.get_logger(__name__)


class App:
    """Facade for all application operations, checks the caller before delegating to Core."""

    def __init__(self, config: Config, mongo_client: AsyncMongoClient[dict[str, Any]] | None = None) -> None:
        self._core = Core(config, mongo_client)

    @asynccontextmanager
    async def lifespan(self) -> AsyncGenerator[None]:
        """Application lifespan management - delegates to Core."""
        async with self._core.lifespan():
            yield

    @property
    def config(self) -> Config:
        return self._core.config

    # === Sign-in ===
    async def check_phone(self, phone: str) -> PhoneCheck:
        """Tell the client whether to sign up, set a PIN, or log in."""
        return await self._core.services.profile.check_phone(phone)

    async def send_otp(self, phone: str) -> str:
        """Send a verification code to the phone."""
        normalized = self._core.services.profile.normalize_phone(phone)
        return await self._core.services.otp.send_code(normalized)

    async def verify_otp(self, phone: str, code: str) -> ProfileView:
        """Check the code and return the (possibly new) profile for the phone."""
        normalized = self._core.services.profile.normalize_phone(phone)
        if not await self._core.services.otp.check_code(normalized, code):
            raise PhoneVerificationError("Invalid verification code")
        profile = await self._core.services.profile.ensure_profile(normalized)
        return ProfileView.from_domain(profile)

    async def setup_pin(self, phone: str, pin: str, keep_logged_in: bool) -> SessionGrant:
        """Set the first PIN and sign the broker in."""
        profile = await self._core.services.profile.setup_pin(phone, pin)
        logger.info("pin_setup", profile_id=profile.id)
        return self._core.services.session.issue_session(profile, keep_logged_in)

    async def verify_pin(self, phone: str, pin: str, keep_logged_in: bool) -> tuple[SessionGrant, str]:
        """Sign in with phone and PIN; returns the session and the landing page."""
        result = await self._core.services.profile.verify_pin(phone, pin)
        grant = self._core.services.session.issue_session(result.profile, keep_logged_in)
        logger.info("login", profile_id=result.profile.id)
        return grant, result.redirect_to

    async def reset_pin(self, phone: str, code: str, new_pin: str) -> None:
        """Replace a forgotten PIN after checking a verification code."""
        normalized = self._core.services.profile.normalize_phone(phone)
        if not await self._core.services.otp.check_code(normalized, code):
            raise PhoneVerificationError("Invalid verification code")
        profile = await self._core.services.profile.reset_pin(normalized, new_pin)
        logger.info("pin_reset", profile_id=profile.id)

    # === Profile ===
    async def get_current_profile(self, session_token: str | None) -> ProfileView:
        profile = await self._core.services.access.ensure_authenticated(session_token)
        return ProfileView.from_domain(profile)

    async def complete_profile(self, session_token: str | None, details: ProfileDetails) -> ProfileView:
        profile = await self._core.services.access.ensure_authenticated(session_token)
        updated = await self._core.services.profile.complete_profile(profile.id, details)
        return ProfileView.from_domain(updated)

    async def update_profile(self, session_token: str | None, update: ProfileUpdate) -> ProfileView:
        profile = await self._core.services.access.ensure_authenticated(session_token)
        updated = await self._core.services.profile.update_profile(profile.id, update)
        return ProfileView.from_domain(updated)

    # === Listings ===
    async def get_my_properties(self, session_token: str | None) -> list[PropertyView]:
        profile = await self._core.services.access.ensure_authenticated(session_token)
        properties = await self._core.services.property.list_by_owner(profile.id)
        return [PropertyView.from_domain(p) for p in properties]

    async def create_property(self, session_token: str | None, details: PropertyDetails) -> PropertySubmission:
        """Store a listing and text the consent link to its owner."""
        profile = await self._core.services.access.ensure_authenticated(session_token)
        prop = await self._core.services.property.create_property(profile.id, details)
        sms = await self._core.services.property.send_consent_sms(prop, profile.name)
        return PropertySubmission(
            property=PropertyView.from_domain(prop), owner_consent_token=prop.owner_consent_token, owner_consent_sms=sms
        )

    async def get_property(self, session_token: str | None, property_id: UUID) -> PropertyView:
        user_id = self._core.services.access.ensure_subject_id(session_token)
        prop = await self._core.services.property.get_owned_property(user_id, property_id)
        return PropertyView.from_domain(prop)

    async def update_property(
        self, session_token: str | None, property_id: UUID, details: PropertyDetails
    ) -> PropertySubmission:
        """Edit an own listing; it goes back to pending and the owner gets a new consent link."""
        profile = await self._core.services.access.ensure_authenticated(session_token)
        prop = await self._core.services.property.update_property(profile.id, property_id, details)
        sms = await self._core.services.property.send_consent_sms(prop, profile.name, updated=True)
        return PropertySubmission(
            property=PropertyView.from_domain(prop), owner_consent_token=prop.owner_consent_token, owner_consent_sms=sms
        )

    async def delete_property(self, session_token: str | None, property_id: UUID) -> None:
        profile = await self._core.services.access.ensure_authenticated(session_token)
        await self._core.services.property.delete_property(profile.id, property_id)

    # === Owner consent (public, authorized by the token itself) ===
    async def get_consent(self, consent_token: str) -> ConsentView:
        return await self._core.services.property.get_consent(consent_token)

    async def approve_consent(self, consent_token: str) -> ConsentResult:
        return await self._core.services.property.apply_consent(consent_token, ApprovalStatus.APPROVED)

    async def reject_consent(self, consent_token: str) -> ConsentResult:
        return await self._core.services.property.apply_consent(consent_token, ApprovalStatus.REJECTED)

    # === Tasks ===
    async def get_tasks(self, session_token: str | None) -> list[Task]:
        user_id = self._core.services.access.ensure_subject_id(session_token)
        return await self._core.services.task.list_tasks(user_id)

    async def create_task(self, session_token: str | None, task_text: str) -> Task:
        profile = await self._core.services.access.ensure_authenticated(session_token)
        return await self._core.services.task.create_task(profile.id, task_text)

    async def update_task_status(self, session_token: str | None, task_id: UUID, status: bool) -> Task:
        profile = await self._core.services.access.ensure_authenticated(session_token)
        return await self._core.services.task.set_status(profile.id, task_id, status)

    # === Places ===
    async def geocode(self, session_token: str | None, address: str) -> GeocodeResponse:
        self._core.services.access.ensure_identity(session_token)
        return await self._core.services.geocode.geocode(address)

    async def autocomplete(self, session_token: str | None, text: str) -> list[PlaceSuggestion]:
        self._core.services.access.ensure_identity(session_token)
        return await self._core.services.geocode.autocomplete(text)

    # === Admin portal ===
    async def admin_login(self, username: str, password: str) -> AdminToken:
        return await self._core.services.admin.login(username, password)

    async def admin_logout(self, admin_token: str | None) -> None:
        await self._core.services.admin.logout(admin_token)

    async def get_admin_username(self, admin_token: str | None) -> str | None:
        return await self._core.services.admin.get_admin_username(admin_token)

    async def admin_list_users(
        self, admin_token: str | None, status: AccountStatus | None, limit: int, offset: int
    ) -> PaginationResult[ProfileView]:
        await self._core.services.access.ensure_admin(admin_token)
        page = await self._core.services.profile.list_by_status(status, limit, offset)
        return PaginationResult(
            items=[ProfileView.from_domain(p) for p in page.items], total=page.total, limit=limit, offset=offset
        )

    async def admin_set_user_status(self, admin_token: str | None, profile_id: UUID, status: AccountStatus) -> ProfileView:
        await self._core.services.access.ensure_admin(admin_token)
        profile = await self._core.services.profile.set_status(profile_id, status)
        return ProfileView.from_domain(profile)

    async def admin_list_properties(
        self, admin_token: str | None, status: ApprovalStatus | None, limit: int, offset: int
    ) -> PaginationResult[PropertyView]:
        await self._core.services.access.ensure_admin(admin_token)
        page = await self._core.services.property.list_by_status(status, limit, offset)
        return PaginationResult(
            items=[PropertyView.from_domain(p) for p in page.items], total=page.total, limit=limit, offset=offset
        )

    async def admin_set_property_status(
        self, admin_token: str | None, property_id: UUID, status: ApprovalStatus
    ) -> PropertyView:
        await self._core.services.access.ensure_admin(admin_token)
        prop = await self._core.services.property.set_approval_status(property_id, status)
        return PropertyView.from_domain(prop)
