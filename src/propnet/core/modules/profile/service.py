from typing import Any
from uuid import UUID

import bcrypt
import structlog
from pymongo import ReturnDocument
from pymongo.asynchronous.database import AsyncDatabase
from pymongo.errors import DuplicateKeyError

from propnet.core.core import Service
from propnet.core.modules.profile.models import (
    AccountStatus,
    LoginResult,
    PhoneCheck,
    Profile,
    ProfileDetails,
    ProfileUpdate,
)
from propnet.core.modules.profile.validators import PIN_RE, normalize_phone, validate_pin
from propnet.core.db import PaginationResult, paginate
from propnet.errors import AuthenticationError, NotFoundError, ValidationError
from propnet.utils import now

logger = structlog.get_logger(__name__)


def hash_pin(pin: str) -> str:
    return bcrypt.hashpw(pin.encode("utf-8"), bcrypt.gensalt(rounds=12)).decode("utf-8")


def login_redirect(profile: Profile) -> str:
    """Pick the page a broker lands on after signing in."""
    if not profile.profile_complete:
        return "/auth/complete-profile"
    if profile.status == AccountStatus.APPROVED:
        return "/dashboard"
    return "/auth/approval-pending"


class ProfileService(Service):
    """Manages broker accounts and PIN credentials."""

    def __init__(self, database: AsyncDatabase[dict[str, Any]]) -> None:
        super().__init__(database)
        self._collection = database.get_collection("profiles")

    async def on_start(self) -> None:
        """Create indexes on startup."""
        await self._collection.create_index([("phone", 1)], unique=True)
        await self._collection.create_index([("status", 1), ("created_at", -1)])

    def normalize_phone(self, raw: str) -> str:
        return normalize_phone(raw, self.core.config.default_country_code)

    async def get_profile(self, profile_id: UUID) -> Profile:
        """Get profile by ID."""
        doc = await self._collection.find_one({"_id": profile_id})
        if doc is None:
            raise NotFoundError(f"Profile '{profile_id}' not found")
        return Profile.model_validate(doc)

    async def find_by_phone(self, phone: str) -> Profile | None:
        """Find profile by raw or normalized phone number."""
        doc = await self._collection.find_one({"phone": self.normalize_phone(phone)})
        if doc is None:
            return None
        return Profile.model_validate(doc)

    async def check_phone(self, phone: str) -> PhoneCheck:
        profile = await self.find_by_phone(phone)
        return PhoneCheck(exists=profile is not None, has_pin=profile is not None and profile.pin_hash is not None)

    async def ensure_profile(self, phone: str) -> Profile:
        """Get the profile for a verified phone, creating an incomplete one on first sign-in."""
        existing = await self.find_by_phone(phone)
        if existing is not None:
            return existing

        profile = Profile(phone=self.normalize_phone(phone))
        try:
            await self._collection.insert_one(profile.to_mongo())
        except DuplicateKeyError:
            # Created concurrently by another request for the same phone
            existing = await self.find_by_phone(phone)
            if existing is None:
                raise
            return existing
        logger.info("profile_created", profile_id=profile.id)
        return profile

    async def setup_pin(self, phone: str, pin: str) -> Profile:
        """Set the first PIN for a profile.

        The write only matches while no PIN is stored, so concurrent first-time
        setups cannot overwrite each other.
        """
        profile = await self.find_by_phone(phone)
        if profile is None:
            raise NotFoundError("Profile not found")
        if profile.pin_hash is not None:
            raise ValidationError("PIN already exists. Please use login.")

        validate_pin(pin)
        doc = await self._collection.find_one_and_update(
            {"_id": profile.id, "pin_hash": None},
            {"$set": {"pin_hash": hash_pin(pin), "updated_at": now()}},
            return_document=ReturnDocument.AFTER,
        )
        if doc is None:
            logger.info("pin_setup_conflict", profile_id=profile.id)
            raise ValidationError("PIN already exists. Please use login.")
        return Profile.model_validate(doc)

    async def verify_pin(self, phone: str, pin: str) -> LoginResult:
        """Check phone and PIN, returning the profile and its landing page."""
        profile = await self.find_by_phone(phone)
        if profile is None:
            raise AuthenticationError("Invalid phone number or PIN")
        if profile.pin_hash is None:
            raise ValidationError("PIN not set. Please complete signup.")
        # Stored PINs are 4-6 digits; bcrypt refuses input over 72 bytes
        if not PIN_RE.fullmatch(pin):
            raise AuthenticationError("Invalid PIN")
        if not bcrypt.checkpw(pin.encode("utf-8"), profile.pin_hash.encode("utf-8")):
            raise AuthenticationError("Invalid PIN")
        return LoginResult(profile=profile, redirect_to=login_redirect(profile))

    async def reset_pin(self, phone: str, new_pin: str) -> Profile:
        """Replace the PIN of a registered phone. The caller must have verified the phone."""
        profile = await self.find_by_phone(phone)
        if profile is None:
            raise NotFoundError("Phone number not registered")

        validate_pin(new_pin)
        return await self._set_pin(profile.id, new_pin)

    async def complete_profile(self, profile_id: UUID, details: ProfileDetails) -> Profile:
        """Store onboarding details and mark the profile complete."""
        doc = await self._collection.find_one_and_update(
            {"_id": profile_id},
            {"$set": {**details.model_dump(), "profile_complete": True, "updated_at": now()}},
            return_document=ReturnDocument.AFTER,
        )
        if doc is None:
            raise NotFoundError(f"Profile '{profile_id}' not found")
        return Profile.model_validate(doc)

    async def update_profile(self, profile_id: UUID, update: ProfileUpdate) -> Profile:
        """Change the fields set in ``update``; the others keep their stored values."""
        changes = update.model_dump(exclude_unset=True)
        doc = await self._collection.find_one_and_update(
            {"_id": profile_id},
            {"$set": {**changes, "updated_at": now()}},
            return_document=ReturnDocument.AFTER,
        )
        if doc is None:
            raise NotFoundError(f"Profile '{profile_id}' not found")
        logger.info("profile_updated", profile_id=profile_id, fields=sorted(changes))
        return Profile.model_validate(doc)

    async def list_by_status(
        self, status: AccountStatus | None = None, limit: int = 50, offset: int = 0
    ) -> PaginationResult[Profile]:
        """Get paginated profiles, newest first, optionally filtered by review status."""
        query: dict[str, Any] = {} if status is None else {"status": status}
        return await paginate(self._collection, Profile, query, limit, offset)

    async def set_status(self, profile_id: UUID, status: AccountStatus) -> Profile:
        """Approve or reject a broker account."""
        if status == AccountStatus.PENDING:
            raise ValidationError("Invalid status")
        doc = await self._collection.find_one_and_update(
            {"_id": profile_id},
            {"$set": {"status": status, "updated_at": now()}},
            return_document=ReturnDocument.AFTER,
        )
        if doc is None:
            raise NotFoundError("User not found")
        logger.info("profile_status_changed", profile_id=profile_id, status=status)
        return Profile.model_validate(doc)

    async def _set_pin(self, profile_id: UUID, pin: str) -> Profile:
        doc = await self._collection.find_one_and_update(
            {"_id": profile_id},
            {"$set": {"pin_hash": hash_pin(pin), "updated_at": now()}},
            return_document=ReturnDocument.AFTER,
        )
        if doc is None:
            raise NotFoundError(f"Profile '{profile_id}' not found")
        return Profile.model_validate(doc)
