from datetime import datetime
from enum import StrEnum
from uuid import UUID

from pydantic import BaseModel, Field

from propnet.core.db import MongoModel
from propnet.utils import now


class AccountStatus(StrEnum):
    """Admin review state of a broker account."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class Profile(MongoModel):
    """Broker account.

    Indexed on phone - unique.
    """

    phone: str  # E.164
    pin_hash: str | None = None  # bcrypt hash, None until the PIN is set up
    name: str | None = None
    email: str | None = None
    agency_name: str | None = None
    rera_id: str | None = None
    city: str | None = None
    experience: str | None = None
    bio: str | None = None
    website: str | None = None
    area_of_expertise: list[str] = Field(default_factory=list)
    working_regions: list[str] = Field(default_factory=list)
    status: AccountStatus = AccountStatus.PENDING
    profile_complete: bool = False
    created_at: datetime = Field(default_factory=now)
    updated_at: datetime = Field(default_factory=now)


class ProfileView(BaseModel):
    """Broker account information (API representation)."""

    id: UUID = Field(..., description="Profile ID")
    phone: str = Field(..., description="Phone number in E.164 format")
    name: str | None = Field(None, description="Display name")
    email: str | None = None
    agency_name: str | None = None
    rera_id: str | None = Field(None, description="Real estate regulator registration ID")
    city: str | None = None
    experience: str | None = None
    bio: str | None = None
    website: str | None = None
    area_of_expertise: list[str] = Field(default_factory=list)
    working_regions: list[str] = Field(default_factory=list)
    status: AccountStatus = Field(..., description="Admin review state")
    profile_complete: bool = Field(..., description="Whether onboarding details were submitted")
    has_pin: bool = Field(..., description="Whether a login PIN is set")
    created_at: datetime

    @classmethod
    def from_domain(cls, profile: Profile) -> "ProfileView":
        """Create view model from domain model."""
        return cls(
            id=profile.id,
            phone=profile.phone,
            name=profile.name,
            email=profile.email,
            agency_name=profile.agency_name,
            rera_id=profile.rera_id,
            city=profile.city,
            experience=profile.experience,
            bio=profile.bio,
            website=profile.website,
            area_of_expertise=profile.area_of_expertise,
            working_regions=profile.working_regions,
            status=profile.status,
            profile_complete=profile.profile_complete,
            has_pin=profile.pin_hash is not None,
            created_at=profile.created_at,
        )


class ProfileDetails(BaseModel):
    """Onboarding details submitted when completing a profile."""

    name: str = Field(..., min_length=1)
    email: str | None = None
    agency_name: str | None = None
    rera_id: str | None = None
    city: str | None = None
    experience: str | None = None
    bio: str | None = None
    website: str | None = None
    area_of_expertise: list[str] = Field(default_factory=list)
    working_regions: list[str] = Field(default_factory=list)


class PhoneCheck(BaseModel):
    exists: bool
    has_pin: bool


class LoginResult(BaseModel):
    """Outcome of a PIN login: the profile and where the client should go next."""

    profile: Profile
    redirect_to: str


class ProfileUpdate(BaseModel):
    """Profile edit. Only the fields present in the request change."""

    name: str | None = Field(None, min_length=1)
    email: str | None = None
    agency_name: str | None = None
    rera_id: str | None = None
    city: str | None = None
    experience: str | None = None
    bio: str | None = None
    website: str | None = None
    area_of_expertise: list[str] = Field(default_factory=list)
    working_regions: list[str] = Field(default_factory=list)
