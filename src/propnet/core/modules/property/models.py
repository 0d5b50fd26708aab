"""Property listings and the owner consent workflow."""

from datetime import datetime
from enum import StrEnum
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, Field

from propnet.core.db import MongoModel
from propnet.utils import now


class ApprovalStatus(StrEnum):
    """Consent/review state of a listing. PENDING is initial, the others are terminal."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


ConsentDecision = Literal[ApprovalStatus.APPROVED, ApprovalStatus.REJECTED]

DECISION_ACTIONS: dict[ApprovalStatus, str] = {
    ApprovalStatus.APPROVED: "approve",
    ApprovalStatus.REJECTED: "reject",
}


class PropertyDetails(BaseModel):
    """Listing fields supplied by the agent."""

    title: str = Field(..., min_length=1, description="Listing title")
    property_type: str | None = Field(None, description="Apartment, villa, plot, ...")
    transaction_type: str | None = Field(None, description="Sale or rent")
    sale_price: str | None = None
    area: float | None = Field(None, ge=0)
    area_unit: str | None = None
    bhk: int | None = Field(None, ge=0)
    location: str | None = None
    full_address: str | None = None
    description: str | None = None
    listing_type: str | None = None
    commission_terms: str | None = None
    scope_of_work: list[str] = Field(default_factory=list)
    owner_name: str | None = None
    owner_phone: str | None = None
    latitude: float | None = Field(None, ge=-90, le=90)
    longitude: float | None = Field(None, ge=-180, le=180)


class Property(PropertyDetails, MongoModel):
    """Listing stored in the properties collection.

    Indexed on owner_consent_token - unique, owner_id, (approval_status, created_at).
    """

    owner_id: UUID  # Listing agent's profile
    owner_consent_token: str
    approval_status: ApprovalStatus | None = ApprovalStatus.PENDING  # None on legacy rows, read as pending
    owner_consent_response_at: datetime | None = None
    created_at: datetime = Field(default_factory=now)
    updated_at: datetime = Field(default_factory=now)

    @property
    def effective_status(self) -> ApprovalStatus:
        return self.approval_status or ApprovalStatus.PENDING


class PropertyView(PropertyDetails):
    """Listing as returned to its agent and to administrators."""

    id: UUID
    owner_id: UUID
    approval_status: ApprovalStatus
    owner_consent_response_at: datetime | None = None
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_domain(cls, prop: Property) -> "PropertyView":
        data = prop.model_dump(exclude={"owner_consent_token", "approval_status"})
        return cls(**data, approval_status=prop.effective_status)


class SmsStatus(StrEnum):
    SENT = "sent"
    FAILED = "failed"
    SKIPPED = "skipped"  # No owner phone or SMS delivery not configured


class OwnerConsentSms(BaseModel):
    """Outcome of texting the consent link to the owner."""

    status: SmsStatus
    error: str | None = None


class PropertySubmission(BaseModel):
    """Response to creating or editing a listing.

    The consent token is shown to the agent so the link can be shared by hand
    when the SMS was not delivered.
    """

    property: PropertyView
    owner_consent_token: str
    owner_consent_sms: OwnerConsentSms


class ConsentAgent(BaseModel):
    """Public profile of the listing agent shown on the consent page."""

    id: UUID | None = None
    name: str | None = None
    agency_name: str | None = None
    phone: str | None = None
    experience: str | None = None
    rera_id: str | None = None


class ConsentProperty(BaseModel):
    id: UUID
    title: str
    property_type: str | None = None
    transaction_type: str | None = None
    price: str | None = None
    size: float | None = None
    size_unit: str | None = None
    bhk: int | None = None
    location: str | None = None
    full_address: str | None = None
    description: str | None = None
    listing_type: str | None = None
    commission_terms: str | None = None
    scope_of_work: list[str] = Field(default_factory=list)


class ConsentView(BaseModel):
    """What the property owner sees before approving or rejecting."""

    id: UUID
    status: ApprovalStatus
    property: ConsentProperty
    agent: ConsentAgent


class ConsentResult(BaseModel):
    """Successful consent transition."""

    success: bool = True
    action: str = Field(..., description="approve or reject")
