import secrets
from typing import Any
from uuid import UUID

import structlog
from pymongo import ReturnDocument
from pymongo.asynchronous.database import AsyncDatabase

from propnet.core.core import Service
from propnet.core.modules.profile.models import Profile
from propnet.core.modules.property.models import (
    DECISION_ACTIONS,
    ApprovalStatus,
    ConsentAgent,
    ConsentDecision,
    ConsentProperty,
    ConsentResult,
    ConsentView,
    OwnerConsentSms,
    Property,
    PropertyDetails,
    SmsStatus,
)
from propnet.core.modules.property.sms import build_owner_consent_sms
from propnet.core.db import PaginationResult, paginate
from propnet.errors import (
    AccessDeniedError,
    ConflictError,
    NotFoundError,
    ServiceUnavailableError,
    UpstreamError,
    ValidationError,
)
from propnet.utils import now

logger = structlog.get_logger(__name__)

# Legacy rows may have no status at all; both count as pending
PENDING_STATES: list[ApprovalStatus | None] = [ApprovalStatus.PENDING, None]


class PropertyService(Service):
    """Manages listings and the one-shot owner consent transition."""

    def __init__(self, database: AsyncDatabase[dict[str, Any]]) -> None:
        super().__init__(database)
        self._collection = database.get_collection("properties")

    async def on_start(self) -> None:
        """Create indexes on startup."""
        await self._collection.create_index([("owner_consent_token", 1)], unique=True)
        await self._collection.create_index([("owner_id", 1), ("created_at", -1)])
        await self._collection.create_index([("approval_status", 1), ("created_at", -1)])

    def _normalize_details(self, details: PropertyDetails) -> PropertyDetails:
        if not details.owner_phone:
            return details
        return details.model_copy(
            update={"owner_phone": self.core.services.profile.normalize_phone(details.owner_phone)}
        )

    async def create_property(self, owner_id: UUID, details: PropertyDetails) -> Property:
        """Create a pending listing with a fresh owner consent token."""
        details = self._normalize_details(details)
        prop = Property(
            **details.model_dump(),
            owner_id=owner_id,
            owner_consent_token=secrets.token_urlsafe(32),
        )
        await self._collection.insert_one(prop.to_mongo())
        logger.info("property_created", property_id=prop.id, owner_id=owner_id)
        return prop

    async def get_property(self, property_id: UUID) -> Property:
        doc = await self._collection.find_one({"_id": property_id})
        if doc is None:
            raise NotFoundError("Property not found")
        return Property.model_validate(doc)

    async def get_owned_property(self, owner_id: UUID, property_id: UUID, action: str = "access") -> Property:
        """Get a listing on behalf of its agent; other agents get AccessDeniedError."""
        prop = await self.get_property(property_id)
        if prop.owner_id != owner_id:
            raise AccessDeniedError(f"You do not have permission to {action} this property.")
        return prop

    async def update_property(self, owner_id: UUID, property_id: UUID, details: PropertyDetails) -> Property:
        """Replace a listing's details and send it back through owner consent.

        The status returns to pending and the consent token is replaced, so a
        link sent for the previous version no longer resolves.
        """
        await self.get_owned_property(owner_id, property_id, "update")
        details = self._normalize_details(details)
        timestamp = now()
        doc = await self._collection.find_one_and_update(
            {"_id": property_id, "owner_id": owner_id},
            {
                "$set": {
                    **details.model_dump(),
                    "approval_status": ApprovalStatus.PENDING,
                    "owner_consent_token": secrets.token_urlsafe(32),
                    "owner_consent_response_at": None,
                    "updated_at": timestamp,
                }
            },
            return_document=ReturnDocument.AFTER,
        )
        if doc is None:
            raise NotFoundError("Property not found")
        logger.info("property_updated", property_id=property_id, owner_id=owner_id)
        return Property.model_validate(doc)

    async def delete_property(self, owner_id: UUID, property_id: UUID) -> None:
        await self.get_owned_property(owner_id, property_id, "delete")
        result = await self._collection.delete_one({"_id": property_id, "owner_id": owner_id})
        if result.deleted_count == 0:
            raise NotFoundError("Property not found")
        logger.info("property_deleted", property_id=property_id, owner_id=owner_id)

    def consent_url(self, prop: Property) -> str:
        return f"{self.core.config.app_base_url.rstrip('/')}/consent/{prop.owner_consent_token}"

    async def send_consent_sms(self, prop: Property, agent_name: str | None, updated: bool = False) -> OwnerConsentSms:
        """Text the consent link to the owner and report what happened.

        Delivery problems are reported in the result, never raised: the
        listing is already stored and the agent can share the link by hand.
        """
        otp = self.core.services.otp
        if not prop.owner_phone:
            return OwnerConsentSms(status=SmsStatus.SKIPPED, error="Owner phone missing or invalid")
        if not otp.sms_configured:
            return OwnerConsentSms(status=SmsStatus.SKIPPED, error="Twilio messaging credentials missing")

        body = build_owner_consent_sms(
            owner_name=prop.owner_name,
            agent_name=agent_name,
            title=prop.title,
            location=prop.location,
            property_type=prop.property_type,
            bhk=prop.bhk,
            size=prop.area,
            size_unit=prop.area_unit,
            price=prop.sale_price,
            listing_type=prop.listing_type,
            consent_url=self.consent_url(prop),
            updated=updated,
        )
        try:
            await otp.send_sms(prop.owner_phone, body)
        except (UpstreamError, ServiceUnavailableError) as e:
            logger.warning("consent_sms_failed", property_id=prop.id, error=str(e))
            return OwnerConsentSms(status=SmsStatus.FAILED, error=str(e))
        logger.info("consent_sms_sent", property_id=prop.id)
        return OwnerConsentSms(status=SmsStatus.SENT)

    async def list_by_owner(self, owner_id: UUID) -> list[Property]:
        """Get the agent's listings, newest first."""
        cursor = self._collection.find({"owner_id": owner_id}).sort("created_at", -1)
        return await Property.list_cursor(cursor)

    async def list_by_status(
        self, status: ApprovalStatus | None = None, limit: int = 50, offset: int = 0
    ) -> PaginationResult[Property]:
        """Get paginated listings, newest first, optionally filtered by approval status."""
        query: dict[str, Any] = {}
        if status == ApprovalStatus.PENDING:
            query = {"approval_status": {"$in": PENDING_STATES}}
        elif status is not None:
            query = {"approval_status": status}
        return await paginate(self._collection, Property, query, limit, offset)

    async def set_approval_status(self, property_id: UUID, status: ApprovalStatus) -> Property:
        """Administrative override of a listing's approval status."""
        if status == ApprovalStatus.PENDING:
            raise ValidationError("Invalid status")
        doc = await self._collection.find_one_and_update(
            {"_id": property_id},
            {"$set": {"approval_status": status, "updated_at": now()}},
            return_document=ReturnDocument.AFTER,
        )
        if doc is None:
            raise NotFoundError("Property not found")
        logger.info("property_status_changed", property_id=property_id, status=status)
        return Property.model_validate(doc)

    async def get_consent(self, consent_token: str) -> ConsentView:
        """Load the listing summary shown to the owner behind a consent link."""
        doc = await self._collection.find_one({"owner_consent_token": consent_token})
        if doc is None:
            raise NotFoundError("Consent link invalid")
        prop = Property.model_validate(doc)

        agent = ConsentAgent()
        try:
            profile: Profile = await self.core.services.profile.get_profile(prop.owner_id)
        except NotFoundError:
            logger.warning("consent_agent_missing", property_id=prop.id, owner_id=prop.owner_id)
        else:
            agent = ConsentAgent(
                id=profile.id,
                name=profile.name,
                agency_name=profile.agency_name,
                phone=profile.phone,
                experience=profile.experience,
                rera_id=profile.rera_id,
            )

        return ConsentView(
            id=prop.id,
            status=prop.effective_status,
            property=ConsentProperty(
                id=prop.id,
                title=prop.title,
                property_type=prop.property_type,
                transaction_type=prop.transaction_type,
                price=prop.sale_price,
                size=prop.area,
                size_unit=prop.area_unit,
                bhk=prop.bhk,
                location=prop.location,
                full_address=prop.full_address,
                description=prop.description,
                listing_type=prop.listing_type,
                commission_terms=prop.commission_terms,
                scope_of_work=prop.scope_of_work,
            ),
            agent=agent,
        )

    async def apply_consent(self, consent_token: str, decision: ConsentDecision) -> ConsentResult:
        """Move a pending listing to approved or rejected, exactly once.

        The pending check and the write are a single conditional update, so
        concurrent decisions on the same token cannot both succeed.

        Raises:
            NotFoundError: Unknown consent token
            ConflictError: Consent was already given or refused; ``action`` holds the stored status
        """
        if decision not in DECISION_ACTIONS:
            raise ValidationError("Invalid consent decision")

        timestamp = now()
        updated = await self._collection.find_one_and_update(
            {"owner_consent_token": consent_token, "approval_status": {"$in": PENDING_STATES}},
            {"$set": {"approval_status": decision, "owner_consent_response_at": timestamp, "updated_at": timestamp}},
            projection={"_id": 1},
            return_document=ReturnDocument.AFTER,
        )

        if updated is None:
            existing = await self._collection.find_one({"owner_consent_token": consent_token}, {"approval_status": 1})
            if existing is None:
                raise NotFoundError("Consent link invalid")
            current = existing.get("approval_status")
            logger.info("consent_conflict", property_id=existing["_id"], status=current, attempted=decision)
            raise ConflictError("Consent already processed", action=current)

        logger.info("consent_applied", property_id=updated["_id"], status=decision)
        return ConsentResult(action=DECISION_ACTIONS[decision])
