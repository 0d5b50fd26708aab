"""Tests for the owner consent SMS text."""

from propnet.core.modules.property.sms import MAX_SMS_LENGTH, build_owner_consent_sms, truncate

CONSENT_URL = "https://propnet.live/consent/" + "t" * 43
LONG_TITLE = "Spacious sea-facing 3BHK apartment with private terrace garden in Bandra West"
LONG_LOCATION = "Carter Road, Bandra West, Mumbai, Maharashtra 400050"


class TestTruncate:
    def test_short_value_unchanged(self):
        assert truncate("Baner", 10) == "Baner"

    def test_long_value_ends_with_ellipsis(self):
        assert truncate("abcdefghij", 5) == "abcd…"
        assert len(truncate("abcdefghij", 5) or "") == 5

    def test_empty_values(self):
        assert truncate(None, 5) is None
        assert truncate("", 5) == ""


class TestBuildOwnerConsentSms:
    def test_full_message(self):
        body = build_owner_consent_sms(
            owner_name="Meera Joshi",
            agent_name="Ravi Kumar",
            title="2BHK near Aundh",
            location="Aundh, Pune",
            property_type="Apartment",
            bhk=2,
            size=950.0,
            size_unit="sq.ft",
            price="85 L",
            listing_type="exclusive",
            consent_url=CONSENT_URL,
        )

        assert body.split("\n") == [
            "Meera, Ravi Kumar wants to list your property on PropNet.",
            '"2BHK near Aundh" at Aundh, Pune',
            "Apartment • 2 BHK • 950 sq.ft",
            "Price: 85 L",
            f"Review & approve: {CONSENT_URL}",
            "Listing type: exclusive",
        ]

    def test_defaults_for_missing_fields(self):
        body = build_owner_consent_sms()

        assert body.split("\n") == [
            "Hi, Your agent wants to list your property on PropNet.",
            '"your property"',
            "Price: Price on request",
            "Listing type: Listing",
        ]

    def test_updated_listing_wording(self):
        body = build_owner_consent_sms(
            owner_name="Meera", agent_name="Ravi", title="Villa", consent_url=CONSENT_URL, updated=True
        )

        lines = body.split("\n")
        assert lines[0] == "Meera, Ravi has updated your property listing on PropNet."
        assert f"Please review and approve the changes: {CONSENT_URL}" in lines

    def test_title_and_location_capped(self):
        body = build_owner_consent_sms(title=LONG_TITLE, location=LONG_LOCATION)
        assert f'"{LONG_TITLE[:59]}…" at {LONG_LOCATION[:39]}…' in body.split("\n")

    def test_listing_type_dropped_first(self):
        """Test that an oversized message loses the listing type line and keeps the details."""
        body = build_owner_consent_sms(
            owner_name="Meera",
            agent_name="Ravi Kumar",
            title="2BHK near Aundh",
            property_type="Apartment",
            bhk=2,
            price="85 L",
            listing_type="x" * 250,
            consent_url=CONSENT_URL,
        )

        assert len(body) <= MAX_SMS_LENGTH
        assert "Listing type" not in body
        assert "Apartment • 2 BHK" in body
        assert body.endswith(CONSENT_URL)

    def test_title_shortened_after_dropping_lines(self):
        """Test that the title and location are shortened once optional lines are gone."""
        price = "p" * 70
        body = build_owner_consent_sms(
            owner_name="Asha",
            agent_name="Ravi Kumar",
            title=LONG_TITLE,
            location=LONG_LOCATION,
            property_type="Apartment",
            bhk=3,
            price=price,
            listing_type="exclusive",
            consent_url=CONSENT_URL,
        )

        assert len(body) <= MAX_SMS_LENGTH
        assert body.split("\n") == [
            "Asha, Ravi Kumar wants to list your property on PropNet.",
            f'"{LONG_TITLE[:39]}…" at {LONG_LOCATION[:24]}…',
            f"Price: {price}",
            f"Review & approve: {CONSENT_URL}",
        ]

    def test_hard_cut_as_last_resort(self):
        body = build_owner_consent_sms(title=LONG_TITLE, price="p" * 400, consent_url=CONSENT_URL)

        assert len(body) == MAX_SMS_LENGTH
        assert body.endswith("…")
        assert body.startswith("Hi, Your agent wants to list your property on PropNet.")
