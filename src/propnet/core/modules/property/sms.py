"""Text of the SMS that asks a property owner to review a listing.

The message stays within two SMS segments (320 characters). When it is too
long, parts are given up in this order: the listing type line, the details
line, then a shorter title and location. As a last resort the text is cut.
"""

MAX_SMS_LENGTH = 320
ELLIPSIS = "…"
DETAIL_SEPARATOR = " • "


def truncate(value: str | None, limit: int) -> str | None:
    """Cut ``value`` to ``limit`` characters, the last being an ellipsis."""
    if not value or len(value) <= limit:
        return value
    return value[: limit - 1] + ELLIPSIS


def _format_size(size: float | str) -> str:
    if isinstance(size, float):
        return f"{size:g}"
    return str(size)


def _title_line(title: str | None, location: str | None) -> str:
    line = f'"{title}"'
    if location:
        line += f" at {location}"
    return line


def build_owner_consent_sms(
    *,
    owner_name: str | None = None,
    agent_name: str | None = None,
    title: str | None = None,
    location: str | None = None,
    property_type: str | None = None,
    bhk: int | None = None,
    size: float | str | None = None,
    size_unit: str | None = None,
    price: str | None = None,
    listing_type: str | None = None,
    consent_url: str | None = None,
    updated: bool = False,
) -> str:
    """Compose the owner consent request.

    ``updated`` switches the wording for a listing the agent has edited and
    sent back for approval.
    """
    owner_first_name = owner_name.split()[0] if owner_name and owner_name.strip() else "Hi"
    agent = agent_name or "Your agent"
    property_title = truncate(title or "your property", 60)
    location_text = truncate(location, 40)

    size_text = None
    if size:
        size_text = _format_size(size) + (f" {size_unit}" if size_unit else "")
    details = DETAIL_SEPARATOR.join(
        part for part in (property_type, f"{bhk} BHK" if bhk else None, size_text) if part
    )

    if updated:
        intro = f"{owner_first_name}, {agent} has updated your property listing on PropNet."
        review = f"Please review and approve the changes: {consent_url}" if consent_url else None
    else:
        intro = f"{owner_first_name}, {agent} wants to list your property on PropNet."
        review = f"Review & approve: {consent_url}" if consent_url else None

    # Insertion order is line order
    lines: dict[str, str | None] = {
        "owner": intro,
        "title": _title_line(property_title, location_text),
        "details": truncate(details, 70),
        "price": f"Price: {price or 'Price on request'}",
        "review": review,
        "listing": f"Listing type: {listing_type or 'Listing'}",
    }

    def assemble() -> str:
        return "\n".join(text for text in lines.values() if text)

    body = assemble()
    if len(body) <= MAX_SMS_LENGTH:
        return body

    for key in ("listing", "details"):
        lines.pop(key)
        body = assemble()
        if len(body) <= MAX_SMS_LENGTH:
            return body

    lines["title"] = _title_line(truncate(property_title, 40), truncate(location_text, 25))
    body = assemble()
    if len(body) <= MAX_SMS_LENGTH:
        return body

    return body[: MAX_SMS_LENGTH - 1] + ELLIPSIS
