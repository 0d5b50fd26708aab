import re

from propnet.errors import ValidationError

PIN_RE = re.compile(r"^[0-9]{4,6}$")


def normalize_phone(raw: str, default_country_code: str = "+91") -> str:
    """Normalize a phone number to E.164.

    Numbers entered with a leading ``+`` keep their country code; anything else
    gets ``default_country_code`` after leading zeros are dropped.

    Raises:
        ValidationError: If fewer than 7 digits remain
    """
    value = raw.strip()
    digits = re.sub(r"\D", "", value)
    if len(digits) < 7:
        raise ValidationError("Invalid phone number")

    if value.startswith("+"):
        return f"+{digits}"

    country_digits = default_country_code.lstrip("+")
    digits = digits.lstrip("0")
    # Ten-digit local numbers already prefixed with the country code, e.g. 919876543210
    if len(digits) == len(country_digits) + 10 and digits.startswith(country_digits):
        return f"+{digits}"
    return f"+{country_digits}{digits}"


def validate_pin(pin: str) -> None:
    """Validate a login PIN: 4 to 6 digits.

    Raises:
        ValidationError: If the PIN doesn't match
    """
    if not PIN_RE.fullmatch(pin):
        raise ValidationError("PIN must be 4-6 digits")
