"""Twilio: one-time codes through Verify and notification texts through Messaging."""

from typing import Any

import httpx
import structlog
from pymongo.asynchronous.database import AsyncDatabase

from propnet.core.core import Service
from propnet.errors import PhoneVerificationError, ServiceUnavailableError, UpstreamError

logger = structlog.get_logger(__name__)

VERIFY_BASE_URL = "https://verify.twilio.com/v2"
MESSAGES_BASE_URL = "https://api.twilio.com/2010-04-01"
TIMEOUT_SECONDS = 10.0


def _error_message(resp: httpx.Response) -> str:
    try:
        return str(resp.json().get("message", resp.text))
    except ValueError:
        return resp.text


class OtpService(Service):
    """Sends and checks SMS verification codes and sends plain text messages. Stores nothing locally."""

    def __init__(self, database: AsyncDatabase[dict[str, Any]]) -> None:
        super().__init__(database)

    def _make_client(self) -> httpx.AsyncClient:
        config = self.core.config
        if not (config.twilio_account_sid and config.twilio_auth_token and config.twilio_verify_service_sid):
            raise ServiceUnavailableError("Phone verification is not configured")
        return httpx.AsyncClient(
            base_url=f"{VERIFY_BASE_URL}/Services/{config.twilio_verify_service_sid}",
            auth=(config.twilio_account_sid, config.twilio_auth_token),
            timeout=TIMEOUT_SECONDS,
        )

    @property
    def sms_configured(self) -> bool:
        """Whether credentials and a sender (messaging service or number) are set."""
        config = self.core.config
        return bool(
            config.twilio_account_sid
            and config.twilio_auth_token
            and (config.twilio_messaging_service_sid or config.twilio_sms_from)
        )

    def _make_messaging_client(self) -> httpx.AsyncClient:
        config = self.core.config
        if not (self.sms_configured and config.twilio_account_sid and config.twilio_auth_token):
            raise ServiceUnavailableError("SMS delivery is not configured")
        return httpx.AsyncClient(
            base_url=f"{MESSAGES_BASE_URL}/Accounts/{config.twilio_account_sid}",
            auth=(config.twilio_account_sid, config.twilio_auth_token),
            timeout=TIMEOUT_SECONDS,
        )

    async def send_code(self, phone: str) -> str:
        """Send a verification code by SMS and return the provider's verification status."""
        async with self._make_client() as client:
            resp = await client.post("/Verifications", data={"To": phone, "Channel": "sms"})
        data = self._handle_response(resp, "send_code")
        return str(data.get("status", "pending"))

    async def check_code(self, phone: str, code: str) -> bool:
        """Return True when the code is approved for the phone."""
        async with self._make_client() as client:
            resp = await client.post("/VerificationCheck", data={"To": phone, "Code": code})
        # Twilio answers 404 once a verification has expired or was already used
        if resp.status_code == 404:
            return False
        data = self._handle_response(resp, "check_code")
        return data.get("status") == "approved"

    async def send_sms(self, to: str, body: str) -> str:
        """Send a text message and return the provider's message SID.

        Raises:
            ServiceUnavailableError: No credentials or sender configured
            UpstreamError: Transport failure or the provider refused the message
        """
        config = self.core.config
        data = {"To": to, "Body": body}
        if config.twilio_messaging_service_sid:
            data["MessagingServiceSid"] = config.twilio_messaging_service_sid
        elif config.twilio_sms_from:
            data["From"] = config.twilio_sms_from

        try:
            async with self._make_messaging_client() as client:
                resp = await client.post("/Messages.json", data=data)
        except httpx.HTTPError as e:
            logger.warning("sms_transport_error", error=str(e))
            raise UpstreamError("SMS delivery failed") from e

        if resp.status_code >= 400:
            message = _error_message(resp)
            logger.warning("sms_provider_error", status_code=resp.status_code, error=message)
            raise UpstreamError(f"SMS delivery failed: {message}")
        sid = str(resp.json().get("sid", ""))
        logger.info("sms_sent", sid=sid)
        return sid

    def _handle_response(self, resp: httpx.Response, context: str) -> dict[str, Any]:
        if resp.status_code >= 400:
            message = _error_message(resp)
            logger.warning("otp_provider_error", context=context, status_code=resp.status_code, error=message)
            raise PhoneVerificationError(f"Phone verification failed: {message}")
        data: dict[str, Any] = resp.json()
        return data
