"""
Email gateway client for invoice delivery.

Sends invoice emails, reminders and payment receipts through an HTTP
gateway. Each request body is signed with HMAC-SHA256 so the gateway can
verify it came from this ledger.
"""

import hashlib
import hmac
import json
import logging

import requests

logger = logging.getLogger(__name__)


class EmailGatewayError(Exception):
    """Raised when email gateway request fails."""


class EmailGatewayClient:
    """Send plain text emails via the signed HTTP gateway."""

    def __init__(self, gateway_url: str, api_key: str, hmac_secret: str, timeout: float = 10.0):
        """
        Initialize with gateway credentials.

        Args:
            gateway_url: Full URL to the email gateway endpoint
            api_key: API key for X-API-Key header
            hmac_secret: Secret for HMAC-SHA256 signature
            timeout: Seconds to wait for the gateway

        Raises:
            ValueError: If any credential is empty
        """
        if not gateway_url:
            raise ValueError("gateway_url is required")
        if not api_key:
            raise ValueError("api_key is required")
        if not hmac_secret:
            raise ValueError("hmac_secret is required")

        self.gateway_url = gateway_url
        self.api_key = api_key
        self.hmac_secret = hmac_secret
        self.timeout = timeout

    @classmethod
    def from_config(cls, config) -> "EmailGatewayClient":
        """Build from LedgerConfig email_* settings."""
        return cls(config.email_gateway_url, config.email_api_key, config.email_hmac_secret)

    def _signature(self, body: str) -> str:
        return hmac.new(
            self.hmac_secret.encode("utf-8"),
            body.encode("utf-8"),
            hashlib.sha256,
        ).hexdigest()

    def _post(self, payload: dict) -> None:
        """
        Sign payload and POST it to the gateway.

        Raises:
            EmailGatewayError: On connection failure, a non-JSON reply, or a
                reply without success=true
        """
        body = json.dumps(payload, separators=(",", ":"))
        headers = {
            "Content-Type": "application/json",
            "X-API-Key": self.api_key,
            "X-Signature": self._signature(body),
        }

        try:
            response = requests.post(self.gateway_url, data=body, headers=headers, timeout=self.timeout)
        except (requests.exceptions.RequestException, ConnectionError) as e:
            logger.error(f"Email gateway connection failed: {e}")
            raise EmailGatewayError(f"Connection failed: {e}")

        try:
            reply = response.json()
        except json.JSONDecodeError:
            logger.error(f"Email gateway returned invalid JSON (HTTP {response.status_code})")
            raise EmailGatewayError("Invalid response from gateway")

        if response.status_code != 200 or not reply.get("success"):
            error_msg = reply.get("message", "Unknown error")
            logger.error(f"Email gateway rejected message: {error_msg}")
            raise EmailGatewayError(f"Gateway error: {error_msg}")

    def send_email(
        self,
        to: str,
        subject: str,
        body: str,
        reply_to: str | None = None,
    ) -> None:
        """
        Send a plain text email.

        Args:
            to: Recipient email address
            subject: Email subject line
            body: Plain text email body
            reply_to: Address client replies should go to (the company email)

        Raises:
            ValueError: If recipient is empty
            EmailGatewayError: On gateway failure
        """
        if not to:
            raise ValueError("Recipient email address is required")

        payload = {
            "type": "custom",
            "email": to,
            "subject": subject,
            "body": body,
            "sender": "system",
        }
        if reply_to:
            payload["reply_to"] = reply_to

        self._post(payload)
        logger.info(f"Email sent to {to}: {subject}")
