"""
Verification of signed identity-provider webhooks.

The provider signs deliveries with the Svix scheme; the ``svix`` library
checks the signature and the timestamp tolerance and returns the parsed
payload.
"""

import json
from typing import Any

from svix.webhooks import Webhook, WebhookVerificationError

from models.exceptions import ValidationException, WebhookSignatureException

REQUIRED_HEADERS = ("svix-id", "svix-timestamp", "svix-signature")


def verify_webhook(
    secret: str, headers: dict[str, str | None], body: bytes
) -> Any:
    """
    Verify a webhook request and return its decoded JSON payload.

    Raises:
        WebhookSignatureException: Secret unset or invalid, missing headers,
            stale timestamp or no matching signature
        ValidationException: Signed body is not JSON
    """
    if not secret:
        raise WebhookSignatureException("Webhook secret is not configured")

    missing = [name for name in REQUIRED_HEADERS if not headers.get(name)]
    if missing:
        raise WebhookSignatureException(
            f"Missing webhook headers: {', '.join(missing)}"
        )

    try:
        webhook = Webhook(secret)
    except ValueError as e:
        raise WebhookSignatureException("Webhook secret is not valid base64") from e

    try:
        return webhook.verify(body, {name: str(headers[name]) for name in REQUIRED_HEADERS})
    except json.JSONDecodeError as e:
        raise ValidationException("Webhook body is not valid JSON") from e
    except (WebhookVerificationError, ValueError) as e:
        raise WebhookSignatureException(f"Invalid webhook signature: {e}") from e
