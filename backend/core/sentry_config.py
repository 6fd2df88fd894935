"""
Sentry SDK configuration.

Sentry stays disabled unless ``SENTRY_DSN`` is set. Events are scrubbed of
citizen PII (emails, session tokens, webhook signatures) before leaving the
process.
"""

import os
from typing import Any

import sentry_sdk
from sentry_sdk.integrations.fastapi import FastApiIntegration
from sentry_sdk.integrations.loguru import LoguruIntegration
from sentry_sdk.integrations.sqlalchemy import SqlalchemyIntegration
from sentry_sdk.types import Event, Hint

FILTERED = "[Filtered]"
SENSITIVE_HEADERS = {"authorization", "cookie", "svix-signature"}
UNTRACED_PATHS = {"/api/health"}


def _before_send(event: Event, hint: Hint) -> Event | None:
    """Drop emails and credentials from outgoing events."""
    user = event.get("user")
    if user:
        user.pop("email", None)
        user.pop("username", None)
        if "ip_address" in user:
            user["ip_address"] = "{{auto}}"

    request = event.get("request")
    if request and isinstance(request, dict):
        request.pop("cookies", None)
        headers = request.get("headers")
        if isinstance(headers, dict):
            for key in list(headers):
                if key.lower() in SENSITIVE_HEADERS:
                    headers[key] = FILTERED
        # Webhook payloads carry full identity-provider user records
        if str(request.get("url", "")).endswith("/api/webhooks/identity"):
            request.pop("data", None)

    return event


def _traces_sampler(sampling_context: dict[str, Any]) -> float:
    if sampling_context.get("parent_sampled") is True:
        return 1.0

    path = sampling_context.get("asgi_scope", {}).get("path", "")
    if path in UNTRACED_PATHS:
        return 0.0
    if path.startswith("/api/admin") or path.startswith("/api/webhooks"):
        return 0.5
    return float(os.getenv("SENTRY_TRACES_SAMPLE_RATE", "0.2"))


def init_sentry() -> bool:
    """
    Initialize Sentry with FastAPI, SQLAlchemy and loguru integrations.

    Call before the FastAPI app is created.

    Returns:
        True when Sentry was enabled.
    """
    dsn = os.getenv("SENTRY_DSN")
    if not dsn:
        return False

    sentry_sdk.init(
        dsn=dsn,
        environment=os.getenv("ENVIRONMENT", "development"),
        release=os.getenv("SENTRY_RELEASE", "unknown"),
        send_default_pii=False,
        integrations=[
            FastApiIntegration(transaction_style="endpoint"),
            SqlalchemyIntegration(),
            LoguruIntegration(),
        ],
        traces_sampler=_traces_sampler,
        sample_rate=1.0,
        before_send=_before_send,
        attach_stacktrace=True,
        max_breadcrumbs=50,
        ignore_errors=[KeyboardInterrupt, SystemExit],
    )
    return True
