"""
Identity-provider webhook handling.

Keeps the local user table in step with the identity provider's
``user.created``, ``user.updated`` and ``user.deleted`` events.
"""

from typing import Any

from loguru import logger
from sqlalchemy.orm import Session

import models.schemas as schemas
from models.exceptions import ValidationException
from services.user_service import UserService


def primary_email(data: dict[str, Any]) -> str | None:
    """
    Pick the primary email address from an identity-provider user record.

    Falls back to the first address when no primary id is set.
    """
    addresses = data.get("email_addresses") or []
    primary_id = data.get("primary_email_address_id")
    for address in addresses:
        if primary_id and address.get("id") == primary_id:
            return address.get("email_address")
    if addresses:
        return addresses[0].get("email_address")
    return None


class WebhookService:
    """Dispatches verified identity webhook events."""

    @classmethod
    def handle_event(cls, db: Session, event: dict[str, Any]) -> schemas.WebhookAck:
        event_type = str(event.get("type") or "")
        data = event.get("data") or {}
        if not isinstance(data, dict):
            raise ValidationException("Webhook data must be an object")

        if event_type in ("user.created", "user.updated"):
            return cls._upsert_user(db, event_type, data)
        if event_type == "user.deleted":
            external_id = data.get("id")
            if not external_id:
                raise ValidationException("Webhook user id is missing")
            found = UserService.deactivate_by_external_id(db, str(external_id))
            return schemas.WebhookAck(
                event_type=event_type, handled=found, detail={"deactivated": found}
            )

        logger.info(f"Ignoring identity webhook event '{event_type}'")
        return schemas.WebhookAck(event_type=event_type, handled=False)

    @staticmethod
    def _upsert_user(
        db: Session, event_type: str, data: dict[str, Any]
    ) -> schemas.WebhookAck:
        external_id = data.get("id")
        email = primary_email(data)
        if not external_id:
            raise ValidationException("Webhook user id is missing")
        if not email:
            raise ValidationException("No primary email address on user")

        user, created = UserService.upsert_from_identity(
            db,
            external_id=str(external_id),
            email=email,
            first_name=data.get("first_name") or "",
            last_name=data.get("last_name") or "",
        )
        return schemas.WebhookAck(
            event_type=event_type,
            handled=True,
            detail={"user_id": user.id, "created": created},
        )
