"""
Citizen notifications for complaint lifecycle events.

Subscribed to the event dispatcher; turns events into emails. All handlers
are best effort: a missing complaint or user is logged and skipped, and email
delivery failures are logged by EmailService without raising.
"""

from typing import Any

from loguru import logger
from sqlalchemy.orm import Session

from repositories.complaint_repository import ComplaintRepository
from repositories.user_repository import UserRepository
from services.email_service import EmailService


class NotificationService:
    """Email notifications sent on behalf of complaint events."""

    @staticmethod
    def on_complaint_submitted(db: Session, payload: dict[str, Any]) -> None:
        complaint = ComplaintRepository(db).get_with_owner(payload["complaint_id"])
        if complaint is None:
            logger.warning(
                f"Submission email skipped: complaint {payload['complaint_id']} gone"
            )
            return
        owner = complaint.user
        if not owner.notify_email:
            logger.info(f"Submission email skipped: user {owner.id} opted out")
            return
        EmailService.send_complaint_submitted(
            owner.email, owner.full_name, complaint.id, complaint.title
        )

    @staticmethod
    def on_status_changed(db: Session, payload: dict[str, Any]) -> None:
        """
        Email the owner about a status change.

        The attempt is logged by EmailService whether or not the provider
        accepts the message.
        """
        complaint = ComplaintRepository(db).get_with_owner(payload["complaint_id"])
        if complaint is None:
            logger.warning(
                f"Status email skipped: complaint {payload['complaint_id']} gone"
            )
            return
        owner = complaint.user
        if not owner.notify_email:
            logger.info(f"Status email skipped: user {owner.id} opted out")
            return
        EmailService.send_status_update(
            owner.email,
            owner.full_name,
            complaint.id,
            complaint.title,
            payload["new_status"],
            admin_notes=payload.get("admin_notes"),
        )

    @staticmethod
    def on_user_registered(db: Session, payload: dict[str, Any]) -> None:
        user = UserRepository(db).get_by_id(payload["user_id"])
        if user is None:
            return
        EmailService.send_welcome(user.email, user.full_name)
