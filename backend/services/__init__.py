"""
Services layer for business logic.

Importing the package wires the default event subscribers (rewards and
email notifications) into the dispatcher.
"""

from .event_dispatcher import DomainEvent, EventDispatcher
from .email_service import EmailService
from .notification_service import NotificationService
from .rewards_service import RewardsService
from .user_service import UserService
from .complaint_service import ComplaintService
from .vote_service import VoteService
from .comment_service import CommentService
from .feedback_service import FeedbackService
from .admin_service import AdminService
from .upload_service import UploadService
from .webhook_service import WebhookService


def register_default_subscribers() -> None:
    """Subscribe rewards bookkeeping and emails to lifecycle events."""
    EventDispatcher.subscribe(
        DomainEvent.COMPLAINT_SUBMITTED, NotificationService.on_complaint_submitted
    )
    EventDispatcher.subscribe(
        DomainEvent.COMPLAINT_SUBMITTED, RewardsService.on_complaint_submitted
    )
    EventDispatcher.subscribe(
        DomainEvent.COMPLAINT_STATUS_CHANGED, NotificationService.on_status_changed
    )
    EventDispatcher.subscribe(
        DomainEvent.COMPLAINT_RESOLVED, RewardsService.on_complaint_resolved
    )
    EventDispatcher.subscribe(DomainEvent.VOTE_RECEIVED, RewardsService.on_vote_received)
    EventDispatcher.subscribe(DomainEvent.COMMENT_ADDED, RewardsService.on_comment_added)
    EventDispatcher.subscribe(
        DomainEvent.USER_REGISTERED, NotificationService.on_user_registered
    )


register_default_subscribers()

__all__ = [
    "AdminService",
    "CommentService",
    "ComplaintService",
    "DomainEvent",
    "EmailService",
    "EventDispatcher",
    "FeedbackService",
    "NotificationService",
    "RewardsService",
    "UploadService",
    "UserService",
    "VoteService",
    "WebhookService",
    "register_default_subscribers",
]
