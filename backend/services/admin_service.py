"""
Admin console service.

Dashboard statistics, the admin roster (managed by the super admin only) and
the long-pending complaint report.
"""

from datetime import timedelta

from loguru import logger
from sqlalchemy.orm import Session

import models.schemas as schemas
import repositories.db_models as db_models
from helpers.time_utils import age_in_days, utc_now
from models.config import settings
from models.exceptions import (
    InsufficientPermissionsException,
    NotLongPendingException,
    SuperAdminProtectedException,
    UserNotFoundException,
)
from repositories.comment_repository import CommentRepository
from repositories.complaint_repository import ComplaintRepository
from repositories.feedback_repository import FeedbackRepository
from repositories.user_repository import UserRepository
from repositories.vote_repository import VoteRepository
from services.complaint_service import ComplaintService
from services.email_service import EmailService
from services.user_service import UserService


def _ensure_super_admin(user: db_models.User) -> None:
    if not user.is_super_admin:
        raise InsufficientPermissionsException("Super admin permissions required")


class AdminService:
    """Service for the admin console."""

    @staticmethod
    def get_stats(db: Session) -> schemas.AdminStats:
        """Dashboard counters computed with aggregate queries."""
        by_status = ComplaintRepository(db).count_by_status()
        return schemas.AdminStats(
            total_complaints=sum(by_status.values()),
            pending=by_status[db_models.ComplaintStatus.PENDING],
            in_progress=by_status[db_models.ComplaintStatus.IN_PROGRESS],
            completed=by_status[db_models.ComplaintStatus.COMPLETED],
            rejected=by_status[db_models.ComplaintStatus.REJECTED],
            total_users=UserRepository(db).count(),
            total_votes=VoteRepository(db).count(),
            total_comments=CommentRepository(db).count(),
            total_feedback=FeedbackRepository(db).count(),
        )

    @staticmethod
    def sync_super_admin(db: Session) -> db_models.User:
        """
        Make sure the configured super admin exists with the right role.

        Creates a placeholder row when the super admin has never signed in;
        it is linked to the identity-provider account on first sign-in.
        """
        repo = UserRepository(db)
        user = repo.get_by_email(settings.SUPER_ADMIN_EMAIL)
        if user is None:
            user = repo.create(
                db_models.User(
                    email=settings.SUPER_ADMIN_EMAIL,
                    role=db_models.UserRole.SUPER_ADMIN,
                )
            )
            logger.info("Created super admin placeholder")
        elif UserService.sync_role(user):
            user = repo.update(user)
            logger.info(f"Restored super admin role on user {user.id}")
        return user

    @classmethod
    def list_admins(
        cls, db: Session, current_user: db_models.User
    ) -> list[db_models.User]:
        _ensure_super_admin(current_user)
        cls.sync_super_admin(db)
        return UserRepository(db).get_admins()

    @classmethod
    def add_admin(
        cls, db: Session, current_user: db_models.User, email: str
    ) -> db_models.User:
        """
        Grant the admin role by email.

        Unknown emails get a placeholder row that is linked on first sign-in.
        """
        _ensure_super_admin(current_user)
        if UserService.is_super_admin_email(email):
            return cls.sync_super_admin(db)

        repo = UserRepository(db)
        user = repo.get_by_email(email)
        if user is None:
            user = repo.create(
                db_models.User(email=email.strip().lower(), role=db_models.UserRole.ADMIN)
            )
        elif user.role != db_models.UserRole.ADMIN:
            user.role = db_models.UserRole.ADMIN
            user = repo.update(user)
        logger.info(f"User {user.id} granted admin by {current_user.id}")
        return user

    @classmethod
    def remove_admin(
        cls, db: Session, current_user: db_models.User, email: str
    ) -> db_models.User:
        """
        Revoke the admin role by email.

        Raises:
            SuperAdminProtectedException: Target is the super admin
            UserNotFoundException: No user with this email
        """
        _ensure_super_admin(current_user)
        if UserService.is_super_admin_email(email):
            raise SuperAdminProtectedException("The super admin cannot be removed")

        repo = UserRepository(db)
        user = repo.get_by_email(email)
        if user is None:
            raise UserNotFoundException(f"No user with email {email}")
        if user.role == db_models.UserRole.ADMIN:
            user.role = db_models.UserRole.USER
            user = repo.update(user)
            logger.info(f"User {user.id} admin role revoked by {current_user.id}")
        return user

    @staticmethod
    def _cutoff():
        return utc_now() - timedelta(days=settings.LONG_PENDING_DAYS)

    @classmethod
    def get_long_pending(cls, db: Session) -> list[schemas.LongPendingComplaint]:
        """Unresolved complaints at least LONG_PENDING_DAYS old, oldest first."""
        complaints = ComplaintRepository(db).get_long_pending(cls._cutoff())
        return [
            schemas.LongPendingComplaint(
                **ComplaintService.to_schema(c).model_dump(),
                age_days=age_in_days(c.created_at),
            )
            for c in complaints
        ]

    @classmethod
    def report_long_pending(
        cls, db: Session, complaint_id: int, admin: db_models.User
    ) -> schemas.ReportResult:
        """
        Escalate a long-pending complaint to the super admin.

        The email is best effort; the complaint is flagged as reported either
        way.

        Raises:
            ComplaintNotFoundException: If complaint not found
            NotLongPendingException: Complaint is completed or too recent
        """
        complaint = ComplaintService.get_or_raise(db, complaint_id)
        age = age_in_days(complaint.created_at)
        if (
            complaint.status == db_models.ComplaintStatus.COMPLETED
            or age < settings.LONG_PENDING_DAYS
        ):
            raise NotLongPendingException(complaint_id, settings.LONG_PENDING_DAYS)

        email_sent = EmailService.send_long_pending_report(
            settings.SUPER_ADMIN_EMAIL,
            complaint.id,
            complaint.title,
            complaint.status.value,
            age,
            admin.email,
        )

        complaint.reported_to_super_admin = True
        complaint.reported_at = utc_now()
        complaint = ComplaintRepository(db).update(complaint)
        logger.info(f"Complaint {complaint_id} reported to super admin by {admin.id}")

        return schemas.ReportResult(
            complaint_id=complaint.id,
            reported_to_super_admin=True,
            reported_at=complaint.reported_at,
            email_sent=email_sent,
        )
