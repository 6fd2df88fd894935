"""
Complaint service for business logic.

Covers the complaint lifecycle: submission, owner edits, admin triage
(status, visibility, fake flag), deletion and the filtered listing.
Secondary effects (emails, rewards) are published as events after the
primary write is committed.
"""

import math
from typing import Optional

from loguru import logger
from sqlalchemy.orm import Session

import models.schemas as schemas
import repositories.db_models as db_models
from helpers.pagination import MAX_PAGE_SIZE, page_to_offset
from helpers.time_utils import hours_since
from models.config import settings
from models.exceptions import (
    AuthenticationException,
    ComplaintNotFoundException,
    FakeFlagWindowExpiredException,
    InsufficientPermissionsException,
    InvalidComplaintStatusException,
    ValidationException,
)
from repositories.complaint_repository import ComplaintRepository
from services.event_dispatcher import DomainEvent, EventDispatcher


def _ensure_admin(user: Optional[db_models.User]) -> db_models.User:
    if user is None:
        raise AuthenticationException("Authentication required")
    if not user.is_admin:
        raise InsufficientPermissionsException("Admin permissions required")
    return user


def _parse_status(status: db_models.ComplaintStatus | str) -> db_models.ComplaintStatus:
    if isinstance(status, db_models.ComplaintStatus):
        return status
    try:
        return db_models.ComplaintStatus(status)
    except ValueError:
        allowed = ", ".join(s.value for s in db_models.ComplaintStatus)
        raise InvalidComplaintStatusException(
            f"Invalid status '{status}'. Allowed: {allowed}"
        )


class ComplaintService:
    """Service for complaint-related business logic."""

    @staticmethod
    def to_schema(complaint: db_models.Complaint) -> schemas.Complaint:
        author = None
        if complaint.user is not None:
            author = schemas.ComplaintAuthor.model_validate(complaint.user)
        return schemas.Complaint(
            id=complaint.id,
            title=complaint.title,
            description=complaint.description,
            category=complaint.category,
            status=complaint.status,
            location=schemas.Location(
                latitude=complaint.latitude,
                longitude=complaint.longitude,
                address=complaint.address,
            ),
            images=list(complaint.images or []),
            votes=complaint.votes,
            is_fake=complaint.is_fake,
            is_visible=complaint.is_visible,
            admin_notes=complaint.admin_notes,
            reported_to_super_admin=complaint.reported_to_super_admin,
            reported_at=complaint.reported_at,
            user_id=complaint.user_id,
            author=author,
            created_at=complaint.created_at,
            updated_at=complaint.updated_at,
        )

    @staticmethod
    def get_or_raise(db: Session, complaint_id: int) -> db_models.Complaint:
        complaint = ComplaintRepository(db).get_with_owner(complaint_id)
        if not complaint:
            raise ComplaintNotFoundException(complaint_id)
        return complaint

    @staticmethod
    def create_complaint(
        db: Session, data: schemas.ComplaintCreate, user: db_models.User
    ) -> db_models.Complaint:
        """
        Submit a new complaint.

        Args:
            db: Database session
            data: Complaint payload
            user: Submitting user

        Returns:
            The stored complaint (pending, zero votes, visible)

        Raises:
            ValidationException: No image attached
        """
        images = [url.strip() for url in data.images if url and url.strip()]
        if not images:
            raise ValidationException("At least one image is required")

        complaint = db_models.Complaint(
            title=data.title,
            description=data.description,
            category=data.category,
            status=db_models.ComplaintStatus.PENDING,
            latitude=data.location.latitude,
            longitude=data.location.longitude,
            address=data.location.address,
            images=images,
            votes=0,
            is_fake=False,
            is_visible=True,
            user_id=user.id,
        )
        complaint = ComplaintRepository(db).create(complaint)
        logger.info(f"Complaint {complaint.id} submitted by user {user.id}")

        EventDispatcher.publish(
            db,
            DomainEvent.COMPLAINT_SUBMITTED,
            complaint_id=complaint.id,
            user_id=user.id,
        )
        return complaint

    @staticmethod
    def get_complaint(
        db: Session, complaint_id: int, viewer: Optional[db_models.User] = None
    ) -> db_models.Complaint:
        """
        Get a complaint as seen by ``viewer``.

        Hidden complaints only exist for their owner and admins.

        Raises:
            ComplaintNotFoundException: Missing or hidden from the viewer
        """
        complaint = ComplaintService.get_or_raise(db, complaint_id)
        if not complaint.is_visible:
            can_see = viewer is not None and (
                viewer.is_admin or viewer.id == complaint.user_id
            )
            if not can_see:
                raise ComplaintNotFoundException(complaint_id)
        return complaint

    @classmethod
    def list_complaints(
        cls,
        db: Session,
        viewer: Optional[db_models.User],
        page: int = 1,
        limit: int = 10,
        search: Optional[str] = None,
        status: Optional[db_models.ComplaintStatus] = None,
        category: Optional[db_models.ComplaintCategory] = None,
        mine: bool = False,
        public: bool = False,
        admin: bool = False,
    ) -> schemas.ComplaintList:
        """
        List complaints newest first.

        Visibility:
        - public: anyone, visible complaints only
        - admin: admins only, everything
        - otherwise: signed-in users; admins see everything, others see
          visible complaints plus their own

        Raises:
            AuthenticationException: Non-public listing without a session
            InsufficientPermissionsException: admin listing by a non-admin
        """
        page = max(page, 1)
        limit = min(max(limit, 1), MAX_PAGE_SIZE)
        filters: dict = {
            "search": search.strip() if search and search.strip() else None,
            "status": status,
            "category": category,
        }

        if admin:
            _ensure_admin(viewer)
        elif public:
            filters["visible_only"] = True
        elif viewer is None:
            raise AuthenticationException("Authentication required to list complaints")
        elif not viewer.is_admin:
            filters["visible_or_owned_by"] = viewer.id

        if mine:
            if viewer is None:
                raise AuthenticationException("Authentication required")
            filters["owner_id"] = viewer.id

        items, total = ComplaintRepository(db).list_filtered(
            skip=page_to_offset(page, limit), limit=limit, **filters
        )
        return schemas.ComplaintList(
            complaints=[cls.to_schema(c) for c in items],
            pagination=schemas.Pagination(
                total=total,
                page=page,
                limit=limit,
                total_pages=math.ceil(total / limit) if total else 0,
            ),
        )

    @classmethod
    def update_complaint(
        cls,
        db: Session,
        complaint_id: int,
        data: schemas.ComplaintUpdate,
        user: db_models.User,
    ) -> db_models.Complaint:
        """
        Edit a complaint's content as its owner or an admin.

        Raises:
            ComplaintNotFoundException: If complaint not found
            InsufficientPermissionsException: Not owner nor admin
            ValidationException: Edit would leave the complaint without images
        """
        complaint = cls.get_or_raise(db, complaint_id)
        if complaint.user_id != user.id and not user.is_admin:
            raise InsufficientPermissionsException(
                "You can only edit your own complaints"
            )

        changes = data.model_dump(exclude_unset=True, exclude_none=True)
        location = changes.pop("location", None)
        if "images" in changes:
            images = [url.strip() for url in changes["images"] if url and url.strip()]
            if not images:
                raise ValidationException("At least one image is required")
            changes["images"] = images
        for field in ("title", "description"):
            if field in changes:
                if not changes[field].strip():
                    raise ValidationException(f"{field.capitalize()} cannot be empty")
                changes[field] = changes[field].strip()

        for field, value in changes.items():
            setattr(complaint, field, value)
        if location:
            complaint.latitude = location["latitude"]
            complaint.longitude = location["longitude"]
            complaint.address = location.get("address", complaint.address)

        return ComplaintRepository(db).update(complaint)

    @classmethod
    def update_status(
        cls,
        db: Session,
        complaint_id: int,
        new_status: db_models.ComplaintStatus | str,
        admin: db_models.User,
        admin_notes: Optional[str] = None,
    ) -> db_models.Complaint:
        """
        Move a complaint to a new status.

        Publishes a status-change event (owner email) when the status actually
        changes, and a resolution event (owner rewards) when it moves into
        completed.

        Raises:
            AuthenticationException / InsufficientPermissionsException: Not an admin
            InvalidComplaintStatusException: Unknown status value
            ComplaintNotFoundException: If complaint not found
        """
        _ensure_admin(admin)
        status = _parse_status(new_status)
        complaint = cls.get_or_raise(db, complaint_id)
        old_status = complaint.status

        complaint.status = status
        if admin_notes is not None:
            complaint.admin_notes = admin_notes
        complaint = ComplaintRepository(db).update(complaint)

        if old_status == status:
            return complaint

        logger.info(
            f"Complaint {complaint.id} status {old_status.value} -> {status.value} "
            f"by admin {admin.id}"
        )
        owner_id = complaint.user_id
        EventDispatcher.publish(
            db,
            DomainEvent.COMPLAINT_STATUS_CHANGED,
            complaint_id=complaint.id,
            user_id=owner_id,
            old_status=old_status.value,
            new_status=status.value,
            admin_notes=complaint.admin_notes,
        )
        if status == db_models.ComplaintStatus.COMPLETED:
            EventDispatcher.publish(
                db,
                DomainEvent.COMPLAINT_RESOLVED,
                complaint_id=complaint_id,
                user_id=owner_id,
            )
        return complaint

    @classmethod
    def toggle_fake(
        cls, db: Session, complaint_id: int, admin: db_models.User
    ) -> db_models.Complaint:
        """
        Flip the fake flag, only within the window after submission.

        Raises:
            FakeFlagWindowExpiredException: Window has passed
        """
        _ensure_admin(admin)
        complaint = cls.get_or_raise(db, complaint_id)
        window = settings.FAKE_FLAG_WINDOW_HOURS
        if hours_since(complaint.created_at) > window:
            raise FakeFlagWindowExpiredException(window)

        complaint.is_fake = not complaint.is_fake
        logger.info(
            f"Complaint {complaint.id} fake={complaint.is_fake} by admin {admin.id}"
        )
        return ComplaintRepository(db).update(complaint)

    @classmethod
    def toggle_visibility(
        cls, db: Session, complaint_id: int, admin: db_models.User
    ) -> db_models.Complaint:
        _ensure_admin(admin)
        complaint = cls.get_or_raise(db, complaint_id)
        complaint.is_visible = not complaint.is_visible
        logger.info(
            f"Complaint {complaint.id} visible={complaint.is_visible} "
            f"by admin {admin.id}"
        )
        return ComplaintRepository(db).update(complaint)

    @classmethod
    def admin_update(
        cls,
        db: Session,
        complaint_id: int,
        data: schemas.ComplaintAdminUpdate,
        admin: db_models.User,
    ) -> db_models.Complaint:
        """
        Apply a console PATCH: flags and notes first, then the status.

        Each field follows the same rules as its dedicated operation.
        """
        _ensure_admin(admin)
        complaint = cls.get_or_raise(db, complaint_id)

        if data.is_fake is not None and data.is_fake != complaint.is_fake:
            complaint = cls.toggle_fake(db, complaint_id, admin)
        if data.is_visible is not None and data.is_visible != complaint.is_visible:
            complaint = cls.toggle_visibility(db, complaint_id, admin)

        if data.status is not None:
            return cls.update_status(
                db, complaint_id, data.status, admin, admin_notes=data.admin_notes
            )
        if data.admin_notes is not None:
            complaint.admin_notes = data.admin_notes
            complaint = ComplaintRepository(db).update(complaint)
        return complaint

    @classmethod
    def delete_complaint(
        cls, db: Session, complaint_id: int, user: db_models.User
    ) -> None:
        """
        Delete a complaint with its votes, comments and feedback.

        Raises:
            ComplaintNotFoundException: If complaint not found
            InsufficientPermissionsException: Not owner nor admin
        """
        complaint = cls.get_or_raise(db, complaint_id)
        if complaint.user_id != user.id and not user.is_admin:
            raise InsufficientPermissionsException(
                "You can only delete your own complaints"
            )
        ComplaintRepository(db).delete(complaint)
        logger.info(f"Complaint {complaint_id} deleted by user {user.id}")
