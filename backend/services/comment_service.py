"""
Comment service for business logic.
"""

from typing import Optional

from sqlalchemy.orm import Session

import models.schemas as schemas
import repositories.db_models as db_models
from models.exceptions import ValidationException
from repositories.comment_repository import CommentRepository
from services.complaint_service import ComplaintService
from services.event_dispatcher import DomainEvent, EventDispatcher


class CommentService:
    """Service for comment-related business logic."""

    @staticmethod
    def to_schema(comment: db_models.Comment) -> schemas.Comment:
        return schemas.Comment(
            id=comment.id,
            complaint_id=comment.complaint_id,
            user_id=comment.user_id,
            content=comment.content,
            author_name=comment.user.full_name if comment.user else "Unknown",
            created_at=comment.created_at,
        )

    @staticmethod
    def add_comment(
        db: Session, complaint_id: int, user: db_models.User, content: str
    ) -> db_models.Comment:
        """
        Append a comment to a complaint.

        Args:
            db: Database session
            complaint_id: Complaint ID
            user: Author
            content: Comment text

        Returns:
            Created comment

        Raises:
            ValidationException: Empty content
            ComplaintNotFoundException: Missing or hidden from the author
        """
        text = (content or "").strip()
        if not text:
            raise ValidationException("Comment content is required")
        ComplaintService.get_complaint(db, complaint_id, user)

        comment = CommentRepository(db).create(
            db_models.Comment(complaint_id=complaint_id, user_id=user.id, content=text)
        )
        comment_id = comment.id
        EventDispatcher.publish(
            db,
            DomainEvent.COMMENT_ADDED,
            complaint_id=complaint_id,
            comment_id=comment_id,
            user_id=user.id,
        )
        return comment

    @classmethod
    def list_comments(
        cls,
        db: Session,
        complaint_id: int,
        viewer: Optional[db_models.User] = None,
    ) -> list[schemas.Comment]:
        """All comments on a complaint the viewer can see, newest first."""
        ComplaintService.get_complaint(db, complaint_id, viewer)
        return [
            cls.to_schema(c) for c in CommentRepository(db).get_for_complaint(complaint_id)
        ]
