"""
Feedback service: ratings of resolved complaints.
"""

from typing import Optional

from loguru import logger
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

import models.schemas as schemas
import repositories.db_models as db_models
from models.exceptions import (
    DuplicateFeedbackException,
    FeedbackNotAllowedException,
)
from repositories.feedback_repository import FeedbackRepository
from services.complaint_service import ComplaintService


class FeedbackService:
    """Service for feedback on completed complaints."""

    @staticmethod
    def to_schema(feedback: db_models.Feedback) -> schemas.Feedback:
        return schemas.Feedback(
            id=feedback.id,
            complaint_id=feedback.complaint_id,
            user_id=feedback.user_id,
            rating=feedback.rating,
            comment=feedback.comment,
            author_name=feedback.user.full_name if feedback.user else "Unknown",
            created_at=feedback.created_at,
        )

    @staticmethod
    def submit_feedback(
        db: Session,
        user: db_models.User,
        data: schemas.FeedbackCreate,
    ) -> db_models.Feedback:
        """
        Rate a completed complaint, once per user.

        Raises:
            ComplaintNotFoundException: Missing or hidden from the user
            FeedbackNotAllowedException: Complaint is not completed
            DuplicateFeedbackException: User already rated it
        """
        complaint = ComplaintService.get_complaint(db, data.complaint_id, user)
        if complaint.status != db_models.ComplaintStatus.COMPLETED:
            raise FeedbackNotAllowedException()

        repo = FeedbackRepository(db)
        if repo.get_by_complaint_and_user(data.complaint_id, user.id):
            raise DuplicateFeedbackException()

        try:
            feedback = repo.create(
                db_models.Feedback(
                    complaint_id=data.complaint_id,
                    user_id=user.id,
                    rating=data.rating,
                    comment=data.comment.strip(),
                )
            )
        except IntegrityError:
            db.rollback()
            raise DuplicateFeedbackException()

        logger.info(
            f"User {user.id} rated complaint {data.complaint_id} {data.rating}/5"
        )
        return feedback

    @classmethod
    def list_feedback(
        cls,
        db: Session,
        user: db_models.User,
        complaint_id: Optional[int] = None,
    ) -> list[schemas.Feedback]:
        """Feedback for a complaint, or the caller's own when none is given."""
        repo = FeedbackRepository(db)
        if complaint_id is not None:
            ComplaintService.get_complaint(db, complaint_id, user)
            entries = repo.list_for(complaint_id=complaint_id)
        else:
            entries = repo.list_for(user_id=user.id)
        return [cls.to_schema(f) for f in entries]
