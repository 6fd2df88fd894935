"""
Feedback repository for database operations.
"""

from typing import List, Optional

from sqlalchemy.orm import Session, joinedload

import repositories.db_models as db_models
from .base import BaseRepository


class FeedbackRepository(BaseRepository[db_models.Feedback]):
    """Repository for Feedback entity database operations."""

    def __init__(self, db: Session):
        super().__init__(db_models.Feedback, db)

    def get_by_complaint_and_user(
        self, complaint_id: int, user_id: int
    ) -> Optional[db_models.Feedback]:
        return (
            self.db.query(db_models.Feedback)
            .filter(
                db_models.Feedback.complaint_id == complaint_id,
                db_models.Feedback.user_id == user_id,
            )
            .first()
        )

    def list_for(
        self, complaint_id: Optional[int] = None, user_id: Optional[int] = None
    ) -> List[db_models.Feedback]:
        """
        List feedback newest first, for a complaint or by a user.

        Args:
            complaint_id: Restrict to one complaint
            user_id: Restrict to one author

        Returns:
            List of feedback entries with authors loaded
        """
        query = self.db.query(db_models.Feedback).options(
            joinedload(db_models.Feedback.user)
        )
        if complaint_id is not None:
            query = query.filter(db_models.Feedback.complaint_id == complaint_id)
        if user_id is not None:
            query = query.filter(db_models.Feedback.user_id == user_id)
        return query.order_by(
            db_models.Feedback.created_at.desc(), db_models.Feedback.id.desc()
        ).all()
