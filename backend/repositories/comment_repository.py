"""
Comment repository for database operations.
"""

from typing import List

from sqlalchemy.orm import Session, joinedload

import repositories.db_models as db_models
from .base import BaseRepository


class CommentRepository(BaseRepository[db_models.Comment]):
    """Repository for Comment entity database operations."""

    def __init__(self, db: Session):
        super().__init__(db_models.Comment, db)

    def get_for_complaint(self, complaint_id: int) -> List[db_models.Comment]:
        """
        Get every comment on a complaint, newest first, with authors loaded.

        Args:
            complaint_id: Complaint ID

        Returns:
            List of comments
        """
        return (
            self.db.query(db_models.Comment)
            .options(joinedload(db_models.Comment.user))
            .filter(db_models.Comment.complaint_id == complaint_id)
            .order_by(db_models.Comment.created_at.desc(), db_models.Comment.id.desc())
            .all()
        )

    def count_by_user(self, user_id: int) -> int:
        return (
            self.db.query(db_models.Comment)
            .filter(db_models.Comment.user_id == user_id)
            .count()
        )
