"""
Vote repository for database operations.
"""

from typing import Optional

from sqlalchemy.orm import Session

import repositories.db_models as db_models
from .base import BaseRepository


class VoteRepository(BaseRepository[db_models.Vote]):
    """Repository for Vote entity database operations."""

    def __init__(self, db: Session):
        super().__init__(db_models.Vote, db)

    def get_by_complaint_and_user(
        self, complaint_id: int, user_id: int
    ) -> Optional[db_models.Vote]:
        """
        Get vote by complaint and user.

        Args:
            complaint_id: Complaint ID
            user_id: User ID

        Returns:
            Vote if found, None otherwise
        """
        return (
            self.db.query(db_models.Vote)
            .filter(
                db_models.Vote.complaint_id == complaint_id,
                db_models.Vote.user_id == user_id,
            )
            .first()
        )

    def count_for_complaint(self, complaint_id: int) -> int:
        return (
            self.db.query(db_models.Vote)
            .filter(db_models.Vote.complaint_id == complaint_id)
            .count()
        )
