"""
Complaint repository for database operations.
"""

from datetime import datetime
from typing import List, Optional

from sqlalchemy import func, or_
from sqlalchemy.orm import Query, Session, joinedload

import repositories.db_models as db_models
from .base import BaseRepository


class ComplaintRepository(BaseRepository[db_models.Complaint]):
    """Repository for Complaint entity database operations."""

    def __init__(self, db: Session):
        super().__init__(db_models.Complaint, db)

    def get_with_owner(self, complaint_id: int) -> Optional[db_models.Complaint]:
        """Get a complaint with its owner eagerly loaded."""
        return (
            self.db.query(db_models.Complaint)
            .options(joinedload(db_models.Complaint.user))
            .filter(db_models.Complaint.id == complaint_id)
            .first()
        )

    def _filtered_query(
        self,
        search: Optional[str] = None,
        status: Optional[db_models.ComplaintStatus] = None,
        category: Optional[db_models.ComplaintCategory] = None,
        owner_id: Optional[int] = None,
        visible_only: bool = False,
        visible_or_owned_by: Optional[int] = None,
    ) -> Query:
        query = self.db.query(db_models.Complaint)

        if search:
            # autoescape: % and _ typed by users match literally
            query = query.filter(
                or_(
                    db_models.Complaint.title.icontains(search, autoescape=True),
                    db_models.Complaint.description.icontains(search, autoescape=True),
                )
            )
        if status:
            query = query.filter(db_models.Complaint.status == status)
        if category:
            query = query.filter(db_models.Complaint.category == category)
        if owner_id is not None:
            query = query.filter(db_models.Complaint.user_id == owner_id)
        if visible_only:
            query = query.filter(db_models.Complaint.is_visible == True)  # noqa: E712
        elif visible_or_owned_by is not None:
            query = query.filter(
                or_(
                    db_models.Complaint.is_visible == True,  # noqa: E712
                    db_models.Complaint.user_id == visible_or_owned_by,
                )
            )
        return query

    def list_filtered(
        self,
        skip: int = 0,
        limit: int = 10,
        **filters,
    ) -> tuple[List[db_models.Complaint], int]:
        """
        List complaints newest first with filters applied.

        Args:
            skip: Number of records to skip
            limit: Maximum number of records to return
            **filters: search, status, category, owner_id, visible_only,
                visible_or_owned_by

        Returns:
            Tuple of (complaints page, total matching count)
        """
        query = self._filtered_query(**filters)
        total = query.count()
        items = (
            query.options(joinedload(db_models.Complaint.user))
            .order_by(
                db_models.Complaint.created_at.desc(), db_models.Complaint.id.desc()
            )
            .offset(skip)
            .limit(limit)
            .all()
        )
        return items, total

    def get_long_pending(self, cutoff: datetime) -> List[db_models.Complaint]:
        """Complaints created at or before ``cutoff`` that are not completed."""
        return (
            self.db.query(db_models.Complaint)
            .options(joinedload(db_models.Complaint.user))
            .filter(
                db_models.Complaint.created_at <= cutoff,
                db_models.Complaint.status != db_models.ComplaintStatus.COMPLETED,
            )
            .order_by(db_models.Complaint.created_at.asc())
            .all()
        )

    def count_by_status(self) -> dict[db_models.ComplaintStatus, int]:
        rows = (
            self.db.query(db_models.Complaint.status, func.count(db_models.Complaint.id))
            .group_by(db_models.Complaint.status)
            .all()
        )
        counts = {status: 0 for status in db_models.ComplaintStatus}
        for status, count in rows:
            counts[status] = count
        return counts

    def count_by_user(
        self, user_id: int, status: Optional[db_models.ComplaintStatus] = None
    ) -> int:
        query = self.db.query(db_models.Complaint).filter(
            db_models.Complaint.user_id == user_id
        )
        if status:
            query = query.filter(db_models.Complaint.status == status)
        return query.count()

    def sum_votes_by_user(self, user_id: int) -> int:
        """Sum of the vote counters on a user's complaints."""
        total = (
            self.db.query(func.coalesce(func.sum(db_models.Complaint.votes), 0))
            .filter(db_models.Complaint.user_id == user_id)
            .scalar()
        )
        return int(total or 0)
