"""
User repository for database operations.
"""

from typing import List, Optional

from sqlalchemy.orm import Session

import repositories.db_models as db_models
from .base import BaseRepository


class UserRepository(BaseRepository[db_models.User]):
    """Repository for User entity database operations."""

    def __init__(self, db: Session):
        super().__init__(db_models.User, db)

    def get_by_email(self, email: str) -> Optional[db_models.User]:
        """
        Get user by email.

        Emails are stored lowercased, so the lookup normalizes its input.

        Args:
            email: User email

        Returns:
            User if found, None otherwise
        """
        return (
            self.db.query(db_models.User)
            .filter(db_models.User.email == email.strip().lower())
            .first()
        )

    def get_by_external_id(self, external_id: str) -> Optional[db_models.User]:
        """Get user by identity-provider id."""
        return (
            self.db.query(db_models.User)
            .filter(db_models.User.external_id == external_id)
            .first()
        )

    def get_admins(self) -> List[db_models.User]:
        """Return admins and the super admin, super admin first."""
        users = (
            self.db.query(db_models.User)
            .filter(
                db_models.User.role.in_(
                    [db_models.UserRole.ADMIN, db_models.UserRole.SUPER_ADMIN]
                )
            )
            .order_by(db_models.User.created_at.asc())
            .all()
        )
        return sorted(users, key=lambda u: not u.is_super_admin)
