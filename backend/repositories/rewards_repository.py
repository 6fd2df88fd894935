"""
Rewards repository for database operations.
"""

from typing import Optional

from sqlalchemy.orm import Session

import repositories.db_models as db_models
from .base import BaseRepository


class RewardsRepository(BaseRepository[db_models.Rewards]):
    """Repository for the per-user Rewards document."""

    def __init__(self, db: Session):
        super().__init__(db_models.Rewards, db)

    def get_by_user_id(self, user_id: int) -> Optional[db_models.Rewards]:
        return (
            self.db.query(db_models.Rewards)
            .filter(db_models.Rewards.user_id == user_id)
            .first()
        )
