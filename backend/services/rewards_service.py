"""
Rewards service: points, levels and badges.

Each user owns one rewards document, created lazily with starting points and
the full badge catalog. Lifecycle actions (submission, resolution, comments,
received votes) arrive from the event dispatcher; UPDATE_STATS, UNLOCK_BADGE
and ADD_POINTS arrive over HTTP.

Updates are read-modify-write without locking; two concurrent events for the
same user can lose one of the increments.
"""

import copy
import math
from typing import Any

from loguru import logger
from sqlalchemy.orm import Session

import models.schemas as schemas
import repositories.db_models as db_models
from helpers.time_utils import utc_now
from models.badge_types import BadgeType
from models.exceptions import BadgeNotFoundException, ValidationException
from models.schemas import RewardsAction
from repositories.comment_repository import CommentRepository
from repositories.complaint_repository import ComplaintRepository
from repositories.rewards_repository import RewardsRepository

STARTING_POINTS = 25
POINTS_PER_LEVEL = 100

ACTION_POINTS: dict[RewardsAction, int] = {
    RewardsAction.SUBMITTED_COMPLAINT: 15,
    RewardsAction.COMPLAINT_RESOLVED: 40,
    RewardsAction.ADDED_COMMENT: 5,
    RewardsAction.RECEIVED_VOTE: 2,
}

# Rewards stat each threshold badge is measured against
BADGE_STATS: dict[BadgeType, str] = {
    BadgeType.FIRST_COMPLAINT: "total_complaints",
    BadgeType.ACTIVE_CITIZEN: "total_complaints",
    BadgeType.RESOLUTION_PIONEER: "completed_complaints",
    BadgeType.PROBLEM_SOLVER: "completed_complaints",
    BadgeType.FEEDBACK_PROVIDER: "comments",
    BadgeType.COMMUNITY_PILLAR: "votes",
}

ACTION_BADGES: dict[RewardsAction, list[BadgeType]] = {
    RewardsAction.SUBMITTED_COMPLAINT: [
        BadgeType.FIRST_COMPLAINT,
        BadgeType.ACTIVE_CITIZEN,
    ],
    RewardsAction.COMPLAINT_RESOLVED: [
        BadgeType.RESOLUTION_PIONEER,
        BadgeType.PROBLEM_SOLVER,
    ],
    RewardsAction.ADDED_COMMENT: [BadgeType.FEEDBACK_PROVIDER],
    RewardsAction.RECEIVED_VOTE: [BadgeType.COMMUNITY_PILLAR],
}

HTTP_ACTIONS = {
    RewardsAction.UPDATE_STATS,
    RewardsAction.UNLOCK_BADGE,
    RewardsAction.ADD_POINTS,
}


def level_for(points: int) -> int:
    return points // POINTS_PER_LEVEL + 1


def badge_progress(stat: int, threshold: int) -> int:
    """Percentage toward a threshold, capped at 99 until the badge unlocks."""
    if stat >= threshold:
        return 100
    return min(math.floor(stat / threshold * 100), 99)


def initial_badges() -> list[dict[str, Any]]:
    """The badge catalog as stored on a fresh rewards document."""
    now = utc_now().isoformat()
    badges = []
    for badge in BadgeType:
        unlocked = badge is BadgeType.NEWCOMER
        badges.append(
            {
                "id": badge.badge_id,
                "name": badge.value.name,
                "description": badge.value.description,
                "category": badge.value.category,
                "unlocked": unlocked,
                "unlocked_at": now if unlocked else None,
                "progress": 100 if unlocked else 0,
            }
        )
    return badges


class RewardsService:
    """Service for rewards bookkeeping."""

    @staticmethod
    def get_or_create(db: Session, user_id: int) -> db_models.Rewards:
        """
        Get a user's rewards document, creating it on first access.

        Args:
            db: Database session
            user_id: Owner of the document

        Returns:
            The rewards document
        """
        repo = RewardsRepository(db)
        rewards = repo.get_by_user_id(user_id)
        if rewards:
            return rewards

        rewards = db_models.Rewards(
            user_id=user_id,
            points=STARTING_POINTS,
            level=level_for(STARTING_POINTS),
            badges=initial_badges(),
            total_complaints=0,
            completed_complaints=0,
            pending_complaints=0,
            votes=0,
            comments=0,
        )
        logger.info(f"Created rewards document for user {user_id}")
        return repo.create(rewards)

    @staticmethod
    def _badge_index(badges: list[dict[str, Any]]) -> dict[str, dict[str, Any]]:
        return {badge["id"]: badge for badge in badges}

    @staticmethod
    def _evaluate_badge(
        badges: dict[str, dict[str, Any]],
        badge: BadgeType,
        stat: int,
    ) -> bool:
        """
        Refresh one threshold badge against its stat.

        Returns:
            True if the badge was unlocked by this call
        """
        entry = badges.get(badge.badge_id)
        threshold = badge.threshold
        if entry is None or threshold is None:
            return False
        if entry["unlocked"]:
            entry["progress"] = 100
            return False
        entry["progress"] = badge_progress(stat, threshold)
        if stat >= threshold:
            entry["unlocked"] = True
            entry["unlocked_at"] = utc_now().isoformat()
            return True
        return False

    @classmethod
    def apply_action(
        cls,
        db: Session,
        user_id: int,
        action: RewardsAction,
        badge_id: str | None = None,
        value: int | None = None,
    ) -> schemas.RewardsUpdateResult:
        """
        Apply a rewards action to a user's document.

        Args:
            db: Database session
            user_id: User whose rewards change
            action: Action to apply
            badge_id: Required for UNLOCK_BADGE
            value: Required for ADD_POINTS

        Returns:
            Updated rewards with points added, level-up and achievement flags

        Raises:
            ValidationException: Missing badge_id or value
            BadgeNotFoundException: Unknown badge_id
        """
        rewards = cls.get_or_create(db, user_id)
        old_points = rewards.points
        old_level = rewards.level
        badges = copy.deepcopy(rewards.badges)
        index = cls._badge_index(badges)
        unlocked: list[BadgeType] = []

        if action == RewardsAction.SUBMITTED_COMPLAINT:
            rewards.total_complaints += 1
            rewards.pending_complaints += 1
        elif action == RewardsAction.COMPLAINT_RESOLVED:
            rewards.completed_complaints += 1
            rewards.pending_complaints = max(0, rewards.pending_complaints - 1)
        elif action == RewardsAction.ADDED_COMMENT:
            rewards.comments += 1
        elif action == RewardsAction.RECEIVED_VOTE:
            rewards.votes += 1
        elif action == RewardsAction.UPDATE_STATS:
            cls._recompute_stats(db, rewards)
        elif action == RewardsAction.UNLOCK_BADGE:
            if not badge_id:
                raise ValidationException("badge_id is required to unlock a badge")
            badge = BadgeType.from_id(badge_id)
            if badge is None or badge.badge_id not in index:
                raise BadgeNotFoundException(badge_id)
            entry = index[badge.badge_id]
            if not entry["unlocked"]:
                entry["unlocked"] = True
                entry["unlocked_at"] = utc_now().isoformat()
                entry["progress"] = 100
                unlocked.append(badge)
        elif action == RewardsAction.ADD_POINTS:
            if value is None:
                raise ValidationException("value is required to add points")
            rewards.points = max(0, rewards.points + value)

        rewards.points += ACTION_POINTS.get(action, 0)

        if action == RewardsAction.UPDATE_STATS:
            # Refresh every threshold badge; UPDATE_STATS never awards points
            for badge, stat_name in BADGE_STATS.items():
                cls._evaluate_badge(index, badge, getattr(rewards, stat_name))
        else:
            for badge in ACTION_BADGES.get(action, []):
                if cls._evaluate_badge(index, badge, getattr(rewards, BADGE_STATS[badge])):
                    unlocked.append(badge)

        for badge in unlocked:
            rewards.points += badge.bonus_points

        rewards.badges = badges
        rewards.level = level_for(rewards.points)
        rewards = RewardsRepository(db).update(rewards)

        points_added = rewards.points - old_points
        if unlocked:
            logger.info(
                f"User {user_id} unlocked {', '.join(b.badge_id for b in unlocked)}"
            )
        logger.debug(f"Rewards {action.value} for user {user_id}: +{points_added}")

        return schemas.RewardsUpdateResult(
            rewards=cls.to_schema(rewards),
            points_added=points_added,
            level_up=rewards.level > old_level,
            new_achievement=bool(unlocked),
        )

    @staticmethod
    def _recompute_stats(db: Session, rewards: db_models.Rewards) -> None:
        """Rebuild stats from complaints, comments and vote counters."""
        complaint_repo = ComplaintRepository(db)
        total = complaint_repo.count_by_user(rewards.user_id)
        completed = complaint_repo.count_by_user(
            rewards.user_id, db_models.ComplaintStatus.COMPLETED
        )
        rewards.total_complaints = total
        rewards.completed_complaints = completed
        rewards.pending_complaints = max(0, total - completed)
        rewards.votes = complaint_repo.sum_votes_by_user(rewards.user_id)
        rewards.comments = CommentRepository(db).count_by_user(rewards.user_id)

    @staticmethod
    def to_schema(rewards: db_models.Rewards) -> schemas.Rewards:
        return schemas.Rewards(
            user_id=rewards.user_id,
            points=rewards.points,
            level=rewards.level,
            next_level_points=rewards.level * POINTS_PER_LEVEL,
            badges=[schemas.Badge(**badge) for badge in rewards.badges],
            stats=schemas.RewardsStats(
                total_complaints=rewards.total_complaints,
                completed_complaints=rewards.completed_complaints,
                pending_complaints=rewards.pending_complaints,
                votes=rewards.votes,
                comments=rewards.comments,
            ),
            updated_at=rewards.updated_at,
        )

    @classmethod
    def get_rewards(cls, db: Session, user_id: int) -> schemas.Rewards:
        return cls.to_schema(cls.get_or_create(db, user_id))

    @classmethod
    def apply_http_action(
        cls,
        db: Session,
        user_id: int,
        update: schemas.RewardsUpdate,
        allowed: set[RewardsAction],
    ) -> schemas.RewardsUpdateResult:
        """
        Apply an action received over HTTP.

        Lifecycle actions are only driven by events, so anything outside
        ``allowed`` is rejected.
        """
        if update.action not in allowed:
            raise ValidationException(
                f"Action {update.action.value} cannot be requested directly"
            )
        return cls.apply_action(
            db, user_id, update.action, badge_id=update.badge_id, value=update.value
        )

    # =========================================================================
    # Event subscribers
    # =========================================================================

    @classmethod
    def on_complaint_submitted(cls, db: Session, payload: dict[str, Any]) -> None:
        cls.apply_action(db, payload["user_id"], RewardsAction.SUBMITTED_COMPLAINT)

    @classmethod
    def on_complaint_resolved(cls, db: Session, payload: dict[str, Any]) -> None:
        cls.apply_action(db, payload["user_id"], RewardsAction.COMPLAINT_RESOLVED)

    @classmethod
    def on_vote_received(cls, db: Session, payload: dict[str, Any]) -> None:
        cls.apply_action(db, payload["owner_id"], RewardsAction.RECEIVED_VOTE)

    @classmethod
    def on_comment_added(cls, db: Session, payload: dict[str, Any]) -> None:
        cls.apply_action(db, payload["user_id"], RewardsAction.ADDED_COMMENT)
