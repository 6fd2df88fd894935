"""Tests for RewardsService points, levels and badges."""

import pytest

import models.schemas as schemas
import repositories.db_models as db_models
from models.badge_types import BadgeType
from models.exceptions import BadgeNotFoundException, ValidationException
from models.schemas import RewardsAction
from services.complaint_service import ComplaintService
from services.rewards_service import (
    BADGE_STATS,
    STARTING_POINTS,
    RewardsService,
    badge_progress,
    level_for,
)

SAMPLE_IMAGE = "https://res.cloudinary.com/demo/image/upload/v1/civicsync/bins.jpg"


def _badge(rewards: schemas.Rewards, badge_id: str) -> schemas.Badge:
    return next(b for b in rewards.badges if b.id == badge_id)


def _submit(db, user, title="Overflowing garbage bins"):
    data = schemas.ComplaintCreate(
        title=title,
        description="Bins on the corner have not been emptied for a week.",
        category=db_models.ComplaintCategory.GARBAGE,
        location=schemas.Location(latitude=45.5, longitude=-73.6),
        images=[SAMPLE_IMAGE],
    )
    return ComplaintService.create_complaint(db, data, user)


class TestHelpers:
    def test_level_for(self):
        assert level_for(0) == 1
        assert level_for(99) == 1
        assert level_for(100) == 2
        assert level_for(250) == 3

    def test_badge_progress_caps_at_99_until_unlocked(self):
        assert badge_progress(0, 5) == 0
        assert badge_progress(2, 5) == 40
        assert badge_progress(49, 50) == 98
        assert badge_progress(999, 1000) == 99
        assert badge_progress(5, 5) == 100

    def test_every_threshold_badge_has_a_stat(self):
        thresholded = {badge for badge in BadgeType if badge.threshold is not None}
        assert set(BADGE_STATS) == thresholded
        for stat_name in BADGE_STATS.values():
            assert hasattr(db_models.Rewards, stat_name)


class TestGetOrCreate:
    def test_new_document_has_starting_points_and_catalog(self, db_session, test_user):
        rewards = RewardsService.get_rewards(db_session, test_user.id)

        assert rewards.points == STARTING_POINTS == 25
        assert rewards.level == 1
        assert rewards.next_level_points == 100
        assert len(rewards.badges) == len(BadgeType)
        unlocked = [b.id for b in rewards.badges if b.unlocked]
        assert unlocked == ["newcomer"]
        assert rewards.stats.total_complaints == 0

    def test_document_is_created_once(self, db_session, test_user):
        first = RewardsService.get_or_create(db_session, test_user.id)
        second = RewardsService.get_or_create(db_session, test_user.id)
        assert first.id == second.id
        assert db_session.query(db_models.Rewards).count() == 1


class TestLifecycleActions:
    def test_first_complaint_unlocks_badge_and_adds_bonus(self, db_session, test_user):
        _submit(db_session, test_user)

        rewards = RewardsService.get_rewards(db_session, test_user.id)
        # 25 starting + 15 submission + 25 first-complaint bonus
        assert rewards.points == 65
        assert rewards.stats.total_complaints == 1
        assert rewards.stats.pending_complaints == 1
        assert _badge(rewards, "first-complaint").unlocked
        assert _badge(rewards, "first-complaint").unlocked_at is not None
        assert _badge(rewards, "active-citizen").progress == 20
        assert not _badge(rewards, "active-citizen").unlocked

    def test_second_complaint_does_not_repeat_bonus(self, db_session, test_user):
        _submit(db_session, test_user)
        _submit(db_session, test_user, title="Streetlight out")

        rewards = RewardsService.get_rewards(db_session, test_user.id)
        assert rewards.points == 80
        assert rewards.stats.total_complaints == 2
        assert _badge(rewards, "active-citizen").progress == 40

    def test_fifth_complaint_unlocks_active_citizen(self, db_session, test_user):
        for i in range(5):
            _submit(db_session, test_user, title=f"Issue number {i}")

        rewards = RewardsService.get_rewards(db_session, test_user.id)
        # 25 + 5*15 + 25 (first-complaint) + 50 (active-citizen)
        assert rewards.points == 175
        assert rewards.level == 2
        assert _badge(rewards, "active-citizen").unlocked
        assert _badge(rewards, "active-citizen").progress == 100

    def test_resolution_moves_pending_to_completed(
        self, db_session, test_user, admin_user
    ):
        complaint = _submit(db_session, test_user)

        ComplaintService.update_status(db_session, complaint.id, "completed", admin_user)

        rewards = RewardsService.get_rewards(db_session, test_user.id)
        assert rewards.stats.completed_complaints == 1
        assert rewards.stats.pending_complaints == 0
        assert _badge(rewards, "resolution-pioneer").unlocked
        # 65 after submission + 40 resolution + 25 resolution-pioneer
        assert rewards.points == 130
        assert rewards.level == 2

    def test_pending_never_goes_negative(self, db_session, test_user):
        result = RewardsService.apply_action(
            db_session, test_user.id, RewardsAction.COMPLAINT_RESOLVED
        )
        assert result.rewards.stats.pending_complaints == 0
        assert result.rewards.stats.completed_complaints == 1

    def test_received_vote_updates_progress(self, db_session, test_user):
        result = RewardsService.apply_action(
            db_session, test_user.id, RewardsAction.RECEIVED_VOTE
        )
        assert result.points_added == 2
        assert result.rewards.stats.votes == 1
        assert _badge(result.rewards, "community-pillar").progress == 2
        assert result.new_achievement is False

    def test_comment_action(self, db_session, test_user):
        result = RewardsService.apply_action(
            db_session, test_user.id, RewardsAction.ADDED_COMMENT
        )
        assert result.points_added == 5
        assert _badge(result.rewards, "feedback-provider").progress == 20


class TestHttpActions:
    def test_update_stats_is_idempotent(self, db_session, test_user):
        _submit(db_session, test_user)
        _submit(db_session, test_user, title="Sewer smell")

        first = RewardsService.apply_action(
            db_session, test_user.id, RewardsAction.UPDATE_STATS
        )
        second = RewardsService.apply_action(
            db_session, test_user.id, RewardsAction.UPDATE_STATS
        )

        assert first.points_added == 0
        assert second.points_added == 0
        assert first.rewards.stats == second.rewards.stats
        assert first.rewards.points == second.rewards.points
        assert [b.model_dump(exclude={"unlocked_at"}) for b in first.rewards.badges] == [
            b.model_dump(exclude={"unlocked_at"}) for b in second.rewards.badges
        ]

    def test_update_stats_recomputes_from_source(
        self, db_session, test_user, test_complaint
    ):
        test_complaint.votes = 3
        db_session.commit()

        result = RewardsService.apply_action(
            db_session, test_user.id, RewardsAction.UPDATE_STATS
        )

        stats = result.rewards.stats
        assert stats.total_complaints == 1
        assert stats.pending_complaints == 1
        assert stats.completed_complaints == 0
        assert stats.votes == 3
        assert result.rewards.points == STARTING_POINTS

    def test_unlock_badge_requires_id(self, db_session, test_user):
        with pytest.raises(ValidationException):
            RewardsService.apply_action(
                db_session, test_user.id, RewardsAction.UNLOCK_BADGE
            )

    def test_unlock_unknown_badge(self, db_session, test_user):
        with pytest.raises(BadgeNotFoundException):
            RewardsService.apply_action(
                db_session, test_user.id, RewardsAction.UNLOCK_BADGE, badge_id="mayor"
            )

    def test_unlock_badge_adds_bonus_once(self, db_session, test_user):
        first = RewardsService.apply_action(
            db_session, test_user.id, RewardsAction.UNLOCK_BADGE, badge_id="top-reporter"
        )
        assert first.points_added == 75
        assert first.new_achievement is True
        assert first.level_up is True

        second = RewardsService.apply_action(
            db_session, test_user.id, RewardsAction.UNLOCK_BADGE, badge_id="top-reporter"
        )
        assert second.points_added == 0
        assert second.new_achievement is False

    def test_add_points_and_level_up(self, db_session, test_user):
        result = RewardsService.apply_action(
            db_session, test_user.id, RewardsAction.ADD_POINTS, value=80
        )
        assert result.rewards.points == 105
        assert result.rewards.level == 2
        assert result.rewards.next_level_points == 200
        assert result.level_up is True

    def test_add_points_floors_at_zero(self, db_session, test_user):
        result = RewardsService.apply_action(
            db_session, test_user.id, RewardsAction.ADD_POINTS, value=-1000
        )
        assert result.rewards.points == 0
        assert result.rewards.level == 1

    def test_add_points_requires_value(self, db_session, test_user):
        with pytest.raises(ValidationException):
            RewardsService.apply_action(
                db_session, test_user.id, RewardsAction.ADD_POINTS
            )

    def test_lifecycle_action_rejected_over_http(self, db_session, test_user):
        update = schemas.RewardsUpdate(action=RewardsAction.SUBMITTED_COMPLAINT)
        with pytest.raises(ValidationException):
            RewardsService.apply_http_action(
                db_session, test_user.id, update, {RewardsAction.UPDATE_STATS}
            )
