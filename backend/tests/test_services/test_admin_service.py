"""Tests for AdminService: stats, admin roster and long-pending reports."""

from datetime import timedelta

import pytest

import repositories.db_models as db_models
from helpers.time_utils import utc_now
from models.config import settings
from models.exceptions import (
    InsufficientPermissionsException,
    NotLongPendingException,
    SuperAdminProtectedException,
    UserNotFoundException,
)
from services.admin_service import AdminService


def _age(db_session, complaint, days: int) -> None:
    complaint.created_at = utc_now() - timedelta(days=days)
    db_session.commit()


class TestStats:
    def test_counts_by_status(self, db_session, test_complaint, test_user, other_user):
        db_session.add(
            db_models.Complaint(
                title="Streetlight",
                description="Dark corner",
                category=db_models.ComplaintCategory.ELECTRICITY,
                status=db_models.ComplaintStatus.COMPLETED,
                latitude=1.0,
                longitude=2.0,
                images=["https://img.example.org/a.jpg"],
                user_id=other_user.id,
            )
        )
        db_session.add(db_models.Vote(complaint_id=test_complaint.id, user_id=other_user.id))
        db_session.commit()

        stats = AdminService.get_stats(db_session)

        assert stats.total_complaints == 2
        assert stats.pending == 1
        assert stats.completed == 1
        assert stats.in_progress == 0
        assert stats.rejected == 0
        assert stats.total_users == 2
        assert stats.total_votes == 1


class TestSuperAdminSync:
    def test_creates_placeholder(self, db_session):
        user = AdminService.sync_super_admin(db_session)

        assert user.email == settings.SUPER_ADMIN_EMAIL
        assert user.role == db_models.UserRole.SUPER_ADMIN
        assert user.external_id is None

    def test_restores_role(self, db_session, super_admin_user):
        super_admin_user.role = db_models.UserRole.USER
        db_session.commit()

        user = AdminService.sync_super_admin(db_session)

        assert user.id == super_admin_user.id
        assert user.role == db_models.UserRole.SUPER_ADMIN


class TestAdminRoster:
    def test_only_super_admin_manages_admins(self, db_session, admin_user):
        with pytest.raises(InsufficientPermissionsException):
            AdminService.add_admin(db_session, admin_user, "someone@civicsync.org")

    def test_add_existing_user(self, db_session, super_admin_user, test_user):
        user = AdminService.add_admin(db_session, super_admin_user, test_user.email)

        assert user.id == test_user.id
        assert user.role == db_models.UserRole.ADMIN

    def test_add_unknown_email_creates_placeholder(self, db_session, super_admin_user):
        user = AdminService.add_admin(
            db_session, super_admin_user, "New.Clerk@CivicSync.org"
        )

        assert user.email == "new.clerk@civicsync.org"
        assert user.role == db_models.UserRole.ADMIN

    def test_list_admins_super_admin_first(
        self, db_session, super_admin_user, admin_user, test_user
    ):
        admins = AdminService.list_admins(db_session, super_admin_user)

        assert [a.id for a in admins] == [super_admin_user.id, admin_user.id]

    def test_remove_admin(self, db_session, super_admin_user, admin_user):
        user = AdminService.remove_admin(db_session, super_admin_user, admin_user.email)
        assert user.role == db_models.UserRole.USER

    def test_super_admin_cannot_be_removed(self, db_session, super_admin_user):
        with pytest.raises(SuperAdminProtectedException):
            AdminService.remove_admin(
                db_session, super_admin_user, settings.SUPER_ADMIN_EMAIL.upper()
            )

    def test_remove_unknown_email(self, db_session, super_admin_user):
        with pytest.raises(UserNotFoundException):
            AdminService.remove_admin(db_session, super_admin_user, "ghost@civicsync.org")


class TestLongPending:
    def test_lists_old_unresolved_complaints(self, db_session, test_complaint):
        assert AdminService.get_long_pending(db_session) == []

        _age(db_session, test_complaint, settings.LONG_PENDING_DAYS + 1)

        pending = AdminService.get_long_pending(db_session)
        assert [c.id for c in pending] == [test_complaint.id]
        assert pending[0].age_days == settings.LONG_PENDING_DAYS + 1

    def test_completed_complaints_are_excluded(self, db_session, test_complaint):
        _age(db_session, test_complaint, 30)
        test_complaint.status = db_models.ComplaintStatus.COMPLETED
        db_session.commit()

        assert AdminService.get_long_pending(db_session) == []

    def test_report_flags_complaint_and_emails(
        self, db_session, test_complaint, admin_user, log_messages
    ):
        _age(db_session, test_complaint, 10)

        result = AdminService.report_long_pending(db_session, test_complaint.id, admin_user)

        assert result.reported_to_super_admin is True
        assert result.email_sent is True
        assert result.reported_at is not None
        db_session.refresh(test_complaint)
        assert test_complaint.reported_to_super_admin is True
        assert any(
            "kind=long_pending_report" in m and settings.SUPER_ADMIN_EMAIL in m
            for m in log_messages
        )

    def test_report_flags_even_when_email_fails(
        self, db_session, test_complaint, admin_user, monkeypatch
    ):
        from services.email_service import ConsoleProvider

        monkeypatch.setattr(ConsoleProvider, "send", lambda self, *args: False)
        _age(db_session, test_complaint, 10)

        result = AdminService.report_long_pending(db_session, test_complaint.id, admin_user)

        assert result.email_sent is False
        assert result.reported_to_super_admin is True

    def test_recent_complaint_cannot_be_reported(
        self, db_session, test_complaint, admin_user
    ):
        with pytest.raises(NotLongPendingException):
            AdminService.report_long_pending(db_session, test_complaint.id, admin_user)
