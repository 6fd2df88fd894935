"""Tests for UserService provisioning, roles and profile updates."""

import pytest

import models.schemas as schemas
import repositories.db_models as db_models
from models.exceptions import (
    AuthenticationException,
    InsufficientPermissionsException,
    SuperAdminProtectedException,
    UserNotFoundException,
    ValidationException,
)
from services.user_service import UserService


class TestResolveSessionUser:
    def test_existing_user_by_external_id(self, db_session, test_user):
        user = UserService.resolve_session_user(
            db_session, {"sub": test_user.external_id}
        )
        assert user.id == test_user.id

    def test_first_sign_in_provisions_user(self, db_session):
        user = UserService.resolve_session_user(
            db_session,
            {
                "sub": "user_newcomer",
                "email": "Ana@CivicSync.org",
                "given_name": "Ana",
                "family_name": "Silva",
            },
        )

        assert user.id is not None
        assert user.email == "ana@civicsync.org"
        assert user.full_name == "Ana Silva"
        assert user.role == db_models.UserRole.USER

    def test_placeholder_admin_is_linked_by_email(self, db_session):
        placeholder = db_models.User(
            email="deputy@civicsync.org", role=db_models.UserRole.ADMIN
        )
        db_session.add(placeholder)
        db_session.commit()

        user = UserService.resolve_session_user(
            db_session, {"sub": "user_deputy", "email": "deputy@civicsync.org"}
        )

        assert user.id == placeholder.id
        assert user.external_id == "user_deputy"
        assert user.role == db_models.UserRole.ADMIN

    def test_super_admin_role_resolved_from_configuration(self, db_session):
        user = UserService.resolve_session_user(
            db_session, {"sub": "user_chief", "email": "chief@civicsync.org"}
        )
        assert user.role == db_models.UserRole.SUPER_ADMIN
        assert user.is_super_admin

    def test_stale_super_admin_is_demoted(self, db_session, test_user):
        test_user.role = db_models.UserRole.SUPER_ADMIN
        db_session.commit()

        user = UserService.resolve_session_user(
            db_session, {"sub": test_user.external_id}
        )
        assert user.role == db_models.UserRole.ADMIN

    def test_missing_subject(self, db_session):
        with pytest.raises(AuthenticationException):
            UserService.resolve_session_user(db_session, {"email": "x@civicsync.org"})

    def test_new_user_without_email(self, db_session):
        with pytest.raises(AuthenticationException):
            UserService.resolve_session_user(db_session, {"sub": "user_unknown"})


class TestIdentityUpsert:
    def test_create_then_update(self, db_session, log_messages):
        user, created = UserService.upsert_from_identity(
            db_session, "user_abc", "lea@civicsync.org", "Lea", "Roy"
        )
        assert created is True
        assert any("kind=welcome" in m for m in log_messages)

        same, created = UserService.upsert_from_identity(
            db_session, "user_abc", "lea.roy@civicsync.org", "Lea", "Roy-Martin"
        )
        assert created is False
        assert same.id == user.id
        assert same.email == "lea.roy@civicsync.org"
        assert same.last_name == "Roy-Martin"

    def test_deactivate(self, db_session, test_user):
        assert UserService.deactivate_by_external_id(db_session, test_user.external_id)
        db_session.refresh(test_user)
        assert test_user.is_active is False

        assert not UserService.deactivate_by_external_id(db_session, "user_missing")


class TestProfile:
    def test_update_own_profile(self, db_session, test_user):
        update = schemas.UserProfileUpdate(phone="514-555-0100", notify_email=False)
        user = UserService.update_profile(db_session, test_user, update)

        assert user.phone == "514-555-0100"
        assert user.notify_email is False

    def test_citizen_cannot_change_role(self, db_session, test_user):
        update = schemas.UserAdminUpdate(role=db_models.UserRole.ADMIN)
        with pytest.raises(InsufficientPermissionsException):
            UserService.admin_update_user(db_session, test_user, test_user.id, update)

    def test_citizen_cannot_edit_others(self, db_session, test_user, other_user):
        update = schemas.UserAdminUpdate(first_name="Nope")
        with pytest.raises(InsufficientPermissionsException):
            UserService.admin_update_user(db_session, test_user, other_user.id, update)

    def test_admin_changes_role(self, db_session, admin_user, test_user):
        update = schemas.UserAdminUpdate(role=db_models.UserRole.ADMIN)
        user = UserService.admin_update_user(db_session, admin_user, test_user.id, update)
        assert user.role == db_models.UserRole.ADMIN

    def test_super_admin_is_protected(self, db_session, admin_user, super_admin_user):
        update = schemas.UserAdminUpdate(is_active=False)
        with pytest.raises(SuperAdminProtectedException):
            UserService.admin_update_user(
                db_session, admin_user, super_admin_user.id, update
            )

    def test_super_admin_role_cannot_be_granted(self, db_session, admin_user, test_user):
        update = schemas.UserAdminUpdate(role=db_models.UserRole.SUPER_ADMIN)
        with pytest.raises(SuperAdminProtectedException):
            UserService.admin_update_user(db_session, admin_user, test_user.id, update)


class TestDeleteAndLookup:
    def test_delete_user(self, db_session, test_user, test_complaint):
        UserService.delete_user(db_session, test_user.id)

        assert db_session.query(db_models.User).count() == 0
        assert db_session.query(db_models.Complaint).count() == 0

    def test_delete_super_admin_refused(self, db_session, super_admin_user):
        with pytest.raises(SuperAdminProtectedException):
            UserService.delete_user(db_session, super_admin_user.id)

    def test_delete_missing_user(self, db_session):
        with pytest.raises(UserNotFoundException):
            UserService.delete_user(db_session, 999)

    def test_role_by_email(self, db_session, admin_user):
        role = UserService.get_role_by_email(db_session, "CLERK@civicsync.org")
        assert role.role == db_models.UserRole.ADMIN
        assert role.is_admin is True
        assert role.is_super_admin is False

        super_role = UserService.get_role_by_email(db_session, "chief@civicsync.org")
        assert super_role.is_super_admin is True

        unknown = UserService.get_role_by_email(db_session, "nobody@civicsync.org")
        assert unknown.role is None
        assert unknown.is_admin is False

    def test_role_by_invalid_email(self, db_session):
        with pytest.raises(ValidationException):
            UserService.get_role_by_email(db_session, "not-an-email")
