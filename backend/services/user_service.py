"""
User Service

Provisioning of identity-provider users, profile management and the
super-admin role synchronization.
"""

from typing import Any, Optional

from loguru import logger
from sqlalchemy.orm import Session

import models.schemas as schemas
import repositories.db_models as db_models
from models.config import settings
from models.exceptions import (
    AuthenticationException,
    InsufficientPermissionsException,
    SuperAdminProtectedException,
    UserNotFoundException,
    ValidationException,
)
from repositories.user_repository import UserRepository
from services.event_dispatcher import DomainEvent, EventDispatcher


def _normalize_email(email: str) -> str:
    return email.strip().lower()


class UserService:
    """Service for managing users and their roles."""

    @staticmethod
    def is_super_admin_email(email: str) -> bool:
        return _normalize_email(email) == settings.SUPER_ADMIN_EMAIL

    @classmethod
    def sync_role(cls, user: db_models.User) -> bool:
        """
        Align a user's role with the configured super-admin email.

        The configured email always holds the super-admin role; anyone else
        holding it (after the setting changed) falls back to admin.

        Returns:
            True if the role was changed
        """
        if cls.is_super_admin_email(user.email):
            if user.role != db_models.UserRole.SUPER_ADMIN:
                user.role = db_models.UserRole.SUPER_ADMIN
                return True
        elif user.role == db_models.UserRole.SUPER_ADMIN:
            user.role = db_models.UserRole.ADMIN
            return True
        return False

    @classmethod
    def resolve_session_user(
        cls, db: Session, claims: dict[str, Any]
    ) -> db_models.User:
        """
        Load (or provision) the user behind verified session claims.

        Lookup order is the provider id, then the email claim, so that a
        placeholder admin created by email is linked on first sign-in.

        Args:
            db: Database session
            claims: Decoded session JWT claims

        Returns:
            The local user, with the super-admin role resolved

        Raises:
            AuthenticationException: Claims identify nobody
        """
        repo = UserRepository(db)
        external_id = str(claims.get("sub") or "")
        email = claims.get("email")
        if not external_id:
            raise AuthenticationException("Could not validate credentials")

        user = repo.get_by_external_id(external_id)
        if user is None and email:
            user = repo.get_by_email(email)
            if user is not None and user.external_id is None:
                user.external_id = external_id

        if user is None:
            if not email:
                raise AuthenticationException("Session is missing an email claim")
            user = db_models.User(
                external_id=external_id,
                email=_normalize_email(email),
                first_name=claims.get("given_name") or "",
                last_name=claims.get("family_name") or "",
                role=db_models.UserRole.USER,
            )
            cls.sync_role(user)
            user = repo.create(user)
            logger.info(f"Provisioned user {user.id} on first sign-in")
            return user

        if cls.sync_role(user) or db.is_modified(user):
            user = repo.update(user)
        return user

    @classmethod
    def upsert_from_identity(
        cls,
        db: Session,
        external_id: str,
        email: str,
        first_name: str = "",
        last_name: str = "",
    ) -> tuple[db_models.User, bool]:
        """
        Create or refresh a user from an identity-provider record.

        Returns:
            Tuple of (user, created)
        """
        repo = UserRepository(db)
        user = repo.get_by_external_id(external_id) or repo.get_by_email(email)
        created = user is None
        if user is None:
            user = db_models.User(external_id=external_id, role=db_models.UserRole.USER)
            repo.db.add(user)

        user.external_id = external_id
        user.email = _normalize_email(email)
        user.first_name = first_name or ""
        user.last_name = last_name or ""
        user.is_active = True
        cls.sync_role(user)
        repo.commit()
        db.refresh(user)

        if created:
            logger.info(f"Registered user {user.id} from identity webhook")
            EventDispatcher.publish(db, DomainEvent.USER_REGISTERED, user_id=user.id)
        return user, created

    @staticmethod
    def deactivate_by_external_id(db: Session, external_id: str) -> bool:
        """Deactivate a user deleted at the identity provider."""
        repo = UserRepository(db)
        user = repo.get_by_external_id(external_id)
        if user is None:
            return False
        user.is_active = False
        repo.update(user)
        logger.info(f"Deactivated user {user.id} after identity deletion")
        return True

    @staticmethod
    def get_user_by_id_or_raise(db: Session, user_id: int) -> db_models.User:
        """
        Get user by ID or raise.

        Raises:
            UserNotFoundException: If user not found
        """
        user = UserRepository(db).get_by_id(user_id)
        if not user:
            raise UserNotFoundException(f"User with ID {user_id} not found")
        return user

    @staticmethod
    def ensure_self_or_admin(current_user: db_models.User, user_id: int) -> None:
        if current_user.id != user_id and not current_user.is_admin:
            raise InsufficientPermissionsException(
                "You can only access your own profile"
            )

    @classmethod
    def update_profile(
        cls,
        db: Session,
        user: db_models.User,
        update: schemas.UserProfileUpdate,
    ) -> db_models.User:
        for field, value in update.model_dump(exclude_unset=True).items():
            setattr(user, field, value)
        return UserRepository(db).update(user)

    @classmethod
    def admin_update_user(
        cls,
        db: Session,
        current_user: db_models.User,
        user_id: int,
        update: schemas.UserAdminUpdate,
    ) -> db_models.User:
        """
        Update a user's profile as themselves or as an admin.

        Raises:
            InsufficientPermissionsException: Non-admin editing someone else
                or changing a role
            SuperAdminProtectedException: Role change to or from super-admin
        """
        cls.ensure_self_or_admin(current_user, user_id)
        user = cls.get_user_by_id_or_raise(db, user_id)
        changes = update.model_dump(exclude_unset=True)

        if "role" in changes or "is_active" in changes:
            if not current_user.is_admin:
                raise InsufficientPermissionsException(
                    "Only admins can change roles or account status"
                )
            if user.is_super_admin:
                raise SuperAdminProtectedException()
            if changes.get("role") == db_models.UserRole.SUPER_ADMIN:
                raise SuperAdminProtectedException(
                    "The super admin role is assigned by configuration"
                )
            if changes.get("role") is None:
                changes.pop("role", None)

        for field, value in changes.items():
            setattr(user, field, value)
        return UserRepository(db).update(user)

    @classmethod
    def delete_user(cls, db: Session, user_id: int) -> None:
        """
        Hard-delete a user and everything they own.

        Raises:
            UserNotFoundException: If user not found
            SuperAdminProtectedException: Target is the super admin
        """
        user = cls.get_user_by_id_or_raise(db, user_id)
        if user.is_super_admin or cls.is_super_admin_email(user.email):
            raise SuperAdminProtectedException()
        UserRepository(db).delete(user)
        logger.info(f"Deleted user {user_id}")

    @staticmethod
    def count_users(db: Session) -> int:
        return UserRepository(db).count()

    @classmethod
    def get_role_by_email(cls, db: Session, email: str) -> schemas.UserRoleResponse:
        if not email or "@" not in email:
            raise ValidationException("A valid email is required")
        user = UserRepository(db).get_by_email(email)
        role: Optional[db_models.UserRole] = user.role if user else None
        is_super = cls.is_super_admin_email(email)
        if is_super:
            role = db_models.UserRole.SUPER_ADMIN
        return schemas.UserRoleResponse(
            email=_normalize_email(email),
            role=role,
            is_admin=bool(user and user.is_admin) or is_super,
            is_super_admin=is_super,
        )

    @staticmethod
    def to_profile_schema(user: db_models.User) -> schemas.UserProfile:
        return schemas.UserProfile.model_validate(user)
