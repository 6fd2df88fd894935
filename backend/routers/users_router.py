from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

import authentication.auth as auth
import models.schemas as schemas
import repositories.db_models as db_models
from models.schemas import RewardsAction
from repositories.database import get_db
from services import RewardsService, UserService
from services.rewards_service import HTTP_ACTIONS

router = APIRouter(prefix="/users", tags=["users"])

# Citizens may refresh stats and unlock badges; ADD_POINTS is admin only
SELF_SERVICE_ACTIONS = {RewardsAction.UPDATE_STATS, RewardsAction.UNLOCK_BADGE}


@router.get("/me", response_model=schemas.UserProfile)
def read_current_user(current_user: db_models.User = Depends(auth.get_current_user)):
    return current_user


@router.put("/me", response_model=schemas.UserProfile)
def update_current_user(
    update: schemas.UserProfileUpdate,
    db: Session = Depends(get_db),
    current_user: db_models.User = Depends(auth.get_current_user),
):
    """Update name, contact details and notification preferences."""
    return UserService.update_profile(db, current_user, update)


@router.get("/rewards", response_model=schemas.Rewards)
def get_my_rewards(
    db: Session = Depends(get_db),
    current_user: db_models.User = Depends(auth.get_current_user),
):
    """Points, level and badges. Created with starting points on first read."""
    return RewardsService.get_rewards(db, current_user.id)


@router.patch("/rewards", response_model=schemas.RewardsUpdateResult)
def update_my_rewards(
    update: schemas.RewardsUpdate,
    db: Session = Depends(get_db),
    current_user: db_models.User = Depends(auth.get_current_user),
):
    allowed = SELF_SERVICE_ACTIONS | (HTTP_ACTIONS if current_user.is_admin else set())
    return RewardsService.apply_http_action(db, current_user.id, update, allowed)


@router.get("/count", response_model=schemas.CountResponse)
def count_users(
    db: Session = Depends(get_db),
    current_user: db_models.User = Depends(auth.get_admin_user),
):
    return schemas.CountResponse(count=UserService.count_users(db))


@router.get("/role", response_model=schemas.UserRoleResponse)
def get_user_role(
    email: str = Query(..., min_length=3, max_length=255),
    db: Session = Depends(get_db),
    current_user: db_models.User = Depends(auth.get_current_user),
):
    """Role lookup by email, used by the frontend to gate admin pages."""
    return UserService.get_role_by_email(db, email)


@router.get("/{user_id}", response_model=schemas.UserProfile)
def get_user(
    user_id: int,
    db: Session = Depends(get_db),
    current_user: db_models.User = Depends(auth.get_current_user),
):
    UserService.ensure_self_or_admin(current_user, user_id)
    return UserService.get_user_by_id_or_raise(db, user_id)


@router.put("/{user_id}", response_model=schemas.UserProfile)
def update_user(
    user_id: int,
    update: schemas.UserAdminUpdate,
    db: Session = Depends(get_db),
    current_user: db_models.User = Depends(auth.get_current_user),
):
    """Update a profile as its owner, or as an admin (roles included)."""
    return UserService.admin_update_user(db, current_user, user_id, update)


@router.delete("/{user_id}")
def delete_user(
    user_id: int,
    db: Session = Depends(get_db),
    current_user: db_models.User = Depends(auth.get_admin_user),
):
    """
    Permanently delete a user and their content.

    Domain exceptions are caught by centralized exception handlers.
    """
    UserService.delete_user(db, user_id)
    return {"message": "User deleted successfully"}
