"""
Admin console endpoints.

Dashboard statistics and the long-pending report are open to every admin;
managing the admin roster is reserved to the super admin.
"""

from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

import authentication.auth as auth
import models.schemas as schemas
import repositories.db_models as db_models
from repositories.database import get_db
from services import AdminService, RewardsService, UserService
from services.rewards_service import HTTP_ACTIONS

router = APIRouter(prefix="/admin", tags=["admin"])


@router.get("/stats", response_model=schemas.AdminStats)
def get_stats(
    db: Session = Depends(get_db),
    current_user: db_models.User = Depends(auth.get_admin_user),
):
    return AdminService.get_stats(db)


@router.get("/users", response_model=List[schemas.AdminUser])
def list_admins(
    db: Session = Depends(get_db),
    current_user: db_models.User = Depends(auth.get_super_admin_user),
):
    """All admins, super admin first. Re-syncs the configured super admin."""
    return AdminService.list_admins(db, current_user)


@router.post("/add", response_model=schemas.AdminUser)
def add_admin(
    request: schemas.AdminEmailRequest,
    db: Session = Depends(get_db),
    current_user: db_models.User = Depends(auth.get_super_admin_user),
):
    return AdminService.add_admin(db, current_user, str(request.email))


@router.post("/remove", response_model=schemas.AdminUser)
def remove_admin(
    request: schemas.AdminEmailRequest,
    db: Session = Depends(get_db),
    current_user: db_models.User = Depends(auth.get_super_admin_user),
):
    """Revoke admin rights. The super admin cannot be removed."""
    return AdminService.remove_admin(db, current_user, str(request.email))


@router.patch("/users/{user_id}/rewards", response_model=schemas.RewardsUpdateResult)
def update_user_rewards(
    user_id: int,
    update: schemas.RewardsUpdate,
    db: Session = Depends(get_db),
    current_user: db_models.User = Depends(auth.get_admin_user),
):
    """UNLOCK_BADGE, ADD_POINTS or UPDATE_STATS on any user's rewards."""
    UserService.get_user_by_id_or_raise(db, user_id)
    return RewardsService.apply_http_action(db, user_id, update, HTTP_ACTIONS)


@router.get("/long-pending", response_model=List[schemas.LongPendingComplaint])
def get_long_pending(
    db: Session = Depends(get_db),
    current_user: db_models.User = Depends(auth.get_admin_user),
):
    return AdminService.get_long_pending(db)


@router.post("/long-pending/{complaint_id}/report", response_model=schemas.ReportResult)
def report_long_pending(
    complaint_id: int,
    db: Session = Depends(get_db),
    current_user: db_models.User = Depends(auth.get_admin_user),
):
    """Email the super admin about a long-pending complaint and flag it."""
    return AdminService.report_long_pending(db, complaint_id, current_user)
