from typing import Optional

from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.orm import Session

import authentication.auth as auth
import models.schemas as schemas
import repositories.db_models as db_models
from helpers.pagination import PageLimit, PageNumber
from helpers.rate_limiter import COMPLAINT_CREATE_RATE, limiter
from models.config import settings
from repositories.database import get_db
from services import ComplaintService

router = APIRouter(prefix="/complaints", tags=["complaints"])


@router.get("", response_model=schemas.ComplaintList)
def list_complaints(
    page: PageNumber = 1,
    limit: PageLimit = settings.COMPLAINTS_PAGE_SIZE,
    search: Optional[str] = Query(None, max_length=200),
    status_filter: Optional[db_models.ComplaintStatus] = Query(None, alias="status"),
    category: Optional[db_models.ComplaintCategory] = None,
    mine: bool = False,
    public: bool = False,
    admin: bool = False,
    db: Session = Depends(get_db),
    current_user: Optional[db_models.User] = Depends(auth.get_current_user_optional),
):
    """
    List complaints, newest first.

    - public=true: visible complaints, no sign-in needed
    - admin=true: every complaint (admins only)
    - mine=true: only the caller's complaints
    """
    return ComplaintService.list_complaints(
        db,
        viewer=current_user,
        page=page,
        limit=limit,
        search=search,
        status=status_filter,
        category=category,
        mine=mine,
        public=public,
        admin=admin,
    )


@router.post("", response_model=schemas.Complaint, status_code=status.HTTP_201_CREATED)
@limiter.limit(COMPLAINT_CREATE_RATE)
def create_complaint(
    request: Request,
    complaint: schemas.ComplaintCreate,
    db: Session = Depends(get_db),
    current_user: db_models.User = Depends(auth.get_current_user),
):
    """Submit a complaint. At least one image URL is required."""
    created = ComplaintService.create_complaint(db, complaint, current_user)
    return ComplaintService.to_schema(ComplaintService.get_or_raise(db, created.id))


@router.get("/{complaint_id}", response_model=schemas.Complaint)
def get_complaint(
    complaint_id: int,
    db: Session = Depends(get_db),
    current_user: Optional[db_models.User] = Depends(auth.get_current_user_optional),
):
    complaint = ComplaintService.get_complaint(db, complaint_id, current_user)
    return ComplaintService.to_schema(complaint)


@router.put("/{complaint_id}", response_model=schemas.Complaint)
def update_complaint(
    complaint_id: int,
    update: schemas.ComplaintUpdate,
    db: Session = Depends(get_db),
    current_user: db_models.User = Depends(auth.get_current_user),
):
    """Edit title, description, category, location or images (owner or admin)."""
    complaint = ComplaintService.update_complaint(db, complaint_id, update, current_user)
    return ComplaintService.to_schema(complaint)


@router.patch("/{complaint_id}", response_model=schemas.Complaint)
def admin_update_complaint(
    complaint_id: int,
    update: schemas.ComplaintAdminUpdate,
    db: Session = Depends(get_db),
    current_user: db_models.User = Depends(auth.get_admin_user),
):
    """Admin triage: status, visibility, fake flag and notes."""
    complaint = ComplaintService.admin_update(db, complaint_id, update, current_user)
    return ComplaintService.to_schema(complaint)


@router.patch("/{complaint_id}/status", response_model=schemas.Complaint)
def update_complaint_status(
    complaint_id: int,
    update: schemas.ComplaintStatusUpdate,
    db: Session = Depends(get_db),
    current_user: db_models.User = Depends(auth.get_admin_user),
):
    complaint = ComplaintService.update_status(
        db, complaint_id, update.status, current_user, admin_notes=update.admin_notes
    )
    return ComplaintService.to_schema(complaint)


@router.post("/{complaint_id}/toggle-fake", response_model=schemas.Complaint)
def toggle_fake(
    complaint_id: int,
    db: Session = Depends(get_db),
    current_user: db_models.User = Depends(auth.get_admin_user),
):
    """Flip the fake flag. Only allowed within 24 hours of submission."""
    complaint = ComplaintService.toggle_fake(db, complaint_id, current_user)
    return ComplaintService.to_schema(complaint)


@router.post("/{complaint_id}/toggle-visibility", response_model=schemas.Complaint)
def toggle_visibility(
    complaint_id: int,
    db: Session = Depends(get_db),
    current_user: db_models.User = Depends(auth.get_admin_user),
):
    complaint = ComplaintService.toggle_visibility(db, complaint_id, current_user)
    return ComplaintService.to_schema(complaint)


@router.delete("/{complaint_id}")
def delete_complaint(
    complaint_id: int,
    db: Session = Depends(get_db),
    current_user: db_models.User = Depends(auth.get_current_user),
):
    """
    Delete a complaint with its votes, comments and feedback.

    Domain exceptions are caught by centralized exception handlers.
    """
    ComplaintService.delete_complaint(db, complaint_id, current_user)
    return {"message": "Complaint deleted successfully"}
