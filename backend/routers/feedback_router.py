from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

import authentication.auth as auth
import models.schemas as schemas
import repositories.db_models as db_models
from repositories.database import get_db
from services import FeedbackService

router = APIRouter(prefix="/feedback", tags=["feedback"])


@router.post("", response_model=schemas.Feedback, status_code=status.HTTP_201_CREATED)
def submit_feedback(
    feedback: schemas.FeedbackCreate,
    db: Session = Depends(get_db),
    current_user: db_models.User = Depends(auth.get_current_user),
):
    """Rate a completed complaint (1-5). One rating per user and complaint."""
    created = FeedbackService.submit_feedback(db, current_user, feedback)
    return FeedbackService.to_schema(created)


@router.get("", response_model=List[schemas.Feedback])
def list_feedback(
    complaint_id: Optional[int] = Query(None, alias="complaintId"),
    db: Session = Depends(get_db),
    current_user: db_models.User = Depends(auth.get_current_user),
):
    """Feedback on a complaint, or the caller's own feedback."""
    return FeedbackService.list_feedback(db, current_user, complaint_id)
