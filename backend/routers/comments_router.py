from typing import List, Optional

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

import authentication.auth as auth
import models.schemas as schemas
import repositories.db_models as db_models
from repositories.database import get_db
from services import CommentService

router = APIRouter(prefix="/complaints", tags=["comments"])


@router.get("/{complaint_id}/comments", response_model=List[schemas.Comment])
def get_comments(
    complaint_id: int,
    db: Session = Depends(get_db),
    current_user: Optional[db_models.User] = Depends(auth.get_current_user_optional),
):
    """All comments on a complaint, newest first."""
    return CommentService.list_comments(db, complaint_id, current_user)


@router.post(
    "/{complaint_id}/comments",
    response_model=schemas.Comment,
    status_code=status.HTTP_201_CREATED,
)
def create_comment(
    complaint_id: int,
    comment: schemas.CommentCreate,
    db: Session = Depends(get_db),
    current_user: db_models.User = Depends(auth.get_current_user),
):
    created = CommentService.add_comment(
        db, complaint_id, current_user, comment.content
    )
    db.refresh(created)
    return CommentService.to_schema(created)
