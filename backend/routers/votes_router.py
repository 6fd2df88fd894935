from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

import authentication.auth as auth
import models.schemas as schemas
import repositories.db_models as db_models
from repositories.database import get_db
from services.vote_service import VoteService

router = APIRouter(prefix="/complaints", tags=["votes"])


@router.post("/{complaint_id}/votes", response_model=schemas.VoteStatus)
def vote_on_complaint(
    complaint_id: int,
    db: Session = Depends(get_db),
    current_user: db_models.User = Depends(auth.get_current_user),
):
    """Vote for a complaint. Voting twice returns 409."""
    votes = VoteService.vote(db, complaint_id, current_user)
    return schemas.VoteStatus(complaint_id=complaint_id, votes=votes, has_voted=True)


@router.delete("/{complaint_id}/votes", response_model=schemas.VoteStatus)
def remove_vote(
    complaint_id: int,
    db: Session = Depends(get_db),
    current_user: db_models.User = Depends(auth.get_current_user),
):
    votes = VoteService.unvote(db, complaint_id, current_user)
    return schemas.VoteStatus(complaint_id=complaint_id, votes=votes, has_voted=False)


@router.get("/{complaint_id}/votes", response_model=schemas.VoteStatus)
def get_votes(
    complaint_id: int,
    db: Session = Depends(get_db),
    current_user: Optional[db_models.User] = Depends(auth.get_current_user_optional),
):
    """Vote count, plus whether the caller has voted when signed in."""
    return VoteService.get_status(db, complaint_id, current_user)


@router.get("/{complaint_id}/votes/check", response_model=schemas.VoteCheck)
def check_vote(
    complaint_id: int,
    db: Session = Depends(get_db),
    current_user: db_models.User = Depends(auth.get_current_user),
):
    status = VoteService.get_status(db, complaint_id, current_user)
    return schemas.VoteCheck(has_voted=status.has_voted)
