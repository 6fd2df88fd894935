"""
Vote service for business logic.

A vote is stored twice: as a Vote row (one per complaint and user) and as the
denormalized ``Complaint.votes`` counter. The two writes are separate commits
without a transaction or lock, so concurrent requests for the same pair can
leave the counter out of step with the row count.

Hidden complaints are invisible here too: only their owner and admins can
see their votes or vote on them.
"""

from typing import Optional

from loguru import logger
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

import models.schemas as schemas
import repositories.db_models as db_models
from models.exceptions import DuplicateVoteException, VoteNotFoundException
from repositories.complaint_repository import ComplaintRepository
from repositories.vote_repository import VoteRepository
from services.complaint_service import ComplaintService
from services.event_dispatcher import DomainEvent, EventDispatcher


class VoteService:
    """Service for vote-related business logic."""

    @classmethod
    def vote(cls, db: Session, complaint_id: int, user: db_models.User) -> int:
        """
        Record a vote and bump the complaint's counter.

        Args:
            db: Database session
            complaint_id: Complaint ID
            user: Voting user

        Returns:
            The complaint's vote counter after the vote

        Raises:
            ComplaintNotFoundException: Missing or hidden from the voter
            DuplicateVoteException: User already voted (counter untouched)
        """
        complaint = ComplaintService.get_complaint(db, complaint_id, user)
        user_id = user.id
        vote_repo = VoteRepository(db)
        if vote_repo.get_by_complaint_and_user(complaint_id, user_id):
            raise DuplicateVoteException()

        try:
            vote_repo.create(
                db_models.Vote(complaint_id=complaint_id, user_id=user_id)
            )
        except IntegrityError:
            # Lost the race against a concurrent vote for the same pair
            db.rollback()
            raise DuplicateVoteException()

        complaint.votes += 1
        complaint = ComplaintRepository(db).update(complaint)
        votes = complaint.votes
        owner_id = complaint.user_id
        logger.debug(f"User {user_id} voted on complaint {complaint_id} ({votes})")

        if owner_id != user_id:
            EventDispatcher.publish(
                db,
                DomainEvent.VOTE_RECEIVED,
                complaint_id=complaint_id,
                owner_id=owner_id,
                voter_id=user_id,
            )
        return votes

    @classmethod
    def unvote(cls, db: Session, complaint_id: int, user: db_models.User) -> int:
        """
        Remove a vote and decrement the counter, never below zero.

        Rewards already granted for the vote are kept.

        Raises:
            ComplaintNotFoundException: Missing or hidden from the user
            VoteNotFoundException: User has not voted
        """
        complaint = ComplaintService.get_complaint(db, complaint_id, user)
        vote_repo = VoteRepository(db)
        vote = vote_repo.get_by_complaint_and_user(complaint_id, user.id)
        if not vote:
            raise VoteNotFoundException("You have not voted on this complaint")

        vote_repo.delete(vote)
        complaint.votes = max(0, complaint.votes - 1)
        complaint = ComplaintRepository(db).update(complaint)
        return complaint.votes

    @staticmethod
    def has_voted(db: Session, complaint_id: int, user_id: int) -> bool:
        return (
            VoteRepository(db).get_by_complaint_and_user(complaint_id, user_id)
            is not None
        )

    @classmethod
    def get_status(
        cls,
        db: Session,
        complaint_id: int,
        viewer: Optional[db_models.User] = None,
    ) -> schemas.VoteStatus:
        complaint = ComplaintService.get_complaint(db, complaint_id, viewer)
        return schemas.VoteStatus(
            complaint_id=complaint_id,
            votes=complaint.votes,
            has_voted=(
                cls.has_voted(db, complaint_id, viewer.id) if viewer is not None else False
            ),
        )
