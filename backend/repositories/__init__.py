"""
Repository pattern implementation for data access layer.
"""

from .base import BaseRepository
from .comment_repository import CommentRepository
from .complaint_repository import ComplaintRepository
from .feedback_repository import FeedbackRepository
from .rewards_repository import RewardsRepository
from .user_repository import UserRepository
from .vote_repository import VoteRepository

__all__ = [
    "BaseRepository",
    "CommentRepository",
    "ComplaintRepository",
    "FeedbackRepository",
    "RewardsRepository",
    "UserRepository",
    "VoteRepository",
]
