from enum import Enum

from pydantic import BaseModel, EmailStr, Field, ConfigDict, field_validator
from datetime import datetime
from typing import Any, Optional, List
from repositories.db_models import ComplaintCategory, ComplaintStatus, UserRole


class RewardsAction(str, Enum):
    """Actions accepted by the rewards service."""

    SUBMITTED_COMPLAINT = "SUBMITTED_COMPLAINT"
    COMPLAINT_RESOLVED = "COMPLAINT_RESOLVED"
    ADDED_COMMENT = "ADDED_COMMENT"
    RECEIVED_VOTE = "RECEIVED_VOTE"
    UPDATE_STATS = "UPDATE_STATS"
    UNLOCK_BADGE = "UNLOCK_BADGE"
    ADD_POINTS = "ADD_POINTS"


# User Schemas
class UserBase(BaseModel):
    email: str
    first_name: str = ""
    last_name: str = ""


class User(UserBase):
    id: int
    external_id: Optional[str] = None
    full_name: str
    role: UserRole
    is_active: bool
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class UserProfile(User):
    phone: Optional[str] = None
    address: Optional[str] = None
    bio: Optional[str] = None
    notify_email: bool = True
    notify_push: bool = False


class UserProfileUpdate(BaseModel):
    first_name: Optional[str] = Field(default=None, max_length=100)
    last_name: Optional[str] = Field(default=None, max_length=100)
    phone: Optional[str] = Field(default=None, max_length=30)
    address: Optional[str] = Field(default=None, max_length=255)
    bio: Optional[str] = Field(default=None, max_length=2000)
    notify_email: Optional[bool] = None
    notify_push: Optional[bool] = None


class UserAdminUpdate(UserProfileUpdate):
    """Profile update made by an admin; may also change the role."""

    role: Optional[UserRole] = None
    is_active: Optional[bool] = None


class UserRoleResponse(BaseModel):
    email: str
    role: Optional[UserRole] = None
    is_admin: bool
    is_super_admin: bool


class CountResponse(BaseModel):
    count: int


# Complaint Schemas
class Location(BaseModel):
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)
    address: str = Field(default="", max_length=500)


class ComplaintBase(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: str = Field(..., min_length=1, max_length=5000)
    category: ComplaintCategory
    location: Location

    @field_validator("title", "description")
    @classmethod
    def not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("must not be blank")
        return v.strip()


class ComplaintCreate(ComplaintBase):
    images: List[str] = Field(default_factory=list, max_length=10)


class ComplaintUpdate(BaseModel):
    """Owner edits. Status and moderation flags are not editable here."""

    title: Optional[str] = Field(default=None, min_length=1, max_length=200)
    description: Optional[str] = Field(default=None, min_length=1, max_length=5000)
    category: Optional[ComplaintCategory] = None
    location: Optional[Location] = None
    images: Optional[List[str]] = Field(default=None, max_length=10)


class ComplaintAdminUpdate(BaseModel):
    status: Optional[ComplaintStatus] = None
    is_visible: Optional[bool] = None
    is_fake: Optional[bool] = None
    admin_notes: Optional[str] = Field(default=None, max_length=5000)


class ComplaintStatusUpdate(BaseModel):
    status: ComplaintStatus
    admin_notes: Optional[str] = Field(default=None, max_length=5000)


class ComplaintAuthor(BaseModel):
    id: int
    full_name: str
    email: str

    model_config = ConfigDict(from_attributes=True)


class Complaint(BaseModel):
    id: int
    title: str
    description: str
    category: ComplaintCategory
    status: ComplaintStatus
    location: Location
    images: List[str]
    votes: int
    is_fake: bool
    is_visible: bool
    admin_notes: Optional[str] = None
    reported_to_super_admin: bool = False
    reported_at: Optional[datetime] = None
    user_id: int
    author: Optional[ComplaintAuthor] = None
    created_at: datetime
    updated_at: datetime


class Pagination(BaseModel):
    total: int
    page: int
    limit: int
    total_pages: int


class ComplaintList(BaseModel):
    complaints: List[Complaint]
    pagination: Pagination


class LongPendingComplaint(Complaint):
    age_days: int


# Vote Schemas
class VoteStatus(BaseModel):
    complaint_id: int
    votes: int
    has_voted: bool


class VoteCheck(BaseModel):
    has_voted: bool


# Comment Schemas
class CommentCreate(BaseModel):
    content: str = Field(..., max_length=2000)


class Comment(BaseModel):
    id: int
    complaint_id: int
    user_id: int
    content: str
    author_name: str
    created_at: datetime


# Feedback Schemas
class FeedbackCreate(BaseModel):
    complaint_id: int
    rating: int = Field(..., ge=1, le=5)
    comment: str = Field(default="", max_length=2000)


class Feedback(BaseModel):
    id: int
    complaint_id: int
    user_id: int
    rating: int
    comment: str
    author_name: str
    created_at: datetime


# Rewards Schemas
class Badge(BaseModel):
    id: str
    name: str
    description: str
    category: str
    unlocked: bool
    unlocked_at: Optional[datetime] = None
    progress: int = 0


class RewardsStats(BaseModel):
    total_complaints: int
    completed_complaints: int
    pending_complaints: int
    votes: int
    comments: int


class Rewards(BaseModel):
    user_id: int
    points: int
    level: int
    next_level_points: int
    badges: List[Badge]
    stats: RewardsStats
    updated_at: datetime


class RewardsUpdate(BaseModel):
    action: RewardsAction
    badge_id: Optional[str] = None
    value: Optional[int] = None


class RewardsUpdateResult(BaseModel):
    rewards: Rewards
    points_added: int
    level_up: bool
    new_achievement: bool


# Admin Schemas
class AdminStats(BaseModel):
    total_complaints: int
    pending: int
    in_progress: int
    completed: int
    rejected: int
    total_users: int
    total_votes: int
    total_comments: int
    total_feedback: int


class AdminEmailRequest(BaseModel):
    email: EmailStr


class AdminUser(BaseModel):
    id: int
    email: str
    full_name: str
    role: UserRole
    is_super_admin: bool

    model_config = ConfigDict(from_attributes=True)


class ReportResult(BaseModel):
    complaint_id: int
    reported_to_super_admin: bool
    reported_at: Optional[datetime] = None
    email_sent: bool


# Upload Schemas
class UploadResult(BaseModel):
    secure_url: str
    public_id: str
    width: Optional[int] = None
    height: Optional[int] = None
    format: Optional[str] = None


# Config Schemas
class MapConfig(BaseModel):
    provider: str
    api_key: str


# Webhook Schemas
class WebhookAck(BaseModel):
    success: bool = True
    event_type: str
    handled: bool
    detail: Optional[dict[str, Any]] = None
