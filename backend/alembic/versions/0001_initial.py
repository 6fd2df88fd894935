"""initial complaint platform schema

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-16 00:00:00.000000

Creates users, complaints, votes, comments, feedback and rewards.
Enum columns store the enum member names, matching SQLAlchemy's default.
"""

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision = "0001_initial"
down_revision = None
branch_labels = None
depends_on = None

USER_ROLES = ("USER", "ADMIN", "SUPER_ADMIN")
COMPLAINT_STATUSES = ("PENDING", "IN_PROGRESS", "COMPLETED", "REJECTED")
COMPLAINT_CATEGORIES = (
    "POTHOLES",
    "ROAD_BREAKS",
    "SEWER_ISSUES",
    "WATER_SUPPLY",
    "ELECTRICITY",
    "GARBAGE",
    "OTHER",
)


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("external_id", sa.String(length=255), nullable=True),
        sa.Column("email", sa.String(), nullable=False),
        sa.Column("first_name", sa.String(length=100), nullable=False),
        sa.Column("last_name", sa.String(length=100), nullable=False),
        sa.Column("role", sa.Enum(*USER_ROLES, name="userrole"), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=True),
        sa.Column("phone", sa.String(length=30), nullable=True),
        sa.Column("address", sa.String(length=255), nullable=True),
        sa.Column("bio", sa.Text(), nullable=True),
        sa.Column("notify_email", sa.Boolean(), nullable=True),
        sa.Column("notify_push", sa.Boolean(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
    )
    op.create_index("ix_users_id", "users", ["id"])
    op.create_index("ix_users_email", "users", ["email"], unique=True)
    op.create_index("ix_users_external_id", "users", ["external_id"], unique=True)

    op.create_table(
        "complaints",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("title", sa.String(length=200), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column(
            "category",
            sa.Enum(*COMPLAINT_CATEGORIES, name="complaintcategory"),
            nullable=False,
        ),
        sa.Column(
            "status",
            sa.Enum(*COMPLAINT_STATUSES, name="complaintstatus"),
            nullable=False,
        ),
        sa.Column("latitude", sa.Float(), nullable=False),
        sa.Column("longitude", sa.Float(), nullable=False),
        sa.Column("address", sa.String(length=500), nullable=False),
        sa.Column("images", sa.JSON(), nullable=False),
        sa.Column("votes", sa.Integer(), nullable=False),
        sa.Column("is_fake", sa.Boolean(), nullable=True),
        sa.Column("is_visible", sa.Boolean(), nullable=True),
        sa.Column("admin_notes", sa.Text(), nullable=True),
        sa.Column("reported_to_super_admin", sa.Boolean(), nullable=True),
        sa.Column("reported_at", sa.DateTime(), nullable=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
    )
    op.create_index("ix_complaints_id", "complaints", ["id"])
    op.create_index(
        "ix_complaints_status_created", "complaints", ["status", "created_at"]
    )
    op.create_index("ix_complaints_user", "complaints", ["user_id"])
    op.create_index("ix_complaints_visible", "complaints", ["is_visible"])

    op.create_table(
        "votes",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "complaint_id", sa.Integer(), sa.ForeignKey("complaints.id"), nullable=False
        ),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.UniqueConstraint("complaint_id", "user_id", name="uq_vote_complaint_user"),
    )
    op.create_index("ix_votes_id", "votes", ["id"])
    op.create_index("ix_votes_complaint", "votes", ["complaint_id"])

    op.create_table(
        "comments",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "complaint_id", sa.Integer(), sa.ForeignKey("complaints.id"), nullable=False
        ),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=True),
    )
    op.create_index("ix_comments_id", "comments", ["id"])
    op.create_index(
        "ix_comments_complaint_created", "comments", ["complaint_id", "created_at"]
    )

    op.create_table(
        "feedback",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "complaint_id", sa.Integer(), sa.ForeignKey("complaints.id"), nullable=False
        ),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("rating", sa.Integer(), nullable=False),
        sa.Column("comment", sa.Text(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.UniqueConstraint(
            "complaint_id", "user_id", name="uq_feedback_complaint_user"
        ),
        sa.CheckConstraint("rating >= 1 AND rating <= 5", name="ck_feedback_rating"),
    )
    op.create_index("ix_feedback_id", "feedback", ["id"])

    op.create_table(
        "rewards",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False, unique=True
        ),
        sa.Column("points", sa.Integer(), nullable=False),
        sa.Column("level", sa.Integer(), nullable=False),
        sa.Column("badges", sa.JSON(), nullable=False),
        sa.Column("total_complaints", sa.Integer(), nullable=True),
        sa.Column("completed_complaints", sa.Integer(), nullable=True),
        sa.Column("pending_complaints", sa.Integer(), nullable=True),
        sa.Column("votes", sa.Integer(), nullable=True),
        sa.Column("comments", sa.Integer(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
    )
    op.create_index("ix_rewards_id", "rewards", ["id"])


def downgrade() -> None:
    """Drop every table. Data loss: development and test environments only."""
    op.drop_table("rewards")
    op.drop_table("feedback")
    op.drop_table("comments")
    op.drop_table("votes")
    op.drop_table("complaints")
    op.drop_table("users")
