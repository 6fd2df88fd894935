"""Badge catalog for the rewards system."""

from enum import Enum
from typing import NamedTuple


class BadgeConfig(NamedTuple):
    """Static definition of a badge."""

    badge_id: str
    name: str
    description: str
    category: str  # complaints, community, engagement
    bonus_points: int
    threshold: int | None  # None: unlocked on creation or by hand only


class BadgeType(Enum):
    """
    Every badge a citizen can earn.

    ``threshold`` is compared against the matching rewards stat
    (see ``services.rewards_service.BADGE_STATS``).
    """

    NEWCOMER = BadgeConfig(
        "newcomer", "Newcomer", "Joined the community", "engagement", 10, None
    )
    FIRST_COMPLAINT = BadgeConfig(
        "first-complaint",
        "First Step",
        "Submitted your first complaint",
        "complaints",
        25,
        1,
    )
    RESOLUTION_PIONEER = BadgeConfig(
        "resolution-pioneer",
        "Resolution Pioneer",
        "Had your first complaint resolved",
        "complaints",
        25,
        1,
    )
    ACTIVE_CITIZEN = BadgeConfig(
        "active-citizen",
        "Active Citizen",
        "Submitted 5 complaints",
        "complaints",
        50,
        5,
    )
    FEEDBACK_PROVIDER = BadgeConfig(
        "feedback-provider",
        "Feedback Provider",
        "Commented on 5 complaints",
        "community",
        25,
        5,
    )
    PROBLEM_SOLVER = BadgeConfig(
        "problem-solver",
        "Problem Solver",
        "Had 10 complaints resolved",
        "complaints",
        75,
        10,
    )
    COMMUNITY_PILLAR = BadgeConfig(
        "community-pillar",
        "Community Pillar",
        "Received 50 votes on your complaints",
        "community",
        50,
        50,
    )
    TOP_REPORTER = BadgeConfig(
        "top-reporter",
        "Top Reporter",
        "Recognized by the city team as a top reporter",
        "engagement",
        75,
        None,
    )

    @property
    def badge_id(self) -> str:
        return self.value.badge_id

    @property
    def bonus_points(self) -> int:
        return self.value.bonus_points

    @property
    def threshold(self) -> int | None:
        return self.value.threshold

    @classmethod
    def from_id(cls, badge_id: str) -> "BadgeType | None":
        """Look up a badge by its public id, or None when unknown."""
        for badge in cls:
            if badge.badge_id == badge_id:
                return badge
        return None
