"""Models package - settings, Pydantic schemas and domain types."""

from .badge_types import BadgeConfig, BadgeType

__all__ = [
    "BadgeConfig",
    "BadgeType",
]
