"""
In-process dispatcher for complaint lifecycle events.

Services publish an event after their primary write has been committed.
Subscribers (rewards bookkeeping, email notifications) run synchronously in
the same request. A failing subscriber is logged and its session changes are
rolled back; the failure never reaches the caller.
"""

from collections import defaultdict
from collections.abc import Callable
from enum import Enum
from typing import Any

from loguru import logger
from sqlalchemy.orm import Session


class DomainEvent(str, Enum):
    COMPLAINT_SUBMITTED = "complaint.submitted"
    COMPLAINT_STATUS_CHANGED = "complaint.status_changed"
    COMPLAINT_RESOLVED = "complaint.resolved"
    VOTE_RECEIVED = "vote.received"
    COMMENT_ADDED = "comment.added"
    USER_REGISTERED = "user.registered"


Subscriber = Callable[[Session, dict[str, Any]], None]


class EventDispatcher:
    """Registry of subscribers keyed by event."""

    _subscribers: dict[DomainEvent, list[Subscriber]] = defaultdict(list)

    @classmethod
    def subscribe(cls, event: DomainEvent, handler: Subscriber) -> None:
        if handler not in cls._subscribers[event]:
            cls._subscribers[event].append(handler)

    @classmethod
    def unsubscribe(cls, event: DomainEvent, handler: Subscriber) -> None:
        if handler in cls._subscribers[event]:
            cls._subscribers[event].remove(handler)

    @classmethod
    def subscribers(cls, event: DomainEvent) -> list[Subscriber]:
        return list(cls._subscribers[event])

    @classmethod
    def publish(cls, db: Session, event: DomainEvent, **payload: Any) -> int:
        """
        Deliver an event to every subscriber.

        Args:
            db: Session of the current request
            event: Event being published
            **payload: Event data passed to subscribers as a dict

        Returns:
            Number of subscribers that completed without raising
        """
        delivered = 0
        for handler in cls.subscribers(event):
            name = getattr(handler, "__qualname__", repr(handler))
            try:
                handler(db, payload)
                delivered += 1
            except Exception:
                logger.exception(f"Subscriber {name} failed for {event.value}")
                db.rollback()
        logger.debug(
            f"Published {event.value} to {delivered}/"
            f"{len(cls._subscribers[event])} subscribers"
        )
        return delivered

    @classmethod
    def clear(cls) -> None:
        cls._subscribers.clear()
