"""
Unit of Work Pattern

Wraps a storage transaction and guarantees that domain events collected
from aggregates are published only after the transaction committed.
"""

from abc import ABC, abstractmethod
from typing import List
import logging

from django.db import transaction

from shared.domain.base import Aggregate, DomainEvent

logger = logging.getLogger(__name__)


class AbstractUnitOfWork(ABC):
    """Transaction boundary that publishes collected events after commit."""

    def __init__(self):
        self._events: List[DomainEvent] = []

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if exc_type is None:
            self.commit()
        else:
            self.rollback()

    def collect_events(self, aggregate: Aggregate):
        events = aggregate.pull_events()
        if events:
            self._events.extend(events)
            logger.debug(
                "Collected %d events from %s %s",
                len(events), aggregate.__class__.__name__, aggregate.id,
            )

    def rollback(self):
        if self._events:
            logger.warning("Rolling back, discarding %d events", len(self._events))
        self._events.clear()

    @abstractmethod
    def commit(self):
        """Make the work durable and schedule event publication."""

    def _take_events(self) -> List[DomainEvent]:
        events, self._events = self._events, []
        return events

    @staticmethod
    def _publish(events: List[DomainEvent]):
        from shared.application.message_bus import message_bus

        try:
            message_bus.publish_events(events)
        except Exception:
            # the work is already durable; a failed publication must not undo it
            logger.exception("Error publishing %d events", len(events))


class DjangoUnitOfWork(AbstractUnitOfWork):
    """
    Unit of work over ``django.db.transaction.atomic``

    Usage:
        with DjangoUnitOfWork() as uow:
            row = BookingRecord.objects.create(...)
            uow.collect_events(reservation)
        # events are published through transaction.on_commit
    """

    def __init__(self, using: str | None = None):
        super().__init__()
        self._atomic = transaction.atomic(using=using)
        self._using = using

    def __enter__(self):
        self._atomic.__enter__()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        try:
            super().__exit__(exc_type, exc_val, exc_tb)
        finally:
            self._atomic.__exit__(exc_type, exc_val, exc_tb)

    def commit(self):
        events = self._take_events()
        if events:
            transaction.on_commit(lambda: self._publish(events), using=self._using)


class ImmediateUnitOfWork(AbstractUnitOfWork):
    """Unit of work for in-process storage: committing publishes right away."""

    def commit(self):
        events = self._take_events()
        if events:
            self._publish(events)
