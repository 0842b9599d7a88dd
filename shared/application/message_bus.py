"""
Message Bus

Routes published domain events to every handler registered for their type.
"""

from typing import Callable, Dict, List, Type
import logging

from shared.domain.base import DomainEvent

logger = logging.getLogger(__name__)

EventHandler = Callable[[DomainEvent], None]


class MessageBus:
    """In-process event bus: one event type, any number of handlers."""

    def __init__(self):
        self._event_handlers: Dict[Type[DomainEvent], List[EventHandler]] = {}

    def register_event_handler(self, event_type: Type[DomainEvent], handler: EventHandler):
        handlers = self._event_handlers.setdefault(event_type, [])
        if handler not in handlers:
            handlers.append(handler)
            logger.debug("Registered event handler %s for %s", handler.__name__, event_type.__name__)

    def handlers_for(self, event_type: Type[DomainEvent]) -> List[EventHandler]:
        return list(self._event_handlers.get(event_type, []))

    def publish_events(self, events: List[DomainEvent]):
        """
        Deliver events in order

        A failing handler is logged and does not stop the remaining handlers.
        """
        for event in events:
            handlers = self.handlers_for(type(event))
            if not handlers:
                logger.debug("No handlers registered for event %s", event.name)
                continue

            for handler in handlers:
                try:
                    handler(event)
                except Exception:
                    logger.exception(
                        "Error in event handler %s for event %s (%s)",
                        handler.__name__, event.name, event.event_id,
                    )


# Global message bus instance
message_bus = MessageBus()
