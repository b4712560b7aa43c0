"""Dispatch of domain events to exactly one handler method."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from datetime import datetime

from sqlalchemy.orm import Session

from notification_service.config import Settings, get_settings
from notification_service.domain.entities import DomainEvent, EventKind, MalformedEventError
from notification_service.domain.exceptions import EntityNotFoundError, InvalidRecipientError
from notification_service.infrastructure.email import EmailProvider
from notification_service.utils import utc_now

from .handlers import HANDLER_CLASSES, DomainHandler, HandlerContext
from .outcomes import Ack, DeadLetter, Outcome, Retry

logger = logging.getLogger(__name__)

Route = tuple[type[DomainHandler], str]


def build_routes(handler_classes: Iterable[type[DomainHandler]]) -> dict[EventKind, Route]:
    """Merge the ``routes`` of every handler class into one dispatch table."""

    table: dict[EventKind, Route] = {}
    for handler_class in handler_classes:
        for kind, method_name in handler_class.routes.items():
            if kind is EventKind.UNKNOWN:
                raise ValueError(f"{handler_class.__name__} cannot handle unknown events")
            if kind in table:
                owner = table[kind][0].__name__
                raise ValueError(
                    f"{kind.value} is routed to both {owner} and {handler_class.__name__}"
                )
            if not callable(getattr(handler_class, method_name, None)):
                raise ValueError(f"{handler_class.__name__} has no method {method_name}")
            table[kind] = (handler_class, method_name)
    return table


class EventRouter:
    """Route each event to its handler inside a dedicated database session.

    Construction fails when a known :class:`EventKind` has no route, so adding
    an event type without a handler is caught at start-up.
    """

    def __init__(
        self,
        session_factory: Callable[[], Session],
        *,
        email_provider: EmailProvider,
        settings: Settings | None = None,
        clock: Callable[[], datetime] = utc_now,
        handler_classes: Iterable[type[DomainHandler]] = HANDLER_CLASSES,
    ) -> None:
        self._session_factory = session_factory
        self._email_provider = email_provider
        self._settings = settings or get_settings()
        self._clock = clock
        self._routes = build_routes(handler_classes)

        missing = [kind.value for kind in EventKind.known() if kind not in self._routes]
        if missing:
            raise ValueError(f"No handler registered for: {', '.join(sorted(missing))}")

    @property
    def routes(self) -> dict[EventKind, Route]:
        return dict(self._routes)

    def route_message(self, body: bytes | str, *, retry_count: int = 0) -> Outcome:
        """Parse a raw broker body and route it."""

        try:
            event = DomainEvent.from_json(body)
        except MalformedEventError as exc:
            logger.error("Dropping malformed event: %s", exc)
            return DeadLetter(str(exc))
        return self.route(event, retry_count=retry_count)

    def route(self, event: DomainEvent, *, retry_count: int = 0) -> Outcome:
        kind = event.kind
        if kind is EventKind.UNKNOWN:
            logger.debug("No handler for event type %s; acknowledging", event.event_type)
            return Ack("unhandled")

        handler_class, method_name = self._routes[kind]
        session: Session | None = None
        try:
            session = self._session_factory()
            context = HandlerContext.build(
                session,
                email_provider=self._email_provider,
                settings=self._settings,
                clock=self._clock,
            )
            handler = handler_class(context)
            getattr(handler, method_name)(event)
        except (EntityNotFoundError, InvalidRecipientError) as exc:
            logger.error(
                "Event %s cannot be delivered and will be dead-lettered: %s (payload=%s)",
                event.event_type,
                exc,
                event.payload,
            )
            return DeadLetter(str(exc))
        except Exception as exc:
            logger.exception(
                "Handler %s.%s failed for %s (attempt %d, payload=%s)",
                handler_class.__name__,
                method_name,
                event.event_type,
                retry_count + 1,
                event.payload,
            )
            if retry_count < self._settings.handler_max_retries:
                return Retry(delay=self._settings.handler_retry_delay_seconds, reason=str(exc))
            logger.error(
                "Event %s exhausted %d retries; dead-lettering",
                event.event_type,
                self._settings.handler_max_retries,
            )
            return DeadLetter(str(exc))
        finally:
            if session is not None:
                session.close()

        logger.debug("Handled %s with %s.%s", event.event_type, handler_class.__name__, method_name)
        return Ack()


__all__ = ["EventRouter", "build_routes"]
