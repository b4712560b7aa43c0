"""RabbitMQ consumer with bounded exponential-backoff reconnection."""

from __future__ import annotations

import asyncio
import functools
import logging
from collections.abc import Awaitable, Callable
from enum import Enum
from typing import Any, Protocol

import aio_pika
import anyio
import anyio.to_thread
from aio_pika.abc import AbstractIncomingMessage

from notification_service.application.outcomes import Ack, DeadLetter, Outcome, Retry
from notification_service.config import Settings, get_settings
from notification_service.domain.entities import routing_keys

logger = logging.getLogger(__name__)

RETRY_HEADER = "x-retry-count"


class ConnectionState(str, Enum):
    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"
    RECONNECTING = "reconnecting"
    CLOSED = "closed"


class ConnectionSignal(str, Enum):
    CONNECT = "connect"
    ESTABLISHED = "established"
    FAILED = "failed"
    LOST = "lost"
    GIVE_UP = "give_up"
    CLOSE = "close"


_TRANSITIONS: dict[tuple[ConnectionState, ConnectionSignal], ConnectionState] = {
    (ConnectionState.DISCONNECTED, ConnectionSignal.CONNECT): ConnectionState.CONNECTING,
    (ConnectionState.RECONNECTING, ConnectionSignal.CONNECT): ConnectionState.CONNECTING,
    (ConnectionState.CONNECTING, ConnectionSignal.ESTABLISHED): ConnectionState.CONNECTED,
    (ConnectionState.CONNECTING, ConnectionSignal.FAILED): ConnectionState.RECONNECTING,
    (ConnectionState.CONNECTED, ConnectionSignal.LOST): ConnectionState.RECONNECTING,
    (ConnectionState.RECONNECTING, ConnectionSignal.LOST): ConnectionState.RECONNECTING,
    (ConnectionState.RECONNECTING, ConnectionSignal.GIVE_UP): ConnectionState.DISCONNECTED,
}


class InvalidConnectionTransition(ValueError):
    """A signal was received in a state that does not accept it."""


def transition(state: ConnectionState, signal: ConnectionSignal) -> ConnectionState:
    """Return the state reached from ``state`` on ``signal``.

    ``CLOSE`` is accepted everywhere and ``CLOSED`` absorbs every signal.
    """

    if state is ConnectionState.CLOSED or signal is ConnectionSignal.CLOSE:
        return ConnectionState.CLOSED
    try:
        return _TRANSITIONS[(state, signal)]
    except KeyError:
        raise InvalidConnectionTransition(
            f"Signal {signal.value} is not valid in state {state.value}"
        ) from None


def reconnect_delay_ms(attempt: int, *, base_ms: int = 1000, max_ms: int = 30000) -> int:
    """Delay before reconnection ``attempt`` (counted from 1)."""

    if attempt < 1:
        raise ValueError("attempt must be >= 1")
    return min(base_ms * 2 ** (attempt - 1), max_ms)


def retry_count_of(headers: dict[str, Any] | None) -> int:
    value = (headers or {}).get(RETRY_HEADER, 0)
    try:
        return max(int(value), 0)
    except (TypeError, ValueError):
        return 0


class MessageRouter(Protocol):
    def route_message(self, body: bytes | str, *, retry_count: int = 0) -> Outcome: ...


Connector = Callable[[str], Awaitable[Any]]


class BrokerConnectionManager:
    """Own the broker connection, consume the events queue and stay connected.

    Each delivery is routed in a worker thread; at most ``consumer_prefetch``
    deliveries are routed at once.
    """

    def __init__(
        self,
        router: MessageRouter,
        settings: Settings | None = None,
        *,
        connector: Connector = aio_pika.connect,
    ) -> None:
        self._router = router
        self._settings = settings or get_settings()
        self._connector = connector

        self.state = ConnectionState.DISCONNECTED
        self.reconnect_attempts = 0
        self._healthy = False
        self._closing = False
        self._connection: Any = None
        self._channel: Any = None
        self._retry_exchange: Any = None
        self._reconnect_handle: asyncio.TimerHandle | None = None
        self._limiter: anyio.CapacityLimiter | None = None
        self._tasks: set[asyncio.Task] = set()

    def _signal(self, signal: ConnectionSignal) -> None:
        previous = self.state
        self.state = transition(previous, signal)
        if self.state is not previous:
            logger.debug("Broker connection %s -> %s", previous.value, self.state.value)

    @property
    def limiter(self) -> anyio.CapacityLimiter:
        if self._limiter is None:
            self._limiter = anyio.CapacityLimiter(self._settings.consumer_prefetch)
        return self._limiter

    def is_connected(self) -> bool:
        return (
            self._connection is not None
            and self._channel is not None
            and self._healthy
            and not getattr(self._connection, "is_closed", False)
        )

    async def connect(self) -> None:
        if self._closing or self.state in (ConnectionState.CONNECTING, ConnectionState.CONNECTED):
            logger.debug("Connect skipped; broker connection is %s", self.state.value)
            return

        self._signal(ConnectionSignal.CONNECT)
        logger.info("Connecting to RabbitMQ (attempt %d)", self.reconnect_attempts + 1)
        try:
            connection = await self._connector(self._settings.rabbitmq_url)
            self._connection = connection
            channel = await connection.channel()
            self._channel = channel
            await channel.set_qos(prefetch_count=self._settings.consumer_prefetch)

            exchange = await channel.declare_exchange(
                self._settings.events_exchange, aio_pika.ExchangeType.TOPIC, durable=True
            )
            queue = await channel.declare_queue(self._settings.events_queue, durable=True)
            for routing_key in routing_keys():
                await queue.bind(exchange, routing_key=routing_key)
            # Delayed retries wait here until their TTL sends them back to our queue.
            await channel.declare_queue(
                self._settings.events_retry_queue,
                durable=True,
                arguments={
                    "x-dead-letter-exchange": "",
                    "x-dead-letter-routing-key": self._settings.events_queue,
                },
            )
            self._retry_exchange = channel.default_exchange

            connection.close_callbacks.add(self._on_connection_closed)
            channel.close_callbacks.add(self._on_channel_closed)
            await queue.consume(self._on_message)
        except Exception as exc:
            logger.error(
                "Failed to connect to RabbitMQ (attempt %d): %s", self.reconnect_attempts + 1, exc
            )
            self._healthy = False
            if self._closing:
                raise
            self._signal(ConnectionSignal.FAILED)
            await self._release()
            self._schedule_reconnect()
            return

        self._healthy = True
        self.reconnect_attempts = 0
        self._signal(ConnectionSignal.ESTABLISHED)
        logger.info(
            "Consuming %s from exchange %s", self._settings.events_queue, self._settings.events_exchange
        )

    async def close(self) -> None:
        """Stop consuming and close the connection; in-flight handlers are not awaited."""

        self._closing = True
        self._cancel_reconnect()
        self._healthy = False
        await self._release()
        self._signal(ConnectionSignal.CLOSE)
        logger.info("Disconnected from RabbitMQ")

    def _on_connection_closed(self, sender: Any, exc: BaseException | None = None) -> None:
        if self._closing or sender is not self._connection:
            return
        logger.warning("RabbitMQ connection closed: %s", exc)
        self._lost()

    def _on_channel_closed(self, sender: Any, exc: BaseException | None = None) -> None:
        if self._closing or sender is not self._channel:
            return
        logger.warning("RabbitMQ channel closed: %s", exc)
        self._lost()

    def _lost(self) -> None:
        self._healthy = False
        if self.state in (ConnectionState.CONNECTED, ConnectionState.RECONNECTING):
            self._signal(ConnectionSignal.LOST)
        self._schedule_reconnect()

    def _schedule_reconnect(self) -> None:
        if self._closing or self._reconnect_handle is not None:
            return

        self.reconnect_attempts += 1
        if self.reconnect_attempts > self._settings.max_reconnect_attempts:
            logger.critical(
                "Giving up on RabbitMQ after %d reconnection attempts",
                self._settings.max_reconnect_attempts,
            )
            self._signal(ConnectionSignal.GIVE_UP)
            return

        delay_ms = reconnect_delay_ms(
            self.reconnect_attempts,
            base_ms=self._settings.reconnect_base_delay_ms,
            max_ms=self._settings.reconnect_max_delay_ms,
        )
        logger.info(
            "Reconnecting to RabbitMQ in %dms (attempt %d/%d)",
            delay_ms,
            self.reconnect_attempts,
            self._settings.max_reconnect_attempts,
        )
        loop = asyncio.get_running_loop()
        self._reconnect_handle = loop.call_later(delay_ms / 1000, self._fire_reconnect)

    def _fire_reconnect(self) -> None:
        self._reconnect_handle = None
        self._spawn(self._reconnect())

    async def _reconnect(self) -> None:
        await self._release()
        await self.connect()

    def _cancel_reconnect(self) -> None:
        if self._reconnect_handle is not None:
            self._reconnect_handle.cancel()
            self._reconnect_handle = None

    async def _release(self) -> None:
        channel, connection = self._channel, self._connection
        self._channel = self._connection = self._retry_exchange = None
        for resource in (channel, connection):
            if resource is None or getattr(resource, "is_closed", False):
                continue
            try:
                await resource.close()
            except Exception as exc:
                logger.debug("Error while closing %s: %s", type(resource).__name__, exc)

    def _spawn(self, coroutine: Awaitable[None]) -> None:
        task = asyncio.ensure_future(coroutine)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _on_message(self, message: AbstractIncomingMessage) -> None:
        self._spawn(self.handle_message(message))

    async def handle_message(self, message: AbstractIncomingMessage) -> Outcome:
        """Route one delivery and settle it according to the outcome."""

        retry_count = retry_count_of(message.headers)
        route = functools.partial(self._router.route_message, message.body, retry_count=retry_count)
        outcome = await anyio.to_thread.run_sync(route, limiter=self.limiter)

        if isinstance(outcome, Ack):
            await self._settle(message, "ack")
        elif isinstance(outcome, Retry):
            await self._republish(message, outcome, retry_count)
        elif isinstance(outcome, DeadLetter):
            logger.warning("Dead-lettering message %s: %s", message.message_id, outcome.reason)
            await self._settle(message, "nack", requeue=False)
        return outcome

    async def _settle(self, message: AbstractIncomingMessage, action: str, **kwargs: Any) -> None:
        # The broker redelivers whatever a dropped channel left unsettled.
        try:
            await getattr(message, action)(**kwargs)
        except Exception as exc:
            logger.error("Could not %s message %s: %s", action, message.message_id, exc)

    async def _republish(
        self, message: AbstractIncomingMessage, outcome: Retry, retry_count: int
    ) -> None:
        """Send a copy back to this service only, then ack the original.

        With a delay the copy waits in the retry queue until its expiration
        dead-letters it into the events queue; the original is acked at once.
        """

        exchange = self._retry_exchange
        if exchange is None:
            logger.warning("Cannot republish %s without a channel; requeueing", message.message_id)
            await self._settle(message, "nack", requeue=True)
            return

        headers = dict(message.headers or {})
        headers[RETRY_HEADER] = retry_count + 1
        if outcome.delay > 0:
            routing_key = self._settings.events_retry_queue
            expiration = outcome.delay
        else:
            routing_key = self._settings.events_queue
            expiration = None
        try:
            await exchange.publish(
                aio_pika.Message(
                    body=message.body,
                    headers=headers,
                    content_type=message.content_type or "application/json",
                    message_id=message.message_id,
                    delivery_mode=aio_pika.DeliveryMode.PERSISTENT,
                    expiration=expiration,
                ),
                routing_key=routing_key,
            )
        except Exception as exc:
            logger.error("Republishing %s failed: %s; requeueing", message.message_id, exc)
            await self._settle(message, "nack", requeue=True)
            return
        await self._settle(message, "ack")
        logger.info(
            "Scheduled retry %d of %s in %ss: %s",
            retry_count + 1,
            message.routing_key,
            outcome.delay,
            outcome.reason,
        )


__all__ = [
    "BrokerConnectionManager",
    "ConnectionSignal",
    "ConnectionState",
    "InvalidConnectionTransition",
    "RETRY_HEADER",
    "reconnect_delay_ms",
    "retry_count_of",
    "transition",
]
