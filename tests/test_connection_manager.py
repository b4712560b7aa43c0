"""Tests for the RabbitMQ consumer using in-memory stand-ins for aio-pika objects."""

from __future__ import annotations

import aio_pika
import anyio
import pytest
from aio_pika.exceptions import ChannelInvalidStateError

from notification_service.application.outcomes import Ack, DeadLetter, Retry
from notification_service.config import Settings
from notification_service.domain.entities import routing_keys
from notification_service.infrastructure.messaging import (
    BrokerConnectionManager,
    ConnectionState,
)

pytestmark = pytest.mark.anyio


class FakeExchange:
    def __init__(self, name: str) -> None:
        self.name = name
        self.published: list[tuple[aio_pika.Message, str]] = []
        self.fail = False

    async def publish(self, message, routing_key: str) -> None:
        if self.fail:
            raise ConnectionError("channel closed")
        self.published.append((message, routing_key))


class FakeQueue:
    def __init__(self, name: str) -> None:
        self.name = name
        self.bindings: list[str] = []
        self.consumer = None

    async def bind(self, exchange, routing_key: str) -> None:
        self.bindings.append(routing_key)

    async def consume(self, callback) -> str:
        self.consumer = callback
        return "ctag-1"


class FakeChannel:
    def __init__(self) -> None:
        self.close_callbacks: set = set()
        self.is_closed = False
        self.prefetch_count = None
        self.exchange: FakeExchange | None = None
        self.exchange_options: dict = {}
        self.default_exchange = FakeExchange("")
        self.queues: dict[str, FakeQueue] = {}
        self.queue_options: dict[str, dict] = {}

    async def set_qos(self, prefetch_count: int) -> None:
        self.prefetch_count = prefetch_count

    async def declare_exchange(self, name, type, durable=False) -> FakeExchange:
        self.exchange = FakeExchange(name)
        self.exchange_options = {"type": type, "durable": durable}
        return self.exchange

    async def declare_queue(self, name, durable=False, arguments=None) -> FakeQueue:
        self.queues[name] = FakeQueue(name)
        self.queue_options[name] = {"durable": durable, "arguments": arguments}
        return self.queues[name]

    async def close(self) -> None:
        self.is_closed = True


class FakeConnection:
    def __init__(self) -> None:
        self.close_callbacks: set = set()
        self.is_closed = False
        self.channel_obj = FakeChannel()

    async def channel(self) -> FakeChannel:
        return self.channel_obj

    async def close(self) -> None:
        self.is_closed = True

    def drop(self, exc: BaseException) -> None:
        """Simulate the broker closing the connection."""

        self.is_closed = True
        for callback in list(self.close_callbacks):
            callback(self, exc)


class FakeConnector:
    """Hands out fresh connections; the first ``failures`` calls raise."""

    def __init__(self, failures: int = 0) -> None:
        self.failures = failures
        self.calls: list[str] = []
        self.connections: list[FakeConnection] = []

    async def __call__(self, url: str) -> FakeConnection:
        self.calls.append(url)
        if len(self.calls) <= self.failures:
            raise ConnectionError("connection refused")
        connection = FakeConnection()
        self.connections.append(connection)
        return connection


class FakeMessage:
    def __init__(self, body: bytes = b"{}", headers=None, routing_key="placement.created") -> None:
        self.body = body
        self.headers = headers
        self.routing_key = routing_key
        self.content_type = "application/json"
        self.message_id = "msg-1"
        self.acked = False
        self.nacked: list[bool] = []
        self.channel_lost = False

    async def ack(self) -> None:
        if self.channel_lost:
            raise ChannelInvalidStateError("channel closed")
        self.acked = True

    async def nack(self, requeue: bool = True) -> None:
        if self.channel_lost:
            raise ChannelInvalidStateError("channel closed")
        self.nacked.append(requeue)


class StubRouter:
    def __init__(self, outcome) -> None:
        self.outcome = outcome
        self.calls: list[tuple[bytes, int]] = []

    def route_message(self, body, *, retry_count: int = 0):
        self.calls.append((body, retry_count))
        return self.outcome


@pytest.fixture()
def broker_settings() -> Settings:
    return Settings(
        rabbitmq_url="amqp://test/",
        consumer_prefetch=4,
        max_reconnect_attempts=2,
        reconnect_base_delay_ms=1,
        reconnect_max_delay_ms=2,
    )


async def _wait_for(predicate, timeout: float = 2.0) -> None:
    with anyio.fail_after(timeout):
        while not predicate():
            await anyio.sleep(0.005)


async def test_connect_declares_the_topology(broker_settings):
    """The exchange is a durable topic, the queue is bound to every event type and
    the retry queue dead-letters back into it."""

    connector = FakeConnector()
    manager = BrokerConnectionManager(StubRouter(Ack()), broker_settings, connector=connector)

    await manager.connect()

    channel = connector.connections[0].channel_obj
    assert manager.state is ConnectionState.CONNECTED
    assert manager.is_connected()
    assert connector.calls == ["amqp://test/"]
    assert channel.prefetch_count == 4
    assert channel.exchange.name == broker_settings.events_exchange
    assert channel.exchange_options == {"type": aio_pika.ExchangeType.TOPIC, "durable": True}
    queue = channel.queues[broker_settings.events_queue]
    assert channel.queue_options[queue.name] == {"durable": True, "arguments": None}
    assert queue.bindings == routing_keys()
    assert queue.consumer is not None
    retry_queue = channel.queues[broker_settings.events_retry_queue]
    assert retry_queue.bindings == []
    assert retry_queue.consumer is None
    assert channel.queue_options[retry_queue.name] == {
        "durable": True,
        "arguments": {
            "x-dead-letter-exchange": "",
            "x-dead-letter-routing-key": broker_settings.events_queue,
        },
    }

    await manager.close()


async def test_failed_connects_back_off_and_give_up(broker_settings, caplog):
    connector = FakeConnector(failures=99)
    manager = BrokerConnectionManager(StubRouter(Ack()), broker_settings, connector=connector)

    with caplog.at_level("INFO"):
        await manager.connect()
        await _wait_for(lambda: len(connector.calls) == 3 and manager.state is ConnectionState.DISCONNECTED)

    assert "Reconnecting to RabbitMQ in 1ms (attempt 1/2)" in caplog.text
    assert "Reconnecting to RabbitMQ in 2ms (attempt 2/2)" in caplog.text
    critical = [record for record in caplog.records if record.levelname == "CRITICAL"]
    assert len(critical) == 1
    assert not manager.is_connected()

    await anyio.sleep(0.02)
    assert len(connector.calls) == 3


async def test_recovers_after_a_transient_failure(broker_settings):
    connector = FakeConnector(failures=1)
    manager = BrokerConnectionManager(StubRouter(Ack()), broker_settings, connector=connector)

    await manager.connect()
    assert manager.state is ConnectionState.RECONNECTING

    await _wait_for(lambda: manager.state is ConnectionState.CONNECTED)
    assert manager.reconnect_attempts == 0

    await manager.close()


async def test_lost_connection_triggers_a_reconnect(broker_settings):
    connector = FakeConnector()
    manager = BrokerConnectionManager(StubRouter(Ack()), broker_settings, connector=connector)
    await manager.connect()

    connector.connections[0].drop(ConnectionError("broker restarted"))

    assert manager.state is ConnectionState.RECONNECTING
    assert not manager.is_connected()
    await _wait_for(lambda: len(connector.connections) == 2 and manager.is_connected())
    assert manager.state is ConnectionState.CONNECTED

    await manager.close()


async def test_close_callbacks_from_stale_connections_are_ignored(broker_settings):
    connector = FakeConnector()
    manager = BrokerConnectionManager(StubRouter(Ack()), broker_settings, connector=connector)
    await manager.connect()

    manager._on_connection_closed(FakeConnection(), ConnectionError("old"))

    assert manager.state is ConnectionState.CONNECTED
    await manager.close()


async def test_close_is_final(broker_settings):
    connector = FakeConnector()
    manager = BrokerConnectionManager(StubRouter(Ack()), broker_settings, connector=connector)
    await manager.connect()
    connection = connector.connections[0]

    await manager.close()
    await manager.connect()

    assert manager.state is ConnectionState.CLOSED
    assert connection.is_closed and connection.channel_obj.is_closed
    assert len(connector.calls) == 1


async def test_acknowledged_outcome_acks(broker_settings):
    router = StubRouter(Ack())
    manager = BrokerConnectionManager(router, broker_settings, connector=FakeConnector())
    message = FakeMessage(body=b'{"event_type": "placement.created"}', headers={"x-retry-count": 2})

    outcome = await manager.handle_message(message)

    assert outcome == Ack()
    assert message.acked is True
    assert router.calls == [(b'{"event_type": "placement.created"}', 2)]


async def test_dead_letter_rejects_without_requeue(broker_settings):
    manager = BrokerConnectionManager(
        StubRouter(DeadLetter("candidate cand-9 not found")), broker_settings, connector=FakeConnector()
    )
    message = FakeMessage()

    await manager.handle_message(message)

    assert message.nacked == [False]
    assert message.acked is False


async def test_retry_goes_back_to_this_service_only(broker_settings):
    """The copy skips the shared exchange so other consumers never see it twice."""

    connector = FakeConnector()
    manager = BrokerConnectionManager(
        StubRouter(Retry(delay=0, reason="smtp down")), broker_settings, connector=connector
    )
    await manager.connect()
    message = FakeMessage(headers={"x-retry-count": 1, "trace": "abc"})

    await manager.handle_message(message)

    channel = connector.connections[0].channel_obj
    assert channel.exchange.published == []
    [(republished, routing_key)] = channel.default_exchange.published
    assert routing_key == broker_settings.events_queue
    assert republished.body == message.body
    assert republished.expiration is None
    assert republished.headers["x-retry-count"] == 2
    assert republished.headers["trace"] == "abc"
    assert message.acked is True
    assert message.nacked == []

    await manager.close()


async def test_delayed_retry_waits_in_the_retry_queue(broker_settings):
    """The original is acked at once; the copy's expiration carries the delay."""

    connector = FakeConnector()
    manager = BrokerConnectionManager(
        StubRouter(Retry(delay=30, reason="smtp down")), broker_settings, connector=connector
    )
    await manager.connect()
    message = FakeMessage()

    with anyio.fail_after(1):
        await manager.handle_message(message)

    [(republished, routing_key)] = connector.connections[0].channel_obj.default_exchange.published
    assert routing_key == broker_settings.events_retry_queue
    assert republished.expiration == 30
    assert republished.headers["x-retry-count"] == 1
    assert message.acked is True

    await manager.close()


async def test_retry_without_a_channel_requeues(broker_settings):
    manager = BrokerConnectionManager(
        StubRouter(Retry(delay=0, reason="smtp down")), broker_settings, connector=FakeConnector()
    )
    message = FakeMessage()

    await manager.handle_message(message)

    assert message.nacked == [True]
    assert message.acked is False


async def test_retry_requeues_when_republishing_fails(broker_settings):
    connector = FakeConnector()
    manager = BrokerConnectionManager(
        StubRouter(Retry(delay=0, reason="smtp down")), broker_settings, connector=connector
    )
    await manager.connect()
    connector.connections[0].channel_obj.default_exchange.fail = True
    message = FakeMessage()

    await manager.handle_message(message)

    assert message.nacked == [True]
    assert message.acked is False
    await manager.close()


@pytest.mark.parametrize(
    "outcome", [Ack(), DeadLetter("candidate cand-9 not found")], ids=["ack", "dead-letter"]
)
async def test_settling_on_a_lost_channel_is_logged(broker_settings, caplog, outcome):
    manager = BrokerConnectionManager(StubRouter(outcome), broker_settings, connector=FakeConnector())
    message = FakeMessage()
    message.channel_lost = True

    with caplog.at_level("ERROR"):
        assert await manager.handle_message(message) == outcome

    assert "Could not" in caplog.text
    assert "msg-1" in caplog.text
    assert message.acked is False
