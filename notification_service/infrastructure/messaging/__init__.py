"""Broker connectivity."""

from .connection import (
    BrokerConnectionManager,
    ConnectionSignal,
    ConnectionState,
    reconnect_delay_ms,
    transition,
)

__all__ = [
    "BrokerConnectionManager",
    "ConnectionSignal",
    "ConnectionState",
    "reconnect_delay_ms",
    "transition",
]
