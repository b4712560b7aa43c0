"""Pydantic models describing the health check."""

from __future__ import annotations

from pydantic import BaseModel


class BrokerHealth(BaseModel):
    connected: bool
    state: str


class HealthRead(BaseModel):
    status: str
    broker: BrokerHealth


__all__ = ["BrokerHealth", "HealthRead"]
