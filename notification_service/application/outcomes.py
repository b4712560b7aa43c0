"""Explicit results of routing one broker message."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union


@dataclass(frozen=True)
class Ack:
    """The event was handled (or deliberately ignored) and can be removed."""

    reason: str = "handled"


@dataclass(frozen=True)
class Retry:
    """The event failed transiently and should be redelivered after ``delay`` seconds."""

    delay: float
    reason: str


@dataclass(frozen=True)
class DeadLetter:
    """The event can never succeed; reject it without requeueing."""

    reason: str


Outcome = Union[Ack, Retry, DeadLetter]

__all__ = ["Ack", "Retry", "DeadLetter", "Outcome"]
