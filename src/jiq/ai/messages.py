"""Messages exchanged between the session controller and the AI worker."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

__all__ = [
    "Query",
    "Cancel",
    "AiRequest",
    "Chunk",
    "Complete",
    "Cancelled",
    "Error",
    "AiResponse",
]


@dataclass(frozen=True, slots=True)
class Query:
    """Ask the worker to stream a completion for ``prompt``."""

    prompt: str
    request_id: int


@dataclass(frozen=True, slots=True)
class Cancel:
    """Ask the worker to abandon ``request_id`` at its next checkpoint."""

    request_id: int


AiRequest = Union[Query, Cancel]


@dataclass(frozen=True, slots=True)
class Chunk:
    text: str
    request_id: int


@dataclass(frozen=True, slots=True)
class Complete:
    request_id: int


@dataclass(frozen=True, slots=True)
class Cancelled:
    request_id: int


@dataclass(frozen=True, slots=True)
class Error:
    """Terminal failure for ``request_id``; ``message`` is user-facing."""

    message: str
    request_id: int


AiResponse = Union[Chunk, Complete, Cancelled, Error]
