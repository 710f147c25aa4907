"""Shared streaming HTTP machinery for the AI providers."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Iterator, Mapping, Protocol, runtime_checkable

import httpx
from tenacity import Retrying, retry_if_exception_type, stop_after_attempt, wait_exponential

from ...services.settings import redact_secret
from ..errors import ApiError, NetworkError, ParseError
from .sse import SseEventParser, SseParser

__all__ = ["AiProvider", "HttpStreamingProvider"]

LOGGER = logging.getLogger(__name__)

_MAX_ERROR_BODY = 500


@runtime_checkable
class AiProvider(Protocol):
    """Anything the worker can pull text deltas from."""

    name: str

    def stream(self, prompt: str) -> Iterator[str]:
        """Yield text deltas for ``prompt``; raise :class:`~jiq.ai.errors.AiError` on failure."""

    def close(self) -> None:
        """Release network resources."""


class HttpStreamingProvider(ABC):
    """POSTs a JSON body and decodes the Server-Sent Events answer.

    Subclasses describe the wire format through :meth:`build_url`,
    :meth:`build_headers`, :meth:`build_request_body` and
    :meth:`create_event_parser`. Connection attempts are retried for connect
    errors and timeouts; once the first byte has arrived a failure ends the
    stream. Reads never time out: a stalled stream ends only when the caller
    closes the generator.
    """

    name = "HTTP"

    def __init__(
        self,
        *,
        api_key: str | None,
        model: str,
        connect_timeout: float | None = 10.0,
        max_retries: int = 3,
        retry_min_seconds: float = 0.5,
        retry_max_seconds: float = 6.0,
        client: httpx.Client | None = None,
    ) -> None:
        self.api_key = api_key
        self.model = model
        self.max_retries = max_retries
        self.retry_min_seconds = retry_min_seconds
        self.retry_max_seconds = retry_max_seconds
        self._owns_client = client is None
        self._client = client or httpx.Client(timeout=httpx.Timeout(connect_timeout, read=None))

    # ------------------------------------------------------------------
    # Wire format hooks
    # ------------------------------------------------------------------
    @abstractmethod
    def build_url(self) -> str:
        """Return the streaming endpoint."""

    @abstractmethod
    def build_headers(self) -> Dict[str, str]:
        """Return provider authentication and versioning headers."""

    @abstractmethod
    def build_request_body(self, prompt: str) -> Dict[str, Any]:
        """Return the JSON payload for ``prompt``."""

    @abstractmethod
    def create_event_parser(self) -> SseEventParser:
        """Return the extractor for this provider's ``data:`` frames."""

    # ------------------------------------------------------------------
    # Streaming
    # ------------------------------------------------------------------
    def stream(self, prompt: str) -> Iterator[str]:
        """Stream text deltas for ``prompt``.

        Closing the generator closes the underlying response, which is how a
        cancelled request drops its connection.
        """

        url = self.build_url()
        headers = {"content-type": "application/json", **self.build_headers()}
        body = self.build_request_body(prompt)
        LOGGER.debug("Opening %s stream (model=%s, prompt=%s chars)", self.name, self.model, len(prompt))
        response = self._open(url, headers, body)
        parser = SseParser(self.create_event_parser())
        try:
            try:
                for chunk in response.iter_bytes():
                    for text in parser.feed(chunk):
                        yield text
                    if parser.done:
                        LOGGER.debug("%s stream signalled completion", self.name)
                        return
            except httpx.HTTPError as exc:
                raise NetworkError(self.name, _describe(exc)) from exc
            for text in parser.flush():
                yield text
        finally:
            response.close()

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def _open(self, url: str, headers: Mapping[str, str], body: Mapping[str, Any]) -> httpx.Response:
        try:
            request = self._client.build_request("POST", url, headers=headers, json=body)
        except (TypeError, ValueError) as exc:
            raise ParseError(self.name, f"Cannot encode request body: {exc}") from exc

        try:
            for attempt in self._retrying():
                with attempt:
                    response = self._client.send(request, stream=True)
        except httpx.HTTPError as exc:
            raise NetworkError(self.name, _describe(exc)) from exc

        if not response.is_success:
            try:
                detail = response.read().decode("utf-8", errors="replace").strip()
            except httpx.HTTPError:
                detail = ""
            finally:
                response.close()
            message = detail[:_MAX_ERROR_BODY] or response.reason_phrase or "request failed"
            LOGGER.warning("%s returned HTTP %s", self.name, response.status_code)
            raise ApiError(self.name, response.status_code, message)
        return response

    def _retrying(self) -> Retrying:
        return Retrying(
            reraise=True,
            stop=stop_after_attempt(max(1, self.max_retries)),
            wait=wait_exponential(
                multiplier=self.retry_min_seconds,
                max=self.retry_max_seconds,
            ),
            retry=retry_if_exception_type((httpx.ConnectError, httpx.TimeoutException)),
        )

    def __repr__(self) -> str:
        return f"{type(self).__name__}(model={self.model!r}, api_key={redact_secret(self.api_key)!r})"


def _describe(exc: Exception) -> str:
    return str(exc) or type(exc).__name__
