"""WSGI middleware that writes one access log record per HTTP request."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Iterable, Iterator
from dataclasses import dataclass
from typing import Any

WSGIApp = Callable[[dict, Callable[..., Any]], Iterable[bytes]]


@dataclass
class _Exchange:
    status_code: int = 0
    size: int = 0


def _request_uri(environ: dict[str, Any]) -> str:
    uri = environ.get("REQUEST_URI") or environ.get("RAW_URI")
    if uri:
        return uri
    path = environ.get("SCRIPT_NAME", "") + environ.get("PATH_INFO", "")
    query = environ.get("QUERY_STRING", "")
    return f"{path}?{query}" if query else path or "/"


def _content_length(environ: dict[str, Any]) -> int:
    raw = environ.get("CONTENT_LENGTH", "")
    if not raw:
        return 0
    try:
        return int(raw)
    except ValueError:
        return -1


def _parse_status(status: str) -> int:
    try:
        return int(status.split(None, 1)[0])
    except (IndexError, ValueError):
        return 0


class AccessLogMiddleware:
    """Wrap a WSGI application and log each request once its response is sent.

    Each record has the message ``"access"`` and carries its fields as the
    ``fields`` attribute of the log record.
    """

    def __init__(self, app: WSGIApp, logger: logging.Logger | None = None) -> None:
        self.app = app
        self.logger = logger if logger is not None else logging.getLogger("topolvm.access")

    def __call__(self, environ: dict[str, Any], start_response: Callable[..., Any]) -> Iterator[bytes]:
        started = time.monotonic()
        exchange = _Exchange()

        def recording_start_response(status: str, headers: list, exc_info: Any = None) -> Callable[[bytes], Any]:
            exchange.status_code = _parse_status(status)
            if exc_info is None:
                write = start_response(status, headers)
            else:
                write = start_response(status, headers, exc_info)

            def counting_write(data: bytes) -> Any:
                exchange.size += len(data)
                return write(data)

            return counting_write

        result = self.app(environ, recording_start_response)
        return self._stream(result, environ, exchange, started)

    def _stream(
        self,
        result: Iterable[bytes],
        environ: dict[str, Any],
        exchange: _Exchange,
        started: float,
    ) -> Iterator[bytes]:
        try:
            for chunk in result:
                exchange.size += len(chunk)
                yield chunk
        finally:
            close = getattr(result, "close", None)
            if close is not None:
                close()
            self._log(environ, exchange, time.monotonic() - started)

    def _log(self, environ: dict[str, Any], exchange: _Exchange, elapsed: float) -> None:
        fields: dict[str, Any] = {
            "type": "access",
            "response_time": elapsed,
            "protocol": environ.get("SERVER_PROTOCOL", ""),
            "http_status_code": exchange.status_code,
            "http_method": environ.get("REQUEST_METHOD", ""),
            "url": _request_uri(environ),
            "http_host": environ.get("HTTP_HOST", ""),
            "request_size": _content_length(environ),
            "response_size": exchange.size,
        }
        remote = environ.get("REMOTE_ADDR")
        if remote:
            fields["remote_ipaddr"] = remote
        user_agent = environ.get("HTTP_USER_AGENT", "")
        if user_agent:
            fields["http_user_agent"] = user_agent
        self.logger.info("access", extra={"fields": fields})