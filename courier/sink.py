"""
Sink - the destination a Response writes to.

A sink accepts a status code, headers, body bytes and a terminating
signal. ``closed`` is the notification channel the streaming path polls
to learn that the peer went away.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, List, Optional, Protocol, Tuple, Union

from ._datastructures import HeaderSet, HeaderValue
from .faults import SinkClosedFault

logger = logging.getLogger("courier.sink")

Send = Callable[[dict], Awaitable[None]]
Receive = Callable[[], Awaitable[dict]]


class Sink(Protocol):
    """Contract a Response consumes from the server layer."""

    status_code: int

    @property
    def closed(self) -> bool:
        ...

    def set_header(self, name: str, value: HeaderValue) -> None:
        ...

    async def write(self, data: bytes) -> None:
        ...

    async def end(self) -> None:
        ...


class AsgiSink:
    """
    Sink over an ASGI ``send`` callable.

    Status and headers are buffered until the first ``write`` or ``end``,
    which emits ``http.response.start``. Every ``write`` is one
    ``http.response.body`` message with ``more_body=True``; ``end`` sends
    the terminating empty body. Each message is awaited before the call
    returns, so the server's flow control applies to every chunk.
    """

    def __init__(self, send: Send):
        self._send = send
        self.status_code = 200
        self._headers = HeaderSet()
        self._started = False
        self._ended = False
        self._disconnected = False
        self._watcher: Optional[asyncio.Task] = None

    @property
    def started(self) -> bool:
        return self._started

    @property
    def closed(self) -> bool:
        return self._ended or self._disconnected

    def set_header(self, name: str, value: HeaderValue) -> None:
        self._headers[name] = value

    def watch(self, receive: Receive) -> asyncio.Task:
        """
        Listen on ``receive`` for ``http.disconnect`` and mark the sink
        closed when it arrives. Only use this once the request body has
        been consumed; the watcher takes every remaining message.
        """
        self._watcher = asyncio.ensure_future(self._watch_disconnect(receive))
        return self._watcher

    async def _watch_disconnect(self, receive: Receive) -> None:
        while True:
            message = await receive()
            if message["type"] == "http.disconnect":
                logger.debug("Client disconnected")
                self._disconnected = True
                return

    def _prepare_headers(self) -> List[Tuple[bytes, bytes]]:
        """Prepare headers for ASGI (lower-cased latin-1 byte tuples)."""
        return [
            (name.lower().encode("latin-1"), str(value).encode("latin-1"))
            for name, value in self._headers.items()
        ]

    async def _start(self) -> None:
        self._started = True
        await self._send({
            "type": "http.response.start",
            "status": self.status_code,
            "headers": self._prepare_headers(),
        })

    async def write(self, data: Union[bytes, bytearray]) -> None:
        if self._ended:
            raise SinkClosedFault("write")
        if not self._started:
            await self._start()
        if not data:
            return
        await self._send({
            "type": "http.response.body",
            "body": bytes(data),
            "more_body": True,
        })

    async def end(self) -> None:
        if self._ended:
            raise SinkClosedFault("end")
        if not self._started:
            await self._start()
        self._ended = True
        if self._watcher is not None and not self._watcher.done():
            self._watcher.cancel()
        await self._send({
            "type": "http.response.body",
            "body": b"",
            "more_body": False,
        })

    def __repr__(self) -> str:
        return (
            f"<AsgiSink status={self.status_code} started={self._started} "
            f"closed={self.closed}>"
        )
