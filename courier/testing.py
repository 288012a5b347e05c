"""
Courier Testing - in-memory sink and ASGI helpers.

Usage:
    from courier.testing import RecordingSink
    from courier import Response

    sink = RecordingSink()
    await Response(sink).send("hello", 201, {"X-Foo": "bar"})

    assert sink.status_code == 201
    assert sink.body == b"hello"
    assert sink.ended
"""

from __future__ import annotations

import asyncio
from typing import Any, Dict, List, Optional, Tuple

from ._datastructures import HeaderSet, HeaderValue
from .faults import SinkClosedFault


class RecordingSink:
    """
    Sink that records every operation in order.

    ``events`` holds ``("status", code)``, ``("header", name, value)``,
    ``("write", data)`` and ``("end",)`` tuples. Setting
    ``close_after_writes`` makes the sink report ``closed`` once that
    many writes were accepted, simulating a client that goes away.
    """

    def __init__(self, *, close_after_writes: Optional[int] = None):
        self._status_code = 200
        self.headers = HeaderSet()
        self.chunks: List[bytes] = []
        self.events: List[Tuple[Any, ...]] = []
        self.ended = False
        self.end_count = 0
        self.close_after_writes = close_after_writes

    @property
    def status_code(self) -> int:
        return self._status_code

    @status_code.setter
    def status_code(self, value: int) -> None:
        self._status_code = value
        self.events.append(("status", value))

    @property
    def closed(self) -> bool:
        if self.ended:
            return True
        return self.close_after_writes is not None and len(self.chunks) >= self.close_after_writes

    @property
    def body(self) -> bytes:
        return b"".join(self.chunks)

    def set_header(self, name: str, value: HeaderValue) -> None:
        self.headers[name] = value
        self.events.append(("header", name, value))

    async def write(self, data: bytes) -> None:
        if self.ended:
            raise SinkClosedFault("write")
        self.chunks.append(bytes(data))
        self.events.append(("write", bytes(data)))

    async def end(self) -> None:
        self.end_count += 1
        if self.ended:
            raise SinkClosedFault("end")
        self.ended = True
        self.events.append(("end",))

    def kinds(self) -> List[str]:
        """Event kinds in order, e.g. ``["status", "header", "write", "end"]``."""
        return [event[0] for event in self.events]


def make_test_scope(
    method: str = "GET",
    path: str = "/",
    query_string: str = "",
    headers: Optional[List[tuple]] = None,
) -> Dict[str, Any]:
    """Build a minimal ASGI HTTP scope for testing."""
    raw_headers: list[tuple[bytes, bytes]] = []
    if headers:
        for name, value in headers:
            raw_headers.append((
                name.encode("latin-1") if isinstance(name, str) else name,
                value.encode("latin-1") if isinstance(value, str) else value,
            ))

    return {
        "type": "http",
        "asgi": {"version": "3.0"},
        "http_version": "1.1",
        "method": method,
        "scheme": "http",
        "path": path,
        "raw_path": path.encode("utf-8"),
        "query_string": query_string.encode("utf-8"),
        "root_path": "",
        "headers": raw_headers,
        "client": ("127.0.0.1", 12345),
        "server": ("127.0.0.1", 8000),
    }


def make_test_receive(body: bytes = b"", *, disconnect: bool = True):
    """
    Create an ASGI receive callable.

    After the body has been delivered the callable reports
    ``http.disconnect`` when ``disconnect`` is true; otherwise it blocks
    like a client that keeps the connection open.
    """
    messages = [{"type": "http.request", "body": body, "more_body": False}]
    idx = 0

    async def receive():
        nonlocal idx
        if idx < len(messages):
            msg = messages[idx]
            idx += 1
            return msg
        if not disconnect:
            await asyncio.Event().wait()
        return {"type": "http.disconnect"}

    return receive


def make_test_send():
    """Create an ASGI send callable that collects messages into a list."""
    messages: List[Dict[str, Any]] = []

    async def send(message: Dict[str, Any]) -> None:
        messages.append(message)

    return send, messages
