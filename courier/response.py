"""
Response - HTTP response writer over a server sink.

Provides:
- Content-Type charset resolution from a static charset table
- One-shot ``send`` that sets headers and writes the body exactly once
- Chunked body writing with byte accounting
- Static file delivery through ``FileSender``
- Idempotent finalization: once ended, further sends are no-ops
- Fault translation for callers that want an error body instead of an abort
"""

from __future__ import annotations

import inspect
import json
import logging
import os
from enum import Enum
from typing import Any, Mapping, Optional, Union

from ._datastructures import HeaderSet, HeaderValue
from .faults import Fault, RedirectUnavailableFault, UnknownFormatFault
from .files import FileSender
from .formats import FormatRegistry, default_registry
from .sink import Sink

logger = logging.getLogger("courier.response")

# Type aliases
Content = Union[str, bytes, bytearray, None]
PathLike = Union[str, os.PathLike]

# Content types that must carry an explicit charset parameter
CHARSETS = {
    "application/json": "UTF-8",
    "text/javascript": "UTF-8",
    "text/html": "UTF-8",
}


class ResponseState(str, Enum):
    """
    Lifecycle of one response. Transitions only move forward;
    FINALIZED is terminal.
    """
    INIT = "init"
    HEADERS_SENT = "headers_sent"
    STREAMING = "streaming"
    FINALIZED = "finalized"


def _encode(content: Content) -> bytes:
    if content is None:
        return b""
    if isinstance(content, str):
        return content.encode("utf-8")
    return bytes(content)


class Response:
    """
    Decorated HTTP response owning one sink.

    The response holds the sink rather than extending it, and exposes only
    the lifecycle operations below. One response serves one request; its
    ``ended`` flag becomes true exactly once.

    Example:
        ```python
        response = Response(AsgiSink(send))
        await response.send("hello", 201, {"X-Foo": "bar"})
        await response.send("ignored")  # already ended, no-op
        ```
    """

    def __init__(
        self,
        sink: Sink,
        *,
        controller: Any = None,
        file_sender: Optional[FileSender] = None,
        formats: Optional[FormatRegistry] = None,
    ):
        """
        Initialize Response.

        Args:
            sink: Server-side destination for status, headers and body
            controller: Collaborator that performs redirects
            file_sender: Used by ``send_file`` (default: no caching)
            formats: Format registry used by ``send_formatted``
        """
        self.sink = sink
        self.controller = controller
        self.file_sender = file_sender or FileSender()
        self.formats = formats or default_registry

        self.state = ResponseState.INIT
        self.body_length = 0
        self.status_code: Optional[int] = None
        self.headers: Optional[HeaderSet] = None

    @property
    def ended(self) -> bool:
        return self.state is ResponseState.FINALIZED

    @property
    def headers_set(self) -> bool:
        return self.state is not ResponseState.INIT

    # ========================================================================
    # Headers
    # ========================================================================

    def set_headers(self, status_code: int, headers: Mapping[str, HeaderValue]) -> None:
        """
        Set the status code and every header on the sink.

        A Content-Type listed in ``CHARSETS`` gets ``; charset=<value>``
        appended. Must run before any body byte is written.
        """
        header_set = HeaderSet(headers)
        content_type = header_set.get("Content-Type")
        charset = CHARSETS.get(content_type) if isinstance(content_type, str) else None
        if charset:
            header_set["Content-Type"] = f"{content_type}; charset={charset}"

        self.sink.status_code = status_code
        for name, value in header_set.items():
            self.sink.set_header(name, value)

        self.status_code = status_code
        self.headers = header_set
        if self.state is ResponseState.INIT:
            self.state = ResponseState.HEADERS_SENT

    # ========================================================================
    # Body & finalization
    # ========================================================================

    async def send(
        self,
        content: Content = None,
        status_code: int = 200,
        headers: Optional[Mapping[str, HeaderValue]] = None,
    ) -> None:
        """
        Set headers and write ``content`` as the whole body.

        Does nothing if the response has already ended.
        """
        if self.ended:
            logger.debug(f"send() on ended response ignored (status={status_code})")
            return

        self.set_headers(status_code or 200, headers or {})
        await self.finalize(content)

    async def finalize(self, content: Content = None) -> None:
        """Write ``content`` then terminate the sink."""
        if self.ended:
            logger.debug("finalize() on ended response ignored")
            return

        await self.write_body(content)
        await self.finish()

    async def write_body(self, content: Content = None) -> None:
        """
        Append ``content`` to the body. ``None`` writes nothing but still
        counts as a write; ``str`` is encoded as UTF-8.
        """
        data = _encode(content)
        self.body_length += len(data)
        self.state = ResponseState.STREAMING
        await self.sink.write(data)

    async def finish(self) -> None:
        """
        Terminate the sink and mark the response ended.

        Callers guarantee this runs once; it does not check ``ended``.
        """
        await self.sink.end()
        self.state = ResponseState.FINALIZED

    # ========================================================================
    # Files
    # ========================================================================

    async def send_file(self, path: PathLike, options: Optional[Mapping[str, Any]] = None) -> None:
        """
        Stream the file at ``path`` with cache headers.

        Options:
            headers: Headers overriding the computed ones

        Raises:
            FileNotFoundFault: the file does not exist
            FileStatFault: the file could not be stat'ed
            FileStreamFault: reading failed after headers were sent
            ClientDisconnectFault: the sink closed mid-stream
        """
        if self.ended:
            logger.debug(f"send_file({path!s}) on ended response ignored")
            return

        await self.file_sender.send(self, path, options)

    # ========================================================================
    # Formats
    # ========================================================================

    async def send_formatted(
        self,
        content: Any,
        fmt: str,
        status_code: int = 200,
        headers: Optional[Mapping[str, HeaderValue]] = None,
    ) -> None:
        """
        Serialize ``content`` with the registered format ``fmt`` and send it
        under the format's preferred content type, unless ``headers``
        already name one.
        """
        if self.ended:
            logger.debug(f"send_formatted({fmt!r}) on ended response ignored")
            return

        descriptor = self.formats.get(fmt)
        if descriptor is None:
            raise UnknownFormatFault(fmt)

        body = self.formats.format_content(content, fmt, controller=self.controller)
        header_set = HeaderSet(headers)
        header_set.setdefault("Content-Type", descriptor.preferred_content_type)
        await self.send(body, status_code, header_set)

    # ========================================================================
    # Faults
    # ========================================================================

    async def send_fault(self, fault: Fault) -> bool:
        """
        Answer with a JSON error body for ``fault``.

        Uses the fault's status hint. Non-public faults are reported with a
        generic message. Returns False, writing nothing, once headers have
        been set.
        """
        if self.headers_set:
            logger.debug(f"send_fault({fault.code}) after headers were set ignored")
            return False

        body = {
            "error": fault.code,
            "message": fault.message if fault.public else "Internal Server Error",
        }
        await self.send(
            json.dumps(body),
            fault.status,
            {"Content-Type": "application/json"},
        )
        return True

    # ========================================================================
    # Redirects
    # ========================================================================

    async def redirect(self, url: str, status: Optional[int] = None) -> Any:
        """
        Hand a redirect to the attached controller.

        The controller chooses the status code when ``status`` is None and
        sets the Location header.
        """
        if self.controller is None:
            raise RedirectUnavailableFault(url)

        result = self.controller.redirect(url, status=status)
        if inspect.isawaitable(result):
            result = await result
        return result

    def __repr__(self) -> str:
        return (
            f"<Response state={self.state.value} status={self.status_code} "
            f"body_length={self.body_length}>"
        )


__all__ = [
    "Response",
    "ResponseState",
    "CHARSETS",
]
