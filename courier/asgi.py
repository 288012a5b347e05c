"""
ASGI integration.

``ResponseApp`` adapts a handler of the form
``async def handler(scope, response)`` to the ASGI 3 interface, giving
each HTTP request its own :class:`~courier.response.Response` over an
:class:`~courier.sink.AsgiSink`.

Faults raised by the handler before any header was set are answered with
``Response.send_fault``. Once headers are set the status line may already
be on the wire, so the fault is logged and re-raised and the server drops
the connection.

``StaticFiles`` serves a directory through ``Response.send_file``.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Awaitable, Callable, Dict, Optional, Union

from .faults import Fault, FileNotFoundFault, PathTraversalFault, ResponseFault, Severity
from .files import FileSender
from .formats import FormatRegistry
from .response import Response
from .sink import AsgiSink

logger = logging.getLogger("courier.asgi")

Scope = Dict[str, Any]
Handler = Callable[[Scope, Response], Awaitable[None]]

_SEVERITY_LEVELS = {
    Severity.INFO: logging.INFO,
    Severity.WARN: logging.WARNING,
    Severity.ERROR: logging.ERROR,
    Severity.FATAL: logging.CRITICAL,
}


class ResponseApp:
    """
    ASGI application driving one handler.

    Args:
        handler: ``async (scope, response) -> None``
        file_sender: Shared by every response this app creates
        formats: Format registry handed to each response
        controller_factory: ``scope -> controller`` for redirects
        watch_disconnect: Hand ``receive`` to the sink so streaming stops
            when the client leaves. Only for handlers that ignore the
            request body.
    """

    def __init__(
        self,
        handler: Handler,
        *,
        file_sender: Optional[FileSender] = None,
        formats: Optional[FormatRegistry] = None,
        controller_factory: Optional[Callable[[Scope], Any]] = None,
        watch_disconnect: bool = False,
    ):
        self.handler = handler
        self.file_sender = file_sender or FileSender()
        self.formats = formats
        self.controller_factory = controller_factory
        self.watch_disconnect = watch_disconnect

    async def __call__(self, scope: Scope, receive, send) -> None:
        if scope["type"] == "lifespan":
            await self._lifespan(receive, send)
            return
        if scope["type"] != "http":
            raise RuntimeError(f"Unsupported ASGI scope type: {scope['type']}")

        sink = AsgiSink(send)
        controller = self.controller_factory(scope) if self.controller_factory else None
        response = Response(
            sink,
            controller=controller,
            file_sender=self.file_sender,
            formats=self.formats,
        )

        watcher = sink.watch(receive) if self.watch_disconnect else None
        try:
            await self._dispatch(scope, response)
        finally:
            if watcher is not None:
                if not watcher.done():
                    watcher.cancel()
                elif not watcher.cancelled() and watcher.exception() is not None:
                    logger.warning(f"Disconnect watcher failed: {watcher.exception()!r}")

    async def _dispatch(self, scope: Scope, response: Response) -> None:
        try:
            await self.handler(scope, response)
        except Fault as fault:
            level = _SEVERITY_LEVELS.get(fault.severity, logging.ERROR)
            if response.headers_set:
                logger.log(
                    level,
                    f"{scope['method']} {scope['path']} aborted after "
                    f"{response.body_length} bytes: {fault}",
                )
                raise
            logger.log(level, f"{scope['method']} {scope['path']} -> {fault.status}: {fault}")
            await response.send_fault(fault)
            return

        if response.ended:
            return
        if response.headers_set:
            await response.finish()
            return

        logger.error(f"{scope['method']} {scope['path']}: handler returned without responding")
        await response.send_fault(ResponseFault(
            "NO_RESPONSE",
            "Handler returned without sending a response",
        ))

    async def _lifespan(self, receive, send) -> None:
        while True:
            message = await receive()
            if message["type"] == "lifespan.startup":
                await send({"type": "lifespan.startup.complete"})
            elif message["type"] == "lifespan.shutdown":
                await send({"type": "lifespan.shutdown.complete"})
                return


class StaticFiles:
    """
    ASGI application serving files below ``directory``.

    ``GET`` streams the file; ``HEAD`` sends the same headers with no
    body. Paths escaping the directory answer 403, missing files 404.

    Args:
        directory: Root directory
        prefix: URL prefix stripped before resolving the path
        file_sender: Sender carrying the cache policy
        index: File served for directory paths
    """

    def __init__(
        self,
        directory: Union[str, Path],
        *,
        prefix: str = "/",
        file_sender: Optional[FileSender] = None,
        index: Optional[str] = "index.html",
    ):
        self.directory = Path(directory).resolve()
        self.prefix = "/" + prefix.strip("/")
        self.index = index
        self.file_sender = file_sender or FileSender()
        self.app = ResponseApp(
            self.handle,
            file_sender=self.file_sender,
            watch_disconnect=True,
        )

    async def __call__(self, scope: Scope, receive, send) -> None:
        await self.app(scope, receive, send)

    def resolve(self, url_path: str) -> Path:
        """
        Map a request path onto a file below the root.

        Raises:
            PathTraversalFault: the path resolves outside the root
            FileNotFoundFault: no regular file at the resolved location;
                also raised for paths outside the prefix and for NUL bytes
        """
        if "\x00" in url_path:
            raise FileNotFoundFault(url_path)

        relative = url_path
        if self.prefix != "/":
            if relative != self.prefix and not relative.startswith(self.prefix + "/"):
                raise FileNotFoundFault(url_path)
            relative = relative[len(self.prefix):]
        relative = relative.lstrip("/")

        candidate = (self.directory / relative).resolve()
        if candidate != self.directory and self.directory not in candidate.parents:
            raise PathTraversalFault(url_path)

        if candidate.is_dir() and self.index:
            candidate = candidate / self.index
        if not candidate.is_file():
            raise FileNotFoundFault(url_path)
        return candidate

    async def handle(self, scope: Scope, response: Response) -> None:
        method = scope["method"]
        if method not in ("GET", "HEAD"):
            raise ResponseFault(
                "METHOD_NOT_ALLOWED",
                f"Method {method} not allowed",
                status=405,
                public=True,
            )

        path = self.resolve(scope["path"])
        if method == "HEAD":
            meta = await self.file_sender.stat(path)
            response.set_headers(200, meta.headers())
            await response.finalize(None)
            return

        await response.send_file(path)
