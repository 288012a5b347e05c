"""
FileSender - static file delivery with cache headers and bounded-memory
streaming.

Headers are computed from a stat of the file and the configured
expiration for its content type; the body is read in fixed-size chunks
and each chunk is handed to the sink before the next one is read.

Failures are not turned into HTTP responses here. A stat failure raises
before anything reaches the sink; a read failure after the headers were
set leaves the response unfinished and surfaces as a truncated reply.
The file is opened before any header is set, so an unreadable file is
reported while an error response can still be sent.
"""

from __future__ import annotations

import logging
import os
import time
from dataclasses import dataclass
from email.utils import formatdate
from typing import TYPE_CHECKING, Any, Callable, Mapping, Optional, Union

import aiofiles
import aiofiles.os

from ._datastructures import HeaderSet
from .config import DEFAULT_CHUNK_SIZE, CacheConfig
from .faults import (
    ClientDisconnectFault,
    FileNotFoundFault,
    FileOpenFault,
    FileStatFault,
    FileStreamFault,
)
from . import mime

if TYPE_CHECKING:
    from .response import Response

logger = logging.getLogger("courier.files")

PathLike = Union[str, os.PathLike]


@dataclass
class FileMetadata:
    """Per-request facts about the file being sent."""

    size: int
    mtime: float
    content_type: str
    expire_seconds: int
    requested_at: float

    @property
    def expires_at(self) -> float:
        return self.requested_at + self.expire_seconds

    @property
    def last_modified(self) -> str:
        return formatdate(self.mtime, usegmt=True)

    @property
    def expires(self) -> str:
        return formatdate(self.expires_at, usegmt=True)

    def headers(self) -> HeaderSet:
        return HeaderSet({
            "Content-Type": self.content_type,
            "Last-Modified": self.last_modified,
            "Expires": self.expires,
            "Cache-Control": f"max-age={self.expire_seconds}",
            "Content-Length": self.size,
        })


def _file_size(stat_result: os.stat_result) -> int:
    """Reported size, else allocated blocks for filesystems that report 0."""
    if stat_result.st_size:
        return stat_result.st_size
    blksize = getattr(stat_result, "st_blksize", 0) or 0
    blocks = getattr(stat_result, "st_blocks", 0) or 0
    return blksize * blocks


class FileSender:
    """
    Sends files from disk through a :class:`~courier.response.Response`.

    Args:
        cache: Expiration policy keyed by content type
        mime_lookup: ``path -> content type``
        chunk_size: Bytes read per chunk
    """

    def __init__(
        self,
        cache: Optional[CacheConfig] = None,
        *,
        mime_lookup: Callable[[PathLike], str] = mime.lookup,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
    ):
        if chunk_size <= 0:
            raise ValueError("chunk_size must be positive")
        self.cache = cache or CacheConfig()
        self.mime_lookup = mime_lookup
        self.chunk_size = chunk_size

    async def stat(self, path: PathLike) -> FileMetadata:
        """
        Collect the metadata the response headers are built from.

        Raises:
            FileNotFoundFault: nothing exists at ``path``
            FileStatFault: any other stat failure
        """
        content_type = self.mime_lookup(path)
        expire_seconds = self.cache.expire_for(content_type)
        requested_at = time.time()

        try:
            stat_result = await aiofiles.os.stat(path)
        except FileNotFoundError as exc:
            raise FileNotFoundFault(os.fspath(path)) from exc
        except OSError as exc:
            raise FileStatFault(os.fspath(path), exc.strerror or str(exc)) from exc

        return FileMetadata(
            size=_file_size(stat_result),
            mtime=stat_result.st_mtime,
            content_type=content_type,
            expire_seconds=expire_seconds,
            requested_at=requested_at,
        )

    async def send(
        self,
        response: "Response",
        path: PathLike,
        options: Optional[Mapping[str, Any]] = None,
    ) -> FileMetadata:
        """
        Set file headers on ``response`` and stream the file into it.

        ``options["headers"]`` overrides computed headers by name.
        """
        opts = options or {}
        meta = await self.stat(path)
        headers = meta.headers().merged(opts.get("headers"))

        f = await self._open(path)
        async with f:
            response.set_headers(200, headers)
            logger.debug(
                f"Streaming {os.fspath(path)} ({meta.size} bytes, {meta.content_type}, "
                f"max-age={meta.expire_seconds})"
            )
            await self._stream(response, f, path)
        await response.finish()
        return meta

    async def _open(self, path: PathLike):
        try:
            return await aiofiles.open(path, "rb")
        except FileNotFoundError as exc:
            raise FileNotFoundFault(os.fspath(path)) from exc
        except OSError as exc:
            raise FileOpenFault(os.fspath(path), exc.strerror or str(exc)) from exc

    async def _stream(self, response: "Response", f, path: PathLike) -> None:
        # Only reads are wrapped; sink errors propagate unchanged.
        sent = 0
        while True:
            try:
                chunk = await f.read(self.chunk_size)
            except OSError as exc:
                logger.error(f"Read of {os.fspath(path)} failed after {sent} bytes: {exc}")
                raise FileStreamFault(
                    os.fspath(path), exc.strerror or str(exc), bytes_sent=sent,
                ) from exc
            if not chunk:
                break
            if response.sink.closed:
                logger.info(f"Client went away after {sent} bytes of {os.fspath(path)}")
                raise ClientDisconnectFault(bytes_sent=sent)
            await response.write_body(chunk)
            sent += len(chunk)
        if not sent:
            # Empty file: still pass through STREAMING before the end.
            await response.write_body(b"")
