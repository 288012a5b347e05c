"""
Courier Faults - Domain-specific fault types.

Provides concrete fault classes for each domain:
- CONFIG faults
- IO faults (filesystem, client connection)
- RESPONSE faults (sink lifecycle, formats)
- FLOW faults (collaborators missing)
"""

from typing import Any, Optional
from .core import Fault, FaultDomain, Severity


# ============================================================================
# CONFIG Faults
# ============================================================================

class ConfigFault(Fault):
    """Base class for configuration faults."""

    def __init__(
        self,
        code: str,
        message: str,
        *,
        severity: Severity = Severity.FATAL,
        metadata: Optional[dict[str, Any]] = None,
    ):
        super().__init__(
            code=code,
            message=message,
            domain=FaultDomain.CONFIG,
            severity=severity,
            retryable=False,
            public=False,
            metadata=metadata,
        )


class ConfigInvalidFault(ConfigFault):
    """Configuration value is invalid."""

    def __init__(self, key: str, reason: str, **kwargs):
        super().__init__(
            code="CONFIG_INVALID",
            message=f"Configuration key '{key}' is invalid: {reason}",
            metadata={"key": key, "reason": reason, **kwargs.get("metadata", {})},
        )


# ============================================================================
# IO Faults
# ============================================================================

class IOFault(Fault):
    """Base class for I/O faults."""

    def __init__(
        self,
        code: str,
        message: str,
        *,
        severity: Severity = Severity.WARN,
        retryable: bool = False,
        public: bool = False,
        status: Optional[int] = None,
        metadata: Optional[dict[str, Any]] = None,
    ):
        super().__init__(
            code=code,
            message=message,
            domain=FaultDomain.IO,
            severity=severity,
            retryable=retryable,
            public=public,
            status=status,
            metadata=metadata,
        )


class FilesystemFault(IOFault):
    """Filesystem operation failed."""

    def __init__(
        self,
        operation: str,
        path: str,
        reason: str,
        *,
        code: str = "FILESYSTEM_FAULT",
        status: int = 500,
        public: bool = False,
        severity: Severity = Severity.ERROR,
        **kwargs,
    ):
        super().__init__(
            code=code,
            message=f"Filesystem {operation} on '{path}' failed: {reason}",
            severity=severity,
            public=public,
            status=status,
            metadata={"operation": operation, "path": path, "reason": reason, **kwargs.get("metadata", {})},
        )
        self.path = path


class FileNotFoundFault(FilesystemFault):
    """File to send does not exist."""

    def __init__(self, path: str, **kwargs):
        super().__init__(
            "stat", path, "no such file",
            code="FILE_NOT_FOUND",
            status=404,
            public=True,
            severity=Severity.WARN,
            **kwargs,
        )


class FileStatFault(FilesystemFault):
    """File could not be stat'ed for a reason other than absence."""

    def __init__(self, path: str, reason: str, **kwargs):
        super().__init__("stat", path, reason, code="FILE_STAT_FAILED", **kwargs)


class FileOpenFault(FilesystemFault):
    """File exists but could not be opened for reading."""

    def __init__(self, path: str, reason: str, **kwargs):
        super().__init__("open", path, reason, code="FILE_OPEN_FAILED", **kwargs)


class FileStreamFault(FilesystemFault):
    """Reading the file failed while its body was being streamed."""

    def __init__(self, path: str, reason: str, bytes_sent: int = 0, **kwargs):
        super().__init__(
            "read", path, reason,
            code="FILE_STREAM_FAILED",
            metadata={"bytes_sent": bytes_sent, **kwargs.pop("metadata", {})},
            **kwargs,
        )


class PathTraversalFault(IOFault):
    """Requested path resolves outside the served directory."""

    def __init__(self, path: str, **kwargs):
        super().__init__(
            code="PATH_TRAVERSAL",
            message=f"Path '{path}' escapes the served directory",
            severity=Severity.WARN,
            public=True,
            status=403,
            metadata={"path": path, **kwargs.get("metadata", {})},
        )


class ClientDisconnectFault(IOFault):
    """Client disconnected while the response was being written."""

    def __init__(self, bytes_sent: int = 0, **kwargs):
        super().__init__(
            code="CLIENT_DISCONNECT",
            message="Client disconnected",
            severity=Severity.INFO,
            status=499,
            metadata={"bytes_sent": bytes_sent, **kwargs.get("metadata", {})},
        )


# ============================================================================
# RESPONSE Faults
# ============================================================================

class ResponseFault(Fault):
    """Base class for response lifecycle faults."""

    def __init__(
        self,
        code: str,
        message: str,
        *,
        status: int = 500,
        public: bool = False,
        metadata: Optional[dict[str, Any]] = None,
    ):
        super().__init__(
            code=code,
            message=message,
            domain=FaultDomain.RESPONSE,
            severity=Severity.ERROR,
            retryable=False,
            public=public,
            status=status,
            metadata=metadata,
        )


class SinkClosedFault(ResponseFault):
    """Write attempted on a sink that has already been ended."""

    def __init__(self, operation: str = "write"):
        super().__init__(
            code="SINK_CLOSED",
            message=f"Cannot {operation}: response sink already ended",
            metadata={"operation": operation},
        )


class UnknownFormatFault(ResponseFault):
    """No format registered under the requested key."""

    def __init__(self, fmt: str):
        super().__init__(
            code="UNKNOWN_FORMAT",
            message=f"No format registered for '{fmt}'",
            status=406,
            public=True,
            metadata={"format": fmt},
        )


# ============================================================================
# FLOW Faults
# ============================================================================

class RedirectUnavailableFault(Fault):
    """Redirect requested on a response with no controller attached."""

    def __init__(self, url: str):
        super().__init__(
            code="REDIRECT_UNAVAILABLE",
            message=f"Cannot redirect to '{url}': no controller attached to response",
            domain=FaultDomain.FLOW,
            metadata={"url": url},
        )
