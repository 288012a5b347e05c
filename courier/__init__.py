"""
Courier - HTTP response writer for async Python web frameworks.

Wraps a server-side sink and provides:
- Response: one-shot ``send``, chunked ``write_body``, idempotent finalization
- FileSender: static file delivery with cache headers and chunked streaming
- Format registry: content type and serializer per format key
- ASGI adapters: ``ResponseApp`` and ``StaticFiles``
- Faults: structured errors with HTTP status hints
"""

__version__ = "0.1.0"

from ._datastructures import HeaderSet
from .config import CacheConfig, ConfigLoader
from .faults import (
    Fault,
    FaultDomain,
    Severity,
    FileNotFoundFault,
    FileStatFault,
    FileOpenFault,
    FileStreamFault,
    ClientDisconnectFault,
)
from .files import FileMetadata, FileSender
from .formats import FormatDescriptor, FormatRegistry, default_registry
from .response import CHARSETS, Response, ResponseState
from .sink import AsgiSink, Sink
from .asgi import ResponseApp, StaticFiles

__all__ = [
    "__version__",
    # Response
    "Response",
    "ResponseState",
    "CHARSETS",
    "HeaderSet",
    # Files
    "FileSender",
    "FileMetadata",
    # Config
    "CacheConfig",
    "ConfigLoader",
    # Formats
    "FormatDescriptor",
    "FormatRegistry",
    "default_registry",
    # Sinks & ASGI
    "Sink",
    "AsgiSink",
    "ResponseApp",
    "StaticFiles",
    # Faults
    "Fault",
    "FaultDomain",
    "Severity",
    "FileNotFoundFault",
    "FileStatFault",
    "FileOpenFault",
    "FileStreamFault",
    "ClientDisconnectFault",
]
