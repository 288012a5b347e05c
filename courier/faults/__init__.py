"""
Courier Faults - Structured error handling.

Failures raised by the response layer are typed fault signals carrying a
stable code, a domain, a severity and an HTTP status hint. The response
layer itself never turns a fault into an error page; whoever catches the
fault decides (see ``Response.send_fault``).
"""

from .core import (
    Fault,
    FaultDomain,
    Severity,
)

from .domains import (
    ConfigFault,
    ConfigInvalidFault,
    IOFault,
    FilesystemFault,
    FileNotFoundFault,
    FileStatFault,
    FileOpenFault,
    FileStreamFault,
    PathTraversalFault,
    ClientDisconnectFault,
    ResponseFault,
    SinkClosedFault,
    UnknownFormatFault,
    RedirectUnavailableFault,
)

__all__ = [
    # Core types
    "Fault",
    "FaultDomain",
    "Severity",

    # Domain faults
    "ConfigFault",
    "ConfigInvalidFault",
    "IOFault",
    "FilesystemFault",
    "FileNotFoundFault",
    "FileStatFault",
    "FileOpenFault",
    "FileStreamFault",
    "PathTraversalFault",
    "ClientDisconnectFault",
    "ResponseFault",
    "SinkClosedFault",
    "UnknownFormatFault",
    "RedirectUnavailableFault",
]
