"""
Format registry - maps a format key to a content type and a formatter.

Built-in formats:

- **json** - ``application/json``
- **js** - ``text/javascript``
- **html** - ``text/html`` (passthrough for pre-rendered markup)
- **txt** - ``text/plain``
- **xml** - ``application/xml``

Usage::

    from courier.formats import default_registry

    default_registry.content_type_for("json")
    # → "application/json"

    default_registry.match_accept(["text/html", "application/json"], "json")
    # → <re.Match object; span=(0, 16), match='application/json'>
"""

from __future__ import annotations

import html
import json
import re
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, List, Optional

from .faults import UnknownFormatFault

__all__ = [
    "FormatDescriptor",
    "FormatRegistry",
    "default_registry",
]


@dataclass(frozen=True)
class FormatDescriptor:
    """
    One entry of the format registry.

    ``formatter`` receives the content and returns the serialized text.
    When formatting is requested on behalf of a controller the formatter
    is called with the controller as its first argument instead.
    """

    preferred_content_type: str
    accepts_content_type_pattern: re.Pattern[str]
    formatter: Callable[..., str]


class FormatRegistry:
    """Lookup of :class:`FormatDescriptor` by format key."""

    def __init__(self) -> None:
        self._formats: Dict[str, FormatDescriptor] = {}

    def register(self, key: str, descriptor: FormatDescriptor) -> None:
        self._formats[key] = descriptor

    def get(self, key: str) -> Optional[FormatDescriptor]:
        return self._formats.get(key)

    def __contains__(self, key: str) -> bool:
        return key in self._formats

    def keys(self) -> List[str]:
        return list(self._formats)

    def content_type_for(self, key: str) -> Optional[str]:
        """Preferred content type of a format, ``None`` when unknown."""
        descriptor = self._formats.get(key)
        if descriptor:
            return descriptor.preferred_content_type
        return None

    def match_accept(self, accepts: Iterable[str], key: str) -> Optional[re.Match]:
        """
        First entry of ``accepts`` matching the format's accepted
        content-type pattern, or ``None``.
        """
        descriptor = self._formats.get(key)
        if descriptor is None:
            return None
        for accept in accepts:
            match = descriptor.accepts_content_type_pattern.search(accept)
            if match:
                return match
        return None

    def format_content(self, content: Any, key: str, controller: Any = None) -> str:
        """
        Serialize ``content`` with the formatter registered under ``key``.

        Raises:
            UnknownFormatFault: nothing is registered under ``key``
        """
        descriptor = self._formats.get(key)
        if descriptor is None:
            raise UnknownFormatFault(key)
        if controller is not None:
            return descriptor.formatter(controller, content)
        return descriptor.formatter(content)


# ═══════════════════════════════════════════════════════════════════════════
#  Built-in formatters
# ═══════════════════════════════════════════════════════════════════════════

def _bound(func: Callable[[Any], str]) -> Callable[..., str]:
    """Accept an optional leading controller argument and ignore it."""
    def formatter(*args: Any) -> str:
        return func(args[-1])
    formatter.__name__ = func.__name__
    return formatter


def _json_default(o: Any) -> Any:
    if isinstance(o, (set, tuple)):
        return list(o)
    if hasattr(o, "isoformat"):
        return o.isoformat()
    if hasattr(o, "to_dict"):
        return o.to_dict()
    return str(o)


def format_json(content: Any) -> str:
    if hasattr(content, "to_json"):
        return content.to_json()
    return json.dumps(content, default=_json_default)


def format_text(content: Any) -> str:
    if content is None:
        return ""
    if isinstance(content, str):
        return content
    if isinstance(content, (dict, list)):
        return json.dumps(content, indent=2, default=str)
    return str(content)


def format_html(content: Any) -> str:
    if content is None:
        return ""
    if isinstance(content, str):
        return content
    return f"<pre>{html.escape(format_text(content))}</pre>"


def format_xml(content: Any) -> str:
    if hasattr(content, "to_xml"):
        return content.to_xml()
    lines = ['<?xml version="1.0" encoding="UTF-8"?>', "<response>"]
    _xml_value(content, lines, indent=2)
    lines.append("</response>")
    return "\n".join(lines)


def _xml_value(value: Any, lines: List[str], indent: int = 0) -> None:
    prefix = " " * indent
    if isinstance(value, dict):
        for k, v in value.items():
            tag = _xml_tag(str(k))
            if isinstance(v, (dict, list, tuple)):
                lines.append(f"{prefix}<{tag}>")
                _xml_value(v, lines, indent + 2)
                lines.append(f"{prefix}</{tag}>")
            else:
                escaped = html.escape(str(v)) if v is not None else ""
                lines.append(f"{prefix}<{tag}>{escaped}</{tag}>")
    elif isinstance(value, (list, tuple)):
        for item in value:
            lines.append(f"{prefix}<item>")
            _xml_value(item, lines, indent + 2)
            lines.append(f"{prefix}</item>")
    elif value is not None:
        lines.append(f"{prefix}{html.escape(str(value))}")


def _xml_tag(tag: str) -> str:
    tag = re.sub(r"[^a-zA-Z0-9_.-]", "_", tag)
    if not tag or tag[0].isdigit():
        tag = "_" + tag
    return tag


default_registry = FormatRegistry()
default_registry.register("json", FormatDescriptor(
    "application/json",
    re.compile(r"application/json|text/javascript|application/javascript"),
    _bound(format_json),
))
default_registry.register("js", FormatDescriptor(
    "text/javascript",
    re.compile(r"text/javascript|application/javascript"),
    _bound(format_json),
))
default_registry.register("html", FormatDescriptor(
    "text/html",
    re.compile(r"text/html|application/xhtml\+xml"),
    _bound(format_html),
))
default_registry.register("txt", FormatDescriptor(
    "text/plain",
    re.compile(r"text/plain"),
    _bound(format_text),
))
default_registry.register("xml", FormatDescriptor(
    "application/xml",
    re.compile(r"application/xml|text/xml"),
    _bound(format_xml),
))
