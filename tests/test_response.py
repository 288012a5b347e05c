"""
Response (response.py)

Tests the response writer: header/charset handling, one-shot send,
chunked body writes, idempotent finalization, formats, faults, redirects.
"""

import json

import pytest

from courier.faults import (
    FileNotFoundFault,
    FileStatFault,
    RedirectUnavailableFault,
    UnknownFormatFault,
)
from courier.response import CHARSETS, Response, ResponseState
from courier.testing import RecordingSink


# ============================================================================
# Headers
# ============================================================================

class TestSetHeaders:

    def test_sets_status_and_headers(self, response, sink):
        response.set_headers(404, {"X-Foo": "bar", "Content-Length": 3})
        assert sink.status_code == 404
        assert sink.headers["X-Foo"] == "bar"
        assert sink.headers["Content-Length"] == 3
        assert response.headers_set

    def test_status_set_before_headers(self, response, sink):
        response.set_headers(200, {"X-Foo": "bar"})
        assert sink.kinds() == ["status", "header"]

    @pytest.mark.parametrize("content_type", sorted(CHARSETS))
    def test_charset_appended_once(self, response, sink, content_type):
        response.set_headers(200, {"Content-Type": content_type})
        value = sink.headers["Content-Type"]
        assert value == f"{content_type}; charset=UTF-8"
        assert value.count("charset=") == 1

    def test_unknown_type_untouched(self, response, sink):
        response.set_headers(200, {"Content-Type": "image/png"})
        assert sink.headers["Content-Type"] == "image/png"

    def test_already_suffixed_type_untouched(self, response, sink):
        response.set_headers(200, {"Content-Type": "text/html; charset=latin-1"})
        assert sink.headers["Content-Type"] == "text/html; charset=latin-1"

    def test_content_type_name_is_case_insensitive(self, response, sink):
        response.set_headers(200, {"content-type": "text/html"})
        assert sink.headers["Content-Type"] == "text/html; charset=UTF-8"
        assert ("header", "content-type", "text/html; charset=UTF-8") in sink.events

    def test_caller_mapping_not_mutated(self, response):
        headers = {"Content-Type": "application/json"}
        response.set_headers(200, headers)
        assert headers == {"Content-Type": "application/json"}


# ============================================================================
# send
# ============================================================================

class TestSend:

    @pytest.mark.asyncio
    async def test_send_scenario(self, response, sink):
        await response.send("hello", 201, {"X-Foo": "bar"})

        assert sink.status_code == 201
        assert sink.headers["X-Foo"] == "bar"
        assert sink.body == b"hello"
        assert sink.kinds() == ["status", "header", "write", "end"]
        assert response.ended
        assert response.state is ResponseState.FINALIZED

    @pytest.mark.asyncio
    async def test_defaults(self, response, sink):
        await response.send()
        assert sink.status_code == 200
        assert sink.body == b""
        assert sink.ended
        assert response.body_length == 0

    @pytest.mark.asyncio
    async def test_second_send_is_noop(self, response, sink):
        await response.send("first", 200, {"X-Call": "1"})
        events = list(sink.events)

        await response.send("second", 500, {"X-Call": "2"})

        assert sink.events == events
        assert sink.body == b"first"
        assert sink.status_code == 200
        assert sink.end_count == 1

    @pytest.mark.asyncio
    async def test_many_sends_only_first_writes(self, response, sink):
        for i in range(5):
            await response.send(f"body-{i}")
        assert sink.body == b"body-0"
        assert sink.end_count == 1

    @pytest.mark.asyncio
    async def test_finalize_after_end_is_noop(self, response, sink):
        await response.send("done")
        await response.finalize("again")
        assert sink.body == b"done"
        assert sink.end_count == 1

    @pytest.mark.asyncio
    async def test_send_file_after_end_is_noop(self, response, sink, tmp_path):
        await response.send("done")
        await response.send_file(tmp_path / "does-not-exist.txt")
        assert sink.body == b"done"

    @pytest.mark.asyncio
    async def test_bytes_content(self, response, sink):
        await response.send(b"\x00\x01binary")
        assert sink.body == b"\x00\x01binary"
        assert response.body_length == 8

    @pytest.mark.asyncio
    async def test_independent_responses(self):
        first, second = RecordingSink(), RecordingSink()
        await Response(first).send("a")
        await Response(second).send("b")
        assert first.body == b"a"
        assert second.body == b"b"


# ============================================================================
# Body writing
# ============================================================================

class TestWriteBody:

    @pytest.mark.asyncio
    async def test_accumulates_length(self, response, sink):
        response.set_headers(200, {})
        await response.write_body("ab")
        await response.write_body("cdé")
        await response.write_body(b"\xff")
        await response.finish()

        assert response.body_length == 2 + 4 + 1
        assert sink.chunks == [b"ab", "cdé".encode("utf-8"), b"\xff"]
        assert sink.kinds()[-1] == "end"

    @pytest.mark.asyncio
    async def test_none_is_empty(self, response, sink):
        response.set_headers(200, {})
        await response.write_body(None)
        assert sink.chunks == [b""]
        assert response.body_length == 0

    @pytest.mark.asyncio
    async def test_state_progression(self, response):
        assert response.state is ResponseState.INIT
        response.set_headers(200, {})
        assert response.state is ResponseState.HEADERS_SENT
        await response.write_body("x")
        assert response.state is ResponseState.STREAMING
        await response.finish()
        assert response.state is ResponseState.FINALIZED
        assert response.ended


# ============================================================================
# Formats
# ============================================================================

class TestSendFormatted:

    @pytest.mark.asyncio
    async def test_json(self, response, sink):
        await response.send_formatted({"a": 1}, "json")
        assert json.loads(sink.body) == {"a": 1}
        assert sink.headers["Content-Type"] == "application/json; charset=UTF-8"

    @pytest.mark.asyncio
    async def test_caller_content_type_wins(self, response, sink):
        await response.send_formatted("<p>x</p>", "html", 200, {"Content-Type": "text/plain"})
        assert sink.headers["Content-Type"] == "text/plain"
        assert sink.body == b"<p>x</p>"

    @pytest.mark.asyncio
    async def test_unknown_format(self, response, sink):
        with pytest.raises(UnknownFormatFault):
            await response.send_formatted({}, "yaml")
        assert sink.events == []

    @pytest.mark.asyncio
    async def test_formatter_sees_controller(self, sink):
        from courier.formats import FormatDescriptor, FormatRegistry
        import re

        registry = FormatRegistry()
        registry.register("name", FormatDescriptor(
            "text/plain", re.compile("text/plain"),
            lambda controller, content: f"{controller.name}:{content}",
        ))

        class Controller:
            name = "users"

        response = Response(sink, controller=Controller(), formats=registry)
        await response.send_formatted("list", "name")
        assert sink.body == b"users:list"


# ============================================================================
# Faults
# ============================================================================

class TestSendFault:

    @pytest.mark.asyncio
    async def test_public_fault(self, response, sink):
        sent = await response.send_fault(FileNotFoundFault("/missing.txt"))
        assert sent is True
        assert sink.status_code == 404
        body = json.loads(sink.body)
        assert body["error"] == "FILE_NOT_FOUND"
        assert "/missing.txt" in body["message"]
        assert sink.headers["Content-Type"] == "application/json; charset=UTF-8"

    @pytest.mark.asyncio
    async def test_private_fault_hides_message(self, response, sink):
        await response.send_fault(FileStatFault("/etc/shadow", "Permission denied"))
        assert sink.status_code == 500
        assert json.loads(sink.body)["message"] == "Internal Server Error"

    @pytest.mark.asyncio
    async def test_after_headers_is_refused(self, response, sink):
        response.set_headers(200, {})
        sent = await response.send_fault(FileNotFoundFault("/x"))
        assert sent is False
        assert sink.chunks == []


# ============================================================================
# Redirects
# ============================================================================

class RecordingController:

    def __init__(self):
        self.calls = []

    def redirect(self, url, status=None):
        self.calls.append((url, status))


class TestRedirect:

    @pytest.mark.asyncio
    async def test_url_only(self, sink):
        controller = RecordingController()
        await Response(sink, controller=controller).redirect("/login")
        assert controller.calls == [("/login", None)]

    @pytest.mark.asyncio
    async def test_with_status(self, sink):
        controller = RecordingController()
        await Response(sink, controller=controller).redirect("/login", status=302)
        assert controller.calls == [("/login", 302)]

    @pytest.mark.asyncio
    async def test_async_controller(self, sink):
        calls = []

        class AsyncController:
            async def redirect(self, url, status=None):
                calls.append((url, status))
                return "redirected"

        result = await Response(sink, controller=AsyncController()).redirect("/home", 301)
        assert result == "redirected"
        assert calls == [("/home", 301)]

    @pytest.mark.asyncio
    async def test_no_controller(self, response):
        with pytest.raises(RedirectUnavailableFault):
            await response.redirect("/login")
