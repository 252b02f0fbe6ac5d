"""
Tests for the HTTP dispatcher.

Uses httpx.MockTransport so no network is touched.
"""

import asyncio
import json

import httpx
import pytest

from errors import ErrorCode, TransportError
from services.dispatcher import HttpDispatcher
from services.models import CTAButton

API = "http://backend.test/api"


def _dispatcher(handler) -> HttpDispatcher:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return HttpDispatcher(api_url=API, autocomplete_url="http://backend.test/autocomplete", client=client)


def _call(dispatcher, method, *args):
    async def run():
        try:
            return await getattr(dispatcher, method)(*args)
        finally:
            await dispatcher.aclose()

    return asyncio.run(run())


class TestRequests:
    """Request shape for each endpoint."""

    def test_send_posts_chat_body(self):
        seen = {}

        def handler(request):
            seen["method"] = request.method
            seen["url"] = str(request.url)
            seen["headers"] = request.headers
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={"response": "hi"})

        payload = _call(_dispatcher(handler), "send", "hello", "session_1")

        assert payload == {"response": "hi"}
        assert seen["method"] == "POST"
        assert seen["url"] == f"{API}/chat"
        assert seen["headers"]["X-Session-ID"] == "session_1"
        assert seen["headers"]["Content-Type"] == "application/json"
        body = seen["body"]
        assert body["message"] == "hello"
        assert body["sessionId"] == "session_1"
        assert "timestamp" in body
        assert set(body["context"]) == {"userAgent", "timestamp"}

    def test_teardown_deletes_session(self):
        seen = {}

        def handler(request):
            seen["request"] = (request.method, str(request.url))
            return httpx.Response(204)

        assert _call(_dispatcher(handler), "teardown", "session_1") is None
        assert seen["request"] == ("DELETE", f"{API}/session/session_1")

    def test_autocomplete_body(self):
        seen = {}

        def handler(request):
            seen["url"] = str(request.url)
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json=["a", "b"])

        assert _call(_dispatcher(handler), "autocomplete", "how", "s1") == ["a", "b"]
        assert seen["url"] == "http://backend.test/autocomplete"
        assert seen["body"] == {"message": "how", "sessionId": "s1", "source": "portal", "playType": "Basic Option"}

    def test_cta_action_body(self):
        seen = {}

        def handler(request):
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={"ok": True})

        _call(_dispatcher(handler), "cta_action", CTAButton(label="Learn more", value="learn_more"), "s1")
        assert seen["body"]["action"] == "learn_more"
        assert seen["body"]["actionName"] == "Learn more"
        assert seen["body"]["sessionId"] == "s1"

    def test_feedback_omits_missing_comment(self):
        seen = {}

        def handler(request):
            seen["url"] = str(request.url)
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={})

        _call(_dispatcher(handler), "feedback", "msg_1", 4, None, "s1")
        assert seen["url"] == f"{API}/feedback"
        assert seen["body"]["messageId"] == "msg_1"
        assert seen["body"]["rating"] == 4
        assert "comment" not in seen["body"]

    def test_text_body_is_returned_as_string(self):
        def handler(request):
            return httpx.Response(200, text="plain|reply")

        assert _call(_dispatcher(handler), "send", "hello", "s1") == "plain|reply"


class TestFailures:
    """Transport failures become TransportError with the right code."""

    @pytest.mark.parametrize(
        "status,code",
        [
            (429, ErrorCode.TRANSPORT_RATE_LIMITED),
            (500, ErrorCode.TRANSPORT_SERVER_FAULT),
            (502, ErrorCode.TRANSPORT_SERVER_FAULT),
            (401, ErrorCode.TRANSPORT_AUTH_REQUIRED),
            (404, ErrorCode.TRANSPORT_HTTP_ERROR),
        ],
    )
    def test_http_status(self, status, code):
        def handler(request):
            return httpx.Response(status, json={"error": "nope"})

        with pytest.raises(TransportError) as exc_info:
            _call(_dispatcher(handler), "send", "hello", "s1")
        assert exc_info.value.code == code
        assert exc_info.value.status_code == status

    def test_connect_error_is_unreachable(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(TransportError) as exc_info:
            _call(_dispatcher(handler), "send", "hello", "s1")
        assert exc_info.value.code == ErrorCode.TRANSPORT_UNREACHABLE
        assert exc_info.value.status_code == 0

    def test_timeout(self):
        def handler(request):
            raise httpx.ReadTimeout("too slow", request=request)

        with pytest.raises(TransportError) as exc_info:
            _call(_dispatcher(handler), "send", "hello", "s1")
        assert exc_info.value.code == ErrorCode.TRANSPORT_TIMEOUT


class TestFromConfig:
    """Construction from runtime config."""

    def test_uses_config_urls(self):
        from config import runtime_config

        dispatcher = HttpDispatcher.from_config(client=httpx.AsyncClient())
        assert dispatcher.api_url == runtime_config.api_url.rstrip("/")
        assert dispatcher.autocomplete_url == runtime_config.autocomplete_url
        asyncio.run(dispatcher.aclose())
