"""
Tests for the request executor: headers, query strings, retry policy,
timeouts and error normalization.
"""

import asyncio
import gzip
import logging

import httpx
import pytest

from conftest import API_KEY, FakeAPI, json_response, make_client
from trackfusion.api.base import (
    ApiError,
    NetworkError,
    RequestDescriptor,
    RequestTimeoutError,
    TrackfusionError,
)
from trackfusion.api.executor import RETRY_DELAY_SECONDS, RequestExecutor, build_query
from trackfusion.config import ClientConfig


class TestBuildQuery:
    def test_omits_none_keeps_falsy(self):
        assert build_query({"a": "x", "b": None, "c": 0}) == "?a=x&c=0"

    def test_keeps_empty_string_and_false(self):
        assert build_query({"q": "", "active": False}) == "?q=&active=false"

    def test_preserves_call_site_order(self):
        assert build_query({"z": 1, "a": 2, "m": 3}) == "?z=1&a=2&m=3"

    def test_percent_encodes_each_value(self):
        assert build_query({"status": "todo,in-progress"}) == "?status=todo%2Cin-progress"
        assert build_query({"search": "a b&c"}) == "?search=a%20b%26c"

    def test_leaves_uri_component_marks_unescaped(self):
        assert build_query({"q": "it's (ok)!*"}) == "?q=it's%20(ok)!*"
        assert build_query({"a~b": "x.y_z-1"}) == "?a~b=x.y_z-1"

    def test_empty_when_nothing_to_send(self):
        assert build_query({}) == ""
        assert build_query({"a": None}) == ""


class TestRequestHeaders:
    @pytest.mark.asyncio
    async def test_sends_auth_and_content_type(self, api, client):
        api.script = [json_response({"projects": []})]
        await client.list_projects()

        assert api.last.headers["Authorization"] == f"Bearer {API_KEY}"
        assert api.last.headers["Content-Type"] == "application/json"

    @pytest.mark.asyncio
    async def test_caller_headers_win(self, api):
        api.script = [json_response({"ok": True})]
        config = ClientConfig(api_key=API_KEY, base_url="https://api.example.com")
        executor = RequestExecutor(config, transport=httpx.MockTransport(api), retry_delay=0)

        await executor.execute(
            RequestDescriptor(
                path="/ping",
                headers={"authorization": "Bearer other", "X-Trace": "t1"},
            )
        )

        assert api.last.headers.get_list("Authorization") == ["Bearer other"]
        assert api.last.headers["X-Trace"] == "t1"

    @pytest.mark.asyncio
    async def test_get_has_no_body(self, api, client):
        api.script = [json_response({"projects": []})]
        await client.list_projects()
        assert api.last.method == "GET"
        assert api.last.content == b""


class TestBaseUrl:
    @pytest.mark.asyncio
    async def test_trailing_slash_does_not_change_urls(self):
        with_slash = FakeAPI(json_response({"projects": []}))
        without_slash = FakeAPI(json_response({"projects": []}))

        await make_client(with_slash, base_url="https://x/").list_projects()
        await make_client(without_slash, base_url="https://x").list_projects()

        assert with_slash.url() == without_slash.url() == "https://x/projects"


class TestRetry:
    @pytest.mark.asyncio
    async def test_retries_once_on_503(self, api, client):
        api.script = [json_response({}, 503), json_response({"projects": []})]

        result = await client.list_projects()

        assert api.calls == 2
        assert result == []

    @pytest.mark.asyncio
    async def test_second_503_fails_with_its_own_body(self, api, client):
        api.script = [
            json_response({"error": "Warming up"}, 503),
            json_response({"error": "Still warming up"}, 503),
            json_response({"projects": []}),
        ]

        with pytest.raises(ApiError) as exc_info:
            await client.list_projects()

        assert api.calls == 2
        assert str(exc_info.value) == "Still warming up"
        assert exc_info.value.status_code == 503

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "status,message",
        [(401, "Invalid API key"), (403, "Forbidden"), (404, "Not found")],
    )
    async def test_no_retry_on_client_errors(self, api, client, status, message):
        api.script = [json_response({"error": message}, status)]

        with pytest.raises(ApiError) as exc_info:
            await client.list_projects()

        assert api.calls == 1
        assert str(exc_info.value) == message
        assert exc_info.value.status_code == status

    @pytest.mark.asyncio
    async def test_no_retry_on_500(self, api, client):
        api.script = [json_response({}, 500), json_response({"projects": []})]

        with pytest.raises(ApiError):
            await client.list_projects()
        assert api.calls == 1

    @pytest.mark.asyncio
    async def test_retries_connection_refused_once(self, api, client):
        api.script = [
            httpx.ConnectError("connect ECONNREFUSED 127.0.0.1:443"),
            json_response({"projects": [{"id": "p1"}]}),
        ]

        result = await client.list_projects()

        assert api.calls == 2
        assert result == [{"id": "p1"}]

    @pytest.mark.asyncio
    async def test_persistent_transport_error_surfaces_inner_message(self, api, client):
        api.script = [httpx.ConnectError("connect ECONNREFUSED 127.0.0.1:443")]

        with pytest.raises(NetworkError, match="ECONNREFUSED"):
            await client.list_projects()
        assert api.calls == 2

    @pytest.mark.asyncio
    async def test_waits_fixed_delay_before_retry(self, api):
        api.script = [json_response({}, 503), json_response({"projects": []})]
        config = ClientConfig(api_key=API_KEY, base_url="https://api.example.com")
        executor = RequestExecutor(config, transport=httpx.MockTransport(api))
        delays = []

        async def fake_sleep(seconds):
            delays.append(seconds)

        executor._sleep = fake_sleep
        await executor.execute(RequestDescriptor(path="/projects"))

        assert delays == [RETRY_DELAY_SECONDS] == [2.0]

    @pytest.mark.asyncio
    async def test_retry_logged_at_debug_without_token(self, api, client, caplog):
        caplog.set_level(logging.DEBUG, logger="trackfusion.api.executor")
        api.script = [
            json_response({}, 503),
            httpx.ConnectError("connect ECONNREFUSED 127.0.0.1:443"),
        ]

        with pytest.raises(NetworkError):
            await client.list_projects()

        records = [r for r in caplog.records if r.name == "trackfusion.api.executor"]
        assert [r.levelno for r in records] == [logging.DEBUG]
        assert "503 on GET /projects" in records[0].getMessage()
        assert all(API_KEY not in r.getMessage() for r in caplog.records)


class TestTimeout:
    @pytest.mark.asyncio
    async def test_httpx_timeout_is_not_retried(self, api, client):
        api.script = [httpx.ReadTimeout("timed out"), json_response({"projects": []})]

        with pytest.raises(RequestTimeoutError, match="timed out"):
            await client.list_projects()
        assert api.calls == 1

    @pytest.mark.asyncio
    async def test_slow_response_hits_overall_deadline(self):
        calls = []

        async def slow(request):
            calls.append(request)
            await asyncio.sleep(1)
            return json_response({"projects": []})

        config = ClientConfig(api_key=API_KEY, base_url="https://api.example.com", timeout_ms=50)
        executor = RequestExecutor(config, transport=httpx.MockTransport(slow), retry_delay=0)

        with pytest.raises(RequestTimeoutError, match="50ms"):
            await executor.execute(RequestDescriptor(path="/projects"))
        assert len(calls) == 1


class TestErrorNormalization:
    @pytest.mark.asyncio
    async def test_uses_error_field(self, api, client):
        api.script = [json_response({"error": "Invalid API key"}, 401)]
        with pytest.raises(ApiError, match="Invalid API key"):
            await client.list_projects()

    @pytest.mark.asyncio
    async def test_falls_back_to_status_text(self, api, client):
        api.script = [json_response({}, 500)]
        with pytest.raises(ApiError) as exc_info:
            await client.list_projects()
        assert str(exc_info.value) == "HTTP 500: Internal Server Error"

    @pytest.mark.asyncio
    async def test_unparseable_body_falls_back_to_status_text(self, api, client):
        api.script = [httpx.Response(502, content=b"<html>Bad Gateway</html>")]
        with pytest.raises(ApiError) as exc_info:
            await client.list_projects()
        assert str(exc_info.value) == "HTTP 502: Bad Gateway"

    @pytest.mark.asyncio
    async def test_non_object_body_falls_back_to_status_text(self, api, client):
        api.script = [json_response(["nope"], 400)]
        with pytest.raises(ApiError, match="HTTP 400: Bad Request"):
            await client.list_projects()

    @pytest.mark.asyncio
    async def test_undecodable_error_body_keeps_status(self, api, client):
        api.script = [httpx.Response(500, headers={"Content-Encoding": "gzip"}, stream=httpx.ByteStream(b"x"))]

        with pytest.raises(ApiError) as exc_info:
            await client.list_projects()

        assert str(exc_info.value) == "HTTP 500: Internal Server Error"
        assert exc_info.value.status_code == 500
        assert api.calls == 1

    @pytest.mark.asyncio
    async def test_undecodable_success_body(self, api, client):
        api.script = [httpx.Response(200, headers={"Content-Encoding": "gzip"}, stream=httpx.ByteStream(b"x"))]
        with pytest.raises(TrackfusionError, match="Undecodable response body for GET /projects"):
            await client.list_projects()

    @pytest.mark.asyncio
    async def test_compressed_body_is_decoded(self, api, client):
        body = gzip.compress(b'{"projects": [{"id": "p1"}]}')
        api.script = [httpx.Response(200, headers={"Content-Encoding": "gzip"}, stream=httpx.ByteStream(body))]
        assert await client.list_projects() == [{"id": "p1"}]

    @pytest.mark.asyncio
    async def test_redirect_loop_is_not_retried(self, api, client):
        api.script = [httpx.TooManyRedirects("Exceeded maximum allowed redirects."), json_response({"projects": []})]

        with pytest.raises(TrackfusionError, match="redirects") as exc_info:
            await client.list_projects()

        assert not isinstance(exc_info.value, (ApiError, NetworkError))
        assert api.calls == 1


class TestSuccessBody:
    @pytest.mark.asyncio
    async def test_empty_body_returns_none(self, api):
        api.script = [httpx.Response(204)]
        config = ClientConfig(api_key=API_KEY, base_url="https://api.example.com")
        executor = RequestExecutor(config, transport=httpx.MockTransport(api), retry_delay=0)

        assert await executor.execute(RequestDescriptor(path="/items/i1", method="DELETE")) is None

    @pytest.mark.asyncio
    async def test_serializes_body_as_json(self, api):
        api.script = [json_response({"ok": True})]
        config = ClientConfig(api_key=API_KEY, base_url="https://api.example.com")
        executor = RequestExecutor(config, transport=httpx.MockTransport(api), retry_delay=0)

        result = await executor.execute(
            RequestDescriptor(path="/things", method="POST", body={"a": None, "b": 1})
        )

        assert result == {"ok": True}
        assert api.body() == {"a": None, "b": 1}
