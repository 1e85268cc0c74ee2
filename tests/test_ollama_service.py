"""Tests for the streaming model client, driven by httpx.MockTransport."""

import json

import httpx
import pytest

from app.core.exceptions import AIServiceException
from app.services.ollama_service import OllamaClient, accumulate_reply


def ndjson(*chunks) -> bytes:
    return "\n".join(c if isinstance(c, str) else json.dumps(c) for c in chunks).encode()


def make_client(handler) -> OllamaClient:
    return OllamaClient(
        base_url="http://ollama.test",
        model="test-model",
        transport=httpx.MockTransport(handler),
    )


async def _iterate(chunks):
    for chunk in chunks:
        yield chunk


class TestAccumulateReply:
    """The fold over streamed chunks."""

    async def test_concatenates_in_order(self):
        chunks = [
            {"message": {"content": "Hel"}, "done": False},
            {"message": {"content": "lo"}, "done": False},
            {"message": {"content": "!"}, "done": True},
        ]

        assert await accumulate_reply(_iterate(chunks)) == "Hello!"

    async def test_stops_at_first_done_chunk(self):
        chunks = [
            {"message": {"content": "one"}, "done": True},
            {"message": {"content": " two"}, "done": True},
        ]

        assert await accumulate_reply(_iterate(chunks)) == "one"

    async def test_end_of_stream_without_done(self):
        chunks = [{"message": {"content": " partial "}}]

        assert await accumulate_reply(_iterate(chunks)) == "partial"

    async def test_chunks_without_content_are_ignored(self):
        chunks = [{"done": False}, {"message": {}}, {"message": {"content": "ok"}, "done": True}]

        assert await accumulate_reply(_iterate(chunks)) == "ok"


class TestOllamaClient:
    """HTTP behaviour of the client."""

    async def test_sends_model_and_messages(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["url"] = str(request.url)
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, content=ndjson({"message": {"content": "hi"}, "done": True}))

        client = make_client(handler)
        messages = [{"role": "system", "content": "ctx"}, {"role": "user", "content": "hello"}]

        assert await client.chat(messages) == "hi"
        assert seen["url"] == "http://ollama.test/api/chat"
        assert seen["body"] == {"model": "test-model", "messages": messages}

    async def test_skips_blank_and_malformed_lines(self):
        body = ndjson(
            {"message": {"content": "a"}, "done": False},
            "",
            "not json",
            {"message": {"content": "b"}, "done": True},
        )
        client = make_client(lambda request: httpx.Response(200, content=body))

        assert await client.chat([{"role": "user", "content": "x"}]) == "ab"

    async def test_error_chunk_raises(self):
        body = ndjson({"message": {"content": "a"}, "done": False}, {"error": "model not found"})
        client = make_client(lambda request: httpx.Response(200, content=body))

        with pytest.raises(AIServiceException):
            await client.chat([{"role": "user", "content": "x"}])

    async def test_non_2xx_raises(self):
        client = make_client(lambda request: httpx.Response(500, content=b"boom"))

        with pytest.raises(AIServiceException):
            await client.chat([{"role": "user", "content": "x"}])

    async def test_connection_failure_raises(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        client = make_client(handler)

        with pytest.raises(AIServiceException):
            await client.chat([{"role": "user", "content": "x"}])
