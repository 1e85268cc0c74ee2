import json
from typing import Any, AsyncIterable, AsyncIterator, Dict, List, Optional

import httpx

from app.core.config import settings
from app.core.exceptions import AIServiceException
from app.utils.logger import ai_logger


async def accumulate_reply(chunks: AsyncIterable[Dict[str, Any]]) -> str:
    """
    Fold streamed chat chunks into the full reply text.

    Content is appended in arrival order. The fold finishes at the first chunk
    marked ``done`` or when the stream ends, whichever comes first, so a reply
    is produced exactly once.
    """
    content = ""
    async for chunk in chunks:
        message = chunk.get("message")
        if isinstance(message, dict) and isinstance(message.get("content"), str):
            content += message["content"]
        if chunk.get("done"):
            break
    return content.strip()


class OllamaClient:
    """Streaming client for the chat endpoint of a local Ollama server"""

    def __init__(
        self,
        base_url: Optional[str] = None,
        model: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.chat_url = f"{base_url.rstrip('/')}/api/chat" if base_url else settings.ollama_chat_url
        self.model = model or settings.OLLAMA_MODEL
        self.timeout = timeout if timeout is not None else settings.OLLAMA_TIMEOUT
        self.transport = transport

    async def stream_chat(self, messages: List[Dict[str, str]]) -> AsyncIterator[Dict[str, Any]]:
        """Yield each newline-delimited JSON chunk of a streamed chat completion"""
        payload = {"model": self.model, "messages": messages}
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                async with client.stream("POST", self.chat_url, json=payload) as response:
                    response.raise_for_status()
                    async for line in response.aiter_lines():
                        if not line.strip():
                            continue
                        try:
                            chunk = json.loads(line)
                        except json.JSONDecodeError:
                            ai_logger.debug(f"Skipping malformed stream line: {line[:200]}")
                            continue
                        if not isinstance(chunk, dict):
                            continue
                        if chunk.get("error"):
                            raise AIServiceException(f"Model server reported an error: {chunk['error']}")
                        yield chunk
        except httpx.HTTPStatusError as e:
            raise AIServiceException(f"Model server returned HTTP {e.response.status_code}") from e
        except httpx.HTTPError as e:
            raise AIServiceException(f"Model server request failed: {e}") from e

    async def chat(self, messages: List[Dict[str, str]]) -> str:
        """Run a chat completion and return the accumulated reply text"""
        ai_logger.info(f"🤖 Calling model '{self.model}' at {self.chat_url}")
        stream = self.stream_chat(messages)
        try:
            reply = await accumulate_reply(stream)
        finally:
            await stream.aclose()
        ai_logger.info(f"🤖 Model reply received ({len(reply)} chars)")
        return reply
