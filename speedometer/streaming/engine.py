"""
Streaming client for OpenAI-compatible servers (vLLM, SGLang, llama.cpp, ...).

Yields the text deltas of a chat completion as they arrive so they can
be counted and fed to the speed monitor.
"""

import json
from collections.abc import AsyncIterator

import httpx


class InferenceEngine:
    """Thin httpx wrapper around one upstream server."""

    def __init__(self, base_url: str, timeout: float = 120.0):
        self.base_url = base_url.rstrip("/")
        self._client = httpx.AsyncClient(timeout=timeout)

    async def health_check(self) -> bool:
        try:
            resp = await self._client.get(f"{self.base_url}/health")
            return resp.status_code == 200
        except httpx.RequestError:
            return False

    async def stream_text(
        self,
        messages: list[dict],
        model: str | None = None,
        max_tokens: int = 1024,
        temperature: float = 0.7,
    ) -> AsyncIterator[str]:
        """
        Send a streaming chat completion request and yield content deltas.

        Role-only and empty deltas are skipped. Stops at "data: [DONE]".
        """
        url = f"{self.base_url}/v1/chat/completions"
        payload = {
            "messages": messages,
            "max_tokens": max_tokens,
            "temperature": temperature,
            "stream": True,
        }
        if model:
            payload["model"] = model

        async with self._client.stream("POST", url, json=payload) as resp:
            resp.raise_for_status()
            async for line in resp.aiter_lines():
                if not line.startswith("data: "):
                    continue
                data_str = line[6:]
                if data_str.strip() == "[DONE]":
                    break

                chunk = json.loads(data_str)
                choices = chunk.get("choices") or []
                if not choices:
                    continue
                content = choices[0].get("delta", {}).get("content")
                if content:
                    yield content

    async def close(self):
        await self._client.aclose()
