from __future__ import annotations

from typing import Any

import httpx

from .media import MediaBlob

MODEL_NAME = "gemini-2.5-flash"
DEFAULT_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"

# Fixed for every call; not exposed through the tool schemas or config.
GENERATION_CONFIG: dict[str, Any] = {
    "temperature": 0.9,
    "topK": 1,
    "topP": 1,
    "maxOutputTokens": 2048,
}

# Grounds chat answers with Google Search results.
SEARCH_TOOLS: list[dict[str, Any]] = [{"google_search": {}}]


class GeminiClientError(RuntimeError):
    pass


class GeminiClient:
    """Thin async wrapper over the ``generateContent`` REST endpoint.

    One request per call: no retries, no streaming.
    """

    def __init__(
        self,
        api_key: str,
        model: str = MODEL_NAME,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 300.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.api_key = api_key
        self.model = model
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport

    async def _generate(self, payload: dict[str, Any]) -> dict[str, Any]:
        path = f"/models/{self.model}:generateContent"
        headers = {"x-goog-api-key": self.api_key}
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.post(f"{self.base_url}{path}", json=payload, headers=headers)
                response.raise_for_status()
                return response.json()
        except httpx.TimeoutException as exc:
            raise GeminiClientError(f"Request timed out: {path}") from exc
        except httpx.HTTPStatusError as exc:
            body = exc.response.text[:300]
            raise GeminiClientError(f"HTTP {exc.response.status_code} on {path}: {body}") from exc
        except httpx.HTTPError as exc:
            raise GeminiClientError(f"Network error on {path}: {exc}") from exc
        except ValueError as exc:
            raise GeminiClientError(f"Malformed response from {path}") from exc

    async def chat(self, contents: list[dict[str, Any]]) -> str:
        payload = {
            "contents": contents,
            "tools": SEARCH_TOOLS,
            "generationConfig": GENERATION_CONFIG,
        }
        return extract_text(await self._generate(payload))

    async def analyze(self, blob: MediaBlob, prompt: str) -> str:
        payload = {
            "contents": [
                {"role": "user", "parts": [blob.as_inline_part(), {"text": prompt}]},
            ],
            "generationConfig": GENERATION_CONFIG,
        }
        return extract_text(await self._generate(payload))


def extract_text(payload: Any) -> str:
    """Join the text parts of the first candidate, like the SDK's ``.text``."""
    if not isinstance(payload, dict):
        raise GeminiClientError("Malformed generateContent response")
    candidates = payload.get("candidates") or []
    if not candidates:
        feedback = payload.get("promptFeedback") or {}
        reason = feedback.get("blockReason") if isinstance(feedback, dict) else None
        if reason:
            raise GeminiClientError(f"Prompt blocked: {reason}")
        raise GeminiClientError("Response contained no candidates")
    try:
        parts = (candidates[0].get("content") or {}).get("parts") or []
        return "".join(
            part["text"]
            for part in parts
            if isinstance(part.get("text"), str) and not part.get("thought")
        )
    except (AttributeError, TypeError) as exc:
        raise GeminiClientError("Malformed generateContent response") from exc
