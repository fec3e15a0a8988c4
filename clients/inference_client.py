"""
Inference Client - prompt relay client for the local inference endpoint
"""

import httpx
import logging
from typing import Optional
from dataclasses import dataclass

from relay_bot.exceptions import InferenceError

logger = logging.getLogger(__name__)

DEFAULT_BACKEND_URL = "http://localhost:8080/api/generate"
DEFAULT_MODEL = "llama3.2"


@dataclass
class InferenceResult:
    """Answer returned by the inference endpoint"""
    answer: str  # text to post back to the conversation
    continuation: str  # prompt to seed the next reply in the thread


class InferenceClient:
    """Async client for the inference endpoint (POST {model, prompt} -> {data, prompt})"""

    def __init__(
        self,
        url: str = DEFAULT_BACKEND_URL,
        model: str = DEFAULT_MODEL,
        timeout: Optional[float] = None,
    ):
        self.url = url
        self.model = model
        # None leaves httpx's default timeout in place
        self.timeout = httpx.Timeout(timeout) if timeout is not None else None
        self.client = None

    async def __aenter__(self):
        await self._ensure_client()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def _ensure_client(self):
        """Ensure async client is initialized"""
        if not self.client:
            if self.timeout is not None:
                self.client = httpx.AsyncClient(timeout=self.timeout)
            else:
                self.client = httpx.AsyncClient()

    async def ask(self, prompt: str, model: Optional[str] = None) -> InferenceResult:
        """
        Send a prompt to the inference endpoint.

        Makes exactly one attempt; callers decide what to do on failure.

        Args:
            prompt: Effective prompt for this message
            model: Model to use (defaults to self.model)

        Returns:
            InferenceResult with the answer and continuation prompt

        Raises:
            InferenceError: On transport failure, non-2xx status, or a
                response body that is not {"data": str, "prompt": str}
        """
        await self._ensure_client()

        model = model or self.model
        payload = {
            "model": model,
            "prompt": prompt,
        }

        try:
            response = await self.client.post(self.url, json=payload)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise InferenceError(
                f"Inference endpoint returned HTTP {e.response.status_code}"
            ) from e
        except httpx.HTTPError as e:
            raise InferenceError(f"Inference request failed: {e}") from e

        try:
            data = response.json()
        except ValueError as e:
            raise InferenceError(f"Inference response is not valid JSON: {e}") from e

        if not isinstance(data, dict):
            raise InferenceError("Inference response is not a JSON object")

        answer = data.get("data")
        continuation = data.get("prompt")
        if not isinstance(answer, str) or not isinstance(continuation, str):
            raise InferenceError(
                "Inference response missing string 'data' or 'prompt' field"
            )

        logger.info(f"Inference with {model} returned {len(answer)} chars")
        return InferenceResult(answer=answer, continuation=continuation)

    async def health_check(self) -> bool:
        """Check if the inference host is reachable"""
        await self._ensure_client()

        base_url = httpx.URL(self.url).copy_with(path="/")
        try:
            response = await self.client.get(base_url)
            return response.status_code < 500
        except Exception as e:
            logger.error(f"Inference health check failed: {e}")
            return False

    async def close(self):
        """Close the async client"""
        if self.client:
            await self.client.aclose()
            self.client = None
