"""Thin async wrapper around the inference backends.

Completions go to the Anthropic Messages API; embeddings come from a local
sentence-transformers model.  Handlers only ever see ``InferenceClient`` so
tests can swap in a stub through ``get_inference``.
"""

import asyncio

import structlog
from anthropic import AsyncAnthropic

from insightmate.config import settings

logger = structlog.get_logger()


class InferenceUnavailableError(RuntimeError):
    pass


class InferenceClient:
    def __init__(
        self,
        api_key: str,
        model: str,
        temperature: float,
        embedding_model: str,
    ):
        self.api_key = api_key
        self.model = model
        self.temperature = temperature
        self.embedding_model = embedding_model
        self._client: AsyncAnthropic | None = None
        self._embedder = None

    def _get_client(self) -> AsyncAnthropic:
        if not self.api_key:
            raise InferenceUnavailableError("ANTHROPIC_API_KEY is not configured")
        if self._client is None:
            self._client = AsyncAnthropic(api_key=self.api_key)
        return self._client

    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        max_tokens: int = 1024,
    ) -> str:
        """Single completion call; returns the raw text of the first content block."""
        client = self._get_client()
        response = await client.messages.create(
            model=self.model,
            max_tokens=max_tokens,
            temperature=self.temperature,
            system=system_prompt,
            messages=[{"role": "user", "content": user_prompt}],
        )
        return response.content[0].text

    def _load_embedder(self):
        if self._embedder is None:
            from sentence_transformers import SentenceTransformer

            logger.info("embedding_model_loading", model=self.embedding_model)
            self._embedder = SentenceTransformer(self.embedding_model)
        return self._embedder

    def _encode(self, text: str) -> list[float]:
        vector = self._load_embedder().encode(text, normalize_embeddings=True)
        return [float(v) for v in vector]

    async def embed(self, text: str) -> list[float]:
        """Embed one text; model loading and encoding run off the event loop."""
        return await asyncio.to_thread(self._encode, text)


_inference: InferenceClient | None = None


def get_inference_client() -> InferenceClient:
    global _inference
    if _inference is None:
        _inference = InferenceClient(
            api_key=settings.ANTHROPIC_API_KEY,
            model=settings.LLM_MODEL,
            temperature=settings.LLM_TEMPERATURE,
            embedding_model=settings.EMBEDDING_MODEL,
        )
    return _inference
