"""ChromaDB-backed nearest-neighbour index for email embeddings."""

import asyncio
from urllib.parse import urlparse

import chromadb
import structlog
from chromadb.config import Settings as ChromaSettings

from insightmate.config import settings

logger = structlog.get_logger()


class VectorIndex:
    """Insert-by-id and top-K cosine similarity over one chroma collection.

    Uses a chroma server when ``VECTOR_DB_URL`` is set, otherwise an embedded
    persistent store under ``VECTOR_DB_PATH``.  The chroma client is
    synchronous, so every call is pushed to a worker thread.
    """

    def __init__(self, url: str, path: str, collection_name: str):
        self.url = url
        self.path = path
        self.collection_name = collection_name
        self._collection = None

    def _get_collection(self):
        if self._collection is None:
            chroma_settings = ChromaSettings(anonymized_telemetry=False)
            if self.url:
                parsed = urlparse(self.url)
                client = chromadb.HttpClient(
                    host=parsed.hostname or "localhost",
                    port=parsed.port or 8000,
                    settings=chroma_settings,
                )
            else:
                client = chromadb.PersistentClient(path=self.path, settings=chroma_settings)
            self._collection = client.get_or_create_collection(
                name=self.collection_name,
                metadata={"hnsw:space": "cosine"},
            )
            logger.info("vector_index_connected", collection=self.collection_name, url=self.url or None)
        return self._collection

    def _upsert(self, item_id: str, embedding: list[float]) -> None:
        self._get_collection().upsert(ids=[item_id], embeddings=[embedding])

    def _get_embedding(self, item_id: str) -> list[float] | None:
        result = self._get_collection().get(ids=[item_id], include=["embeddings"])
        embeddings = result.get("embeddings")
        if embeddings is None or len(embeddings) == 0:
            return None
        return [float(v) for v in embeddings[0]]

    def _query(self, embedding: list[float], top_k: int) -> list[tuple[str, float]]:
        result = self._get_collection().query(
            query_embeddings=[embedding],
            n_results=top_k,
            include=["distances"],
        )
        ids = (result.get("ids") or [[]])[0]
        distances = (result.get("distances") or [[]])[0]
        # cosine distance -> similarity
        return [(item_id, 1.0 - float(dist)) for item_id, dist in zip(ids, distances)]

    async def upsert(self, item_id: str, embedding: list[float]) -> None:
        await asyncio.to_thread(self._upsert, item_id, embedding)

    async def get_embedding(self, item_id: str) -> list[float] | None:
        return await asyncio.to_thread(self._get_embedding, item_id)

    async def query(self, embedding: list[float], top_k: int) -> list[tuple[str, float]]:
        """Nearest neighbours as ``(id, similarity)`` pairs, most similar first."""
        return await asyncio.to_thread(self._query, embedding, top_k)


_index: VectorIndex | None = None


def get_shared_index() -> VectorIndex:
    global _index
    if _index is None:
        _index = VectorIndex(
            url=settings.VECTOR_DB_URL,
            path=settings.VECTOR_DB_PATH,
            collection_name=settings.VECTOR_COLLECTION,
        )
    return _index
