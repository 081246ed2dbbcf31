import math

import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from insightmate.database import get_db
from insightmate.dependencies import get_inference, get_vector_index
from insightmate.main import create_app
from insightmate.models.base import Base

TEST_DATABASE_URL = "sqlite+aiosqlite://"


class FakeInference:
    """Stands in for the inference client.

    ``reply`` is either a fixed string or a callable ``(system, prompt) -> str``;
    setting ``error`` makes every completion raise it instead.
    """

    def __init__(self, reply="this is not json"):
        self.reply = reply
        self.error: Exception | None = None
        self.prompts: list[str] = []
        self.embedded: list[str] = []
        self.embed_error: Exception | None = None

    async def complete(self, system_prompt: str, user_prompt: str, max_tokens: int = 1024) -> str:
        self.prompts.append(user_prompt)
        if self.error is not None:
            raise self.error
        if callable(self.reply):
            return self.reply(system_prompt, user_prompt)
        return self.reply

    async def embed(self, text: str) -> list[float]:
        if self.embed_error is not None:
            raise self.embed_error
        self.embedded.append(text)
        # Letter histogram, normalized
        vector = [float(text.lower().count(c)) for c in "abcdefghijklmnopqrstuvwxyz"]
        norm = math.sqrt(sum(v * v for v in vector)) or 1.0
        return [v / norm for v in vector]


class FakeVectorIndex:
    """In-memory cosine index with the same async surface as VectorIndex."""

    def __init__(self):
        self.vectors: dict[str, list[float]] = {}
        self.error: Exception | None = None

    async def upsert(self, item_id: str, embedding: list[float]) -> None:
        self.vectors[item_id] = embedding

    async def get_embedding(self, item_id: str) -> list[float] | None:
        if self.error is not None:
            raise self.error
        return self.vectors.get(item_id)

    async def query(self, embedding: list[float], top_k: int) -> list[tuple[str, float]]:
        def cosine(a, b):
            dot = sum(x * y for x, y in zip(a, b))
            norm = math.sqrt(sum(x * x for x in a)) * math.sqrt(sum(y * y for y in b))
            return dot / norm if norm else 0.0

        scored = [(item_id, cosine(embedding, v)) for item_id, v in self.vectors.items()]
        scored.sort(key=lambda item: item[1], reverse=True)
        return scored[:top_k]


@pytest_asyncio.fixture
async def engine():
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(session_factory):
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def inference():
    return FakeInference()


@pytest_asyncio.fixture
async def vector_index():
    return FakeVectorIndex()


@pytest_asyncio.fixture
async def app(session_factory, inference, vector_index):
    async def override_get_db():
        async with session_factory() as session:
            yield session

    app = create_app()
    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_inference] = lambda: inference
    app.dependency_overrides[get_vector_index] = lambda: vector_index
    return app


@pytest_asyncio.fixture
async def client(app):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
        yield c
