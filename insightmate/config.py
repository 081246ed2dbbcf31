from pydantic import model_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    DATABASE_URL: str = "sqlite+aiosqlite:///./insightmate.db"
    # Create tables on startup (local/dev); production runs alembic instead
    DB_AUTO_CREATE: bool = True

    ANTHROPIC_API_KEY: str = ""
    LLM_MODEL: str = "claude-sonnet-4-20250514"
    LLM_TEMPERATURE: float = 0.1

    # Embeddings + similarity index
    EMBEDDING_MODEL: str = "BAAI/bge-base-en-v1.5"
    VECTOR_DB_URL: str = ""  # e.g. http://localhost:8001 for a chroma server
    VECTOR_DB_PATH: str = "./vector_store"
    VECTOR_COLLECTION: str = "email_vectors"
    SIMILAR_TOP_K: int = 11

    # Batched analysis
    ANALYSIS_ROW_LIMIT: int = 100
    ANALYSIS_CONCURRENCY: int = 1
    CATEGORY_BATCH_SIZE: int = 10
    CATEGORY_PROMPT_CHARS: int = 8000
    EMAIL_BATCH_SIZE: int = 10
    EMAIL_PROMPT_CHARS: int = 6000
    DISCORD_BATCH_SIZE: int = 50
    DISCORD_PROMPT_CHARS: int = 8000
    TWEET_BATCH_SIZE: int = 10
    TWEET_PROMPT_CHARS: int = 8000
    SENTIMENT_BATCH_SIZE: int = 50
    SENTIMENT_PROMPT_CHARS: int = 6000
    FORUM_SUMMARY_POSTS: int = 30
    FORUM_PROMPT_CHARS: int = 8000
    INSIGHTS_RECENT_LIMIT: int = 50
    INSIGHTS_PROMPT_CHARS: int = 6000

    CORS_ORIGINS: str = "*"
    LOG_LEVEL: str = "INFO"

    model_config = {"env_file": ".env", "extra": "ignore"}

    @model_validator(mode="after")
    def _fix_database_url(self):
        """Hosted Postgres URLs come as postgresql:// but asyncpg needs postgresql+asyncpg://."""
        if self.DATABASE_URL.startswith("postgresql://"):
            self.DATABASE_URL = self.DATABASE_URL.replace(
                "postgresql://", "postgresql+asyncpg://", 1,
            )
        return self


settings = Settings()
