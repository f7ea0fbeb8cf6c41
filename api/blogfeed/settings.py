from typing import Optional
from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    FEED_URL: str = "https://medium.com/feed/@itantife"
    FEED_PROFILE_URL: str = "https://medium.com/@itantife"
    FEED_SOURCE_NAME: str = "Medium"
    FEED_TIMEOUT: float = 30.0

    MAX_POSTS: int = 6
    EXCERPT_LENGTH: int = 160

    CACHE_SECONDS: int = 1800
    CACHE_BACKEND: str = "memory"  # memory/redis
    REDIS_URL: str = "redis://redis:6379/0"

    API_HOST: str = "0.0.0.0"
    API_PORT: int = 8000

    BLOG_API_URL: Optional[str] = None  # defaults to /api/blog on the serving host
    BLOG_API_TIMEOUT: float = 10.0
    MAX_CARDS: int = 3

    LOG_LEVEL: str = "INFO"

    @property
    def placeholder_excerpt(self) -> str:
        return f"Read the latest post on {self.FEED_SOURCE_NAME}."

settings = Settings()
