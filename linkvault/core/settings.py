from functools import lru_cache
from pathlib import Path

from pydantic import field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Database - SQLite by default, any SQLAlchemy URL works
    database_url: str = "sqlite:///./linkvault.db"
    database_pool_size: int = 5
    database_max_overflow: int = 10

    # Application
    app_name: str = "linkvault"
    debug: bool = False
    log_level: str = "INFO"
    logs_dir: Path = Path("logs")

    # HTTP client
    http_user_agent: str = (
        "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
    )
    http_timeout_seconds: float = 10.0
    http_connect_timeout_seconds: float = 5.0

    # Per-attempt deadlines for fallback chains
    oembed_timeout_seconds: float = 8.0
    metadata_proxy_timeout_seconds: float = 8.0
    embed_page_timeout_seconds: float = 8.0
    reddit_mirror_timeout_seconds: float = 5.0
    short_link_timeout_seconds: float = 5.0
    transcript_timeout_seconds: float = 10.0

    # Upstream endpoints
    metadata_proxy_url: str = "https://api.microlink.io"
    twitter_oembed_url: str = "https://publish.twitter.com/oembed"
    twitter_syndication_url: str = "https://cdn.syndication.twimg.com/tweet-result"
    instagram_oembed_url: str = "https://api.instagram.com/oembed/"
    tiktok_oembed_url: str = "https://www.tiktok.com/oembed"
    youtube_oembed_url: str = "https://www.youtube.com/oembed"
    reddit_mirror_hosts: list[str] = ["www.reddit.com", "old.reddit.com", "api.reddit.com"]

    # Content processing
    max_summary_input_chars: int = 4000
    min_text_for_text_summary: int = 100
    min_article_chars: int = 100
    generic_body_max_chars: int = 5000
    min_email_body_chars: int = 50

    class Config:
        env_file = ".env"
        env_prefix = "LINKVAULT_"
        case_sensitive = False
        extra = "ignore"

    @field_validator("reddit_mirror_hosts")
    @classmethod
    def validate_mirror_hosts(cls, v):
        if not v:
            raise ValueError("At least one Reddit mirror host must be configured")
        return [host.strip().lower() for host in v if host.strip()]


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
