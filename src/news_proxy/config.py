from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    gnews_api_key: str | None = None
    gnews_base_url: str = "https://gnews.io/api/v4"

    # Seconds. 300 keeps upstream responses for five minutes.
    cache_ttl: float = 300.0
    cache_check_period: float = 600.0
    request_timeout: float = 10.0

    host: str = "0.0.0.0"
    port: int = 3000
    environment: str = "production"
    log_level: str = "INFO"

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")


settings = Settings()
