from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class MTAConfig(BaseSettings):
    """Configuration for MTA GTFS-RT feed access and caching.

    Automatically loads from environment variables and .env file.
    """

    model_config = SettingsConfigDict(env_file=".env", extra="ignore", populate_by_name=True)

    api_key: str | None = Field(default=None, alias="MTA_API_KEY")
    feed_base_url: str = "https://api-endpoint.mta.info/Dataservice/mtagtfsfeeds"
    request_timeout_seconds: float = Field(default=15.0, alias="MTA_REQUEST_TIMEOUT")

    # Cache TTLs (seconds); the two domains expire independently
    feed_cache_ttl_seconds: float = Field(default=15, alias="MTA_FEED_CACHE_TTL")
    board_cache_ttl_seconds: float = Field(default=20 * 60, alias="MTA_BOARD_CACHE_TTL")

    # Used for the localized clock string on arrival boards
    timezone: str = Field(default="America/New_York", alias="MTA_TIMEZONE")


@lru_cache
def get_mta_config() -> MTAConfig:
    """Get MTA configuration (cached singleton).

    Returns:
        MTAConfig with values from .env file or environment variables.
    """
    return MTAConfig()
