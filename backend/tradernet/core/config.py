"""
Configuration module for the Trader Network backend.
Loads environment variables and provides typed settings.
"""
from functools import lru_cache
from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Polymarket Data API
    data_api_base_url: str = Field(
        default="https://data-api.polymarket.com/v1",
        description="Polymarket Data API base URL (leaderboard + positions)"
    )
    request_timeout_seconds: float = Field(
        default=30.0,
        description="HTTP client timeout for Data API calls"
    )

    # Rate Limiting
    max_concurrent_requests: int = Field(
        default=10,
        description="Maximum concurrent requests to the Data API"
    )

    # Position Fan-Out
    fetch_batch_size: int = Field(
        default=5,
        ge=1,
        description="Number of wallets fetched concurrently per cycle"
    )
    wallet_fetch_timeout_seconds: float = Field(
        default=10.0,
        gt=0,
        description="Upper bound for a single wallet's position retrieval"
    )

    # Similarity Network
    min_similarity: float = Field(
        default=0.1,
        ge=0.0,
        le=1.0,
        description="Minimum Jaccard similarity for a trader connection"
    )
    top_connections: int = Field(
        default=100,
        ge=0,
        description="Maximum number of links kept in the network graph"
    )
    leaderboard_limit: int = Field(
        default=10,
        ge=1,
        le=50,
        description="Number of top traders tracked per cycle"
    )

    # Cache TTL Settings (in seconds)
    leaderboard_cache_ttl: int = Field(
        default=300,
        description="TTL for leaderboard responses"
    )
    network_cache_ttl: int = Field(
        default=60,
        description="TTL for computed network snapshots"
    )

    # Server
    log_level: str = Field(default="INFO", description="Logging level")
    cors_origins: List[str] = Field(
        default=[
            "http://localhost:3000",
            "http://127.0.0.1:3000",
            "http://localhost:5173",
            "http://127.0.0.1:5173",
        ],
        description="Origins allowed to call the API"
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Convenience export
settings = get_settings()
