"""Configuration management for kvcache nodes and clients."""

from typing import List
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Settings loaded from environment variables (prefix KVCACHE_)."""

    model_config = SettingsConfigDict(
        env_prefix="KVCACHE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # Server Configuration
    host: str = Field(default="0.0.0.0", description="Server host")
    port: int = Field(default=8081, description="Server port")
    debug: bool = Field(default=False, description="Debug mode")
    log_level: str = Field(default="INFO", description="Logging level")

    # Cache Node Configuration
    cache_capacity: int = Field(default=1000, description="Maximum number of keys held by this node")

    # Client Routing Configuration
    node_urls: str = Field(default="http://localhost:8081", description="Comma separated cache node base URLs")
    virtual_nodes: int = Field(default=128, description="Ring positions per physical node")
    max_retries: int = Field(default=3, description="Maximum number of candidate nodes tried per operation")
    request_timeout_seconds: float = Field(default=2.0, description="Per-attempt connect/operation timeout")

    # Monitoring
    enable_metrics: bool = Field(default=True, description="Enable Prometheus metrics")

    @property
    def node_urls_list(self) -> List[str]:
        """Get configured node URLs as a list."""
        return [url.strip() for url in self.node_urls.split(",") if url.strip()]


# Global settings instance
settings = Settings()
