"""
Configuration management.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).lower() == "true"


@dataclass
class Config:
    """
    Application configuration.

    Loads from environment variables with sensible defaults.
    """

    # Server
    host: str = field(default_factory=lambda: os.getenv("HOST", "127.0.0.1"))
    port: int = field(default_factory=lambda: int(os.getenv("PORT", "5000")))
    debug: bool = field(default_factory=lambda: _env_flag("DEBUG"))
    allowed_origins: list[str] = field(
        default_factory=lambda: [
            o.strip() for o in os.getenv("ALLOWED_ORIGINS", "").split(",") if o.strip()
        ]
    )

    # Identity tokens
    token_secret: Optional[str] = field(
        default_factory=lambda: os.getenv("ACCESS_TOKEN_SECRET") or None
    )
    token_ttl_seconds: int = field(
        default_factory=lambda: int(os.getenv("TOKEN_TTL_SECONDS", "3600"))
    )

    # Listing policy
    advertise_requires_verified: bool = field(
        default_factory=lambda: _env_flag("ADVERTISE_REQUIRES_VERIFIED")
    )

    # Data (empty DATA_DIR keeps everything in memory)
    data_dir: str = field(default_factory=lambda: os.getenv("DATA_DIR", "./data"))
    storage_retry_backoff: float = field(
        default_factory=lambda: float(os.getenv("STORAGE_RETRY_BACKOFF", "0.1"))
    )

    # Logging
    log_level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO").upper())
    log_format: str = field(default_factory=lambda: os.getenv("LOG_FORMAT", "json").lower())

    @classmethod
    def load(cls) -> "Config":
        """Load configuration from environment."""
        return cls()

    def persist_path(self, collection: str) -> Optional[str]:
        """JSON file for a collection, or None when running in memory."""
        if not self.data_dir:
            return None
        return str(Path(self.data_dir) / f"{collection}.json")

    def to_dict(self) -> dict:
        """Convert config to dictionary. The token secret is never included."""
        return {
            "host": self.host,
            "port": self.port,
            "debug": self.debug,
            "allowed_origins": self.allowed_origins,
            "token_ttl_seconds": self.token_ttl_seconds,
            "advertise_requires_verified": self.advertise_requires_verified,
            "data_dir": self.data_dir,
            "storage_retry_backoff": self.storage_retry_backoff,
            "log_level": self.log_level,
            "log_format": self.log_format,
        }
