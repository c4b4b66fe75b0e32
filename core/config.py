"""Ledger configuration."""

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class LedgerConfig(BaseSettings):
    """
    Ledger configuration, read from LEDGER_* environment variables and .env.

    Defaults run everything in memory with no email delivery, which is what
    tests and local development want. Empty variables fall back to defaults.
    """

    model_config = SettingsConfigDict(
        env_prefix="LEDGER_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_ignore_empty=True,
        extra="ignore",
    )

    # Display
    currency_symbol: str = Field(
        default="$",
        description="Symbol used when formatting amounts for messages",
        max_length=5,
    )

    # Persistence
    store_backend: Literal["memory", "file", "valkey"] = Field(
        default="memory",
        description="Where snapshots are mirrored",
    )
    snapshot_path: str = Field(
        default="ledger_snapshot.json",
        description="Snapshot file for the file backend",
    )
    valkey_url: str = Field(
        default="redis://localhost:6379/0",
        description="Connection URL for the valkey backend",
    )
    snapshot_key: str = Field(
        default="ledger:snapshot",
        description="Key holding the snapshot in the valkey backend",
    )
    max_conflict_retries: int = Field(
        default=3,
        description="Re-apply attempts after a concurrent writer wins",
        ge=0,
        le=10,
    )

    # Notifications
    notification_history: int = Field(
        default=50,
        description="How many notifications the feed keeps",
        ge=1,
        le=1000,
    )

    # Email gateway (all three required to enable delivery)
    email_gateway_url: str | None = Field(default=None)
    email_api_key: str | None = Field(default=None)
    email_hmac_secret: str | None = Field(default=None)

    @property
    def email_enabled(self) -> bool:
        return bool(self.email_gateway_url and self.email_api_key and self.email_hmac_secret)
