"""
Application settings for w3wallet.

Values come from keyword arguments, ``W3WALLET_*`` environment variables or a
``.env`` file, in that order of precedence. Settings are read once at
application start and handed to :meth:`w3wallet.client.WalletClient.from_settings`.

Example:
    >>> settings = WalletSettings(dapp_url="https://example.org", chains=[11155111])
    >>> client = WalletClient.from_settings(settings, connectors=connectors)
"""
from typing import List, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .recovery import HANDOFF_KEY

__all__ = ["WalletSettings"]


class WalletSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="W3WALLET_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    app_name: str = Field(default="My Web3 App", description="Name shown by wallets")
    project_id: str = Field(default="", description="Relay (WalletConnect) project id")
    dapp_url: str = Field(default="", description="URL mobile wallet apps open on handoff")

    # Sepolia and Base Sepolia
    chains: List[int] = Field(default_factory=lambda: [11155111, 84532], description="Supported chain ids")

    handoff_key: str = Field(default=HANDOFF_KEY, description="Store key of the pending handoff")
    handoff_store_path: Optional[str] = Field(
        default=None,
        description="JSON file persisting the pending handoff; in-memory when unset",
    )
    handoff_max_age: Optional[float] = Field(
        default=600.0,
        description="Seconds after which a pending handoff is discarded unread",
    )

    log_level: str = Field(default="WARNING", description="Level of the w3wallet logger")

    @field_validator("chains")
    @classmethod
    def _chains_not_empty(cls, value: List[int]) -> List[int]:
        if not value:
            raise ValueError("at least one chain is required")
        return value

    @field_validator("log_level")
    @classmethod
    def _upper_level(cls, value: str) -> str:
        return value.upper()
