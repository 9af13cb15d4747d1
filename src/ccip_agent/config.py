"""Configuration management for ccip-agent."""

from __future__ import annotations

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

from ccip_agent.errors import ConfigurationError

REQUIRED_SERVER_SETTINGS: tuple[str, ...] = (
    "rpc_url",
    "private_key",
    "router_address",
    "destination_chain_selector",
)


class Settings(BaseSettings):
    """Process settings, read once from the environment and ``.env``."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        frozen=True,
    )

    # Chain
    rpc_url: str | None = Field(default=None, description="Source chain JSON-RPC endpoint")
    private_key: SecretStr | None = Field(default=None, description="Signing key of the sender account")
    router_address: str | None = Field(default=None, description="CCIP router, also the allowance spender")
    token_address: str | None = Field(default=None, description="Default token when a call omits tokenAddress")
    destination_chain_selector: str | None = Field(default=None, description="CCIP selector of the destination chain")
    destination_account: str | None = Field(default=None, description="Default receiver on the destination chain")
    receipt_timeout_seconds: float = Field(default=240, gt=0, description="Wait limit for one transaction receipt")

    # Model
    llama_api_url: str = Field(default="http://localhost:11434/api/generate")
    llama_api_key: SecretStr | None = Field(default=None)
    llama_model: str = Field(default="llama3.2")

    # Time budgets
    model_timeout_seconds: float = Field(default=100, gt=0, description="Budget for one model completion")
    tool_timeout_seconds: float = Field(default=300, gt=0, description="Budget for one tool execution")

    # Server
    mcp_server_host: str = Field(default="127.0.0.1")
    mcp_server_port: int = Field(default=3001)
    mcp_server_url: str = Field(default="http://localhost:3001/rpc", description="Tool server used by the chat client")
    default_session_id: str = Field(default="default")
    session_capacity: int = Field(default=256, ge=1)
    session_ttl_seconds: float = Field(default=1800, gt=0)

    log_level: str = Field(default="INFO")

    def missing_server_settings(self) -> list[str]:
        return [name.upper() for name in REQUIRED_SERVER_SETTINGS if not _is_set(getattr(self, name))]

    def validate_server(self) -> None:
        """Fail fast when the tool server cannot sign or route transfers."""
        missing = self.missing_server_settings()
        if missing:
            raise ConfigurationError(missing)


def _is_set(value: object) -> bool:
    if isinstance(value, SecretStr):
        value = value.get_secret_value()
    if isinstance(value, str):
        return bool(value.strip())
    return value is not None


def load_settings(**overrides: object) -> Settings:
    """Load settings once; keyword overrides win over the environment."""
    return Settings(**overrides)
