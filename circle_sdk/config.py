"""
Configuration for the Circle SDK.

Settings are read once (from keyword arguments, ``CIRCLE_*`` environment
variables or a ``.env`` file) and then passed explicitly to the clients.
Nothing in the SDK reads the process environment after that.
"""
from typing import Any, Optional, Tuple

from pydantic import Field, SecretStr, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .exceptions import ConfigError


class CircleSettings(BaseSettings):
    """Circle SDK settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="CIRCLE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
    )

    base_url: str = Field(default="https://api.circle.com", description="Circle API base URL")
    api_key: str = Field(description="Circle API key, sent as a bearer token")
    entity_secret: Optional[SecretStr] = Field(
        default=None, description="Hex-encoded entity secret (write operations only)"
    )
    public_key: Optional[str] = Field(
        default=None, description="Entity public key PEM (write operations only)"
    )
    timeout: Optional[float] = Field(
        default=None, description="Optional HTTP timeout in seconds"
    )

    @field_validator("public_key")
    @classmethod
    def _unescape_newlines(cls, value: Optional[str]) -> Optional[str]:
        # PEM keys stored in .env files usually carry literal "\n" sequences
        if value is not None and "\\n" in value:
            value = value.replace("\\n", "\n")
        return value

    @classmethod
    def load(cls, **overrides: Any) -> "CircleSettings":
        """
        Build settings, wrapping validation failures in ConfigError.

        Args:
            **overrides: Values that take precedence over the environment

        Raises:
            ConfigError: If a required value is missing or invalid
        """
        try:
            return cls(**overrides)
        except ValidationError as e:
            missing = [".".join(str(p) for p in err["loc"]) for err in e.errors()]
            raise ConfigError(
                f"Invalid Circle configuration ({', '.join(missing)}): {e}"
            ) from e

    def require_entity_credentials(self) -> Tuple[str, str]:
        """
        Return the entity secret and public key needed for write operations.

        Raises:
            ConfigError: If either value is missing
        """
        if self.entity_secret is None or not self.entity_secret.get_secret_value():
            raise ConfigError("Missing environment variable: CIRCLE_ENTITY_SECRET")
        if not self.public_key:
            raise ConfigError("Missing environment variable: CIRCLE_PUBLIC_KEY")
        return self.entity_secret.get_secret_value(), self.public_key
