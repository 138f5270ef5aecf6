from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="PAYPAL_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    username: str = Field(default="", description="NVP API username")
    password: str = Field(default="", description="NVP API password")
    signature: str = Field(default="", description="NVP API signature")
    sandbox: bool = Field(default=True, description="Route calls to the PayPal sandbox")
    api_version: str = Field(default="65.1")
    timeout_seconds: float = Field(default=30.0, gt=0)
    log_level: str = Field(default="INFO", description="Level for the express_checkout loggers")

    # Defaults used when a transaction carries no return/cancel url of its own
    return_url: str = Field(default="")
    cancel_url: str = Field(default="")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        value = value.strip().upper()
        if value not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"unknown log level '{value}'")
        return value

    @field_validator("return_url", "cancel_url")
    @classmethod
    def validate_redirect_url(cls, value: str) -> str:
        """
        Validate redirect urls.

        An empty value is allowed and means "no default configured"; any
        other value must be an absolute http(s) url since PayPal sends the
        buyer back to it.
        """
        value = value.strip()
        if value and not value.startswith(("http://", "https://")):
            raise ValueError(f"redirect url must be an absolute http(s) url, got '{value}'")
        return value


@lru_cache(maxsize=None)
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Returns:
        Settings: The cached settings instance
    """
    return Settings()


def clear_settings_cache() -> None:
    """
    Clear the cached settings instance.

    Useful for testing or when configuration needs to be reloaded.
    """
    get_settings.cache_clear()
