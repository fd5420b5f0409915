from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Loading priority (highest to lowest):
    1. Environment variables (prefixed with SHORTURL_)
    2. .env file
    3. Default values below

    Built once by the entry point and handed to the apps; frozen so
    nothing can change it after startup.
    """

    # Application
    app_name: str = "URL Shortener"
    app_version: str = "1.0.0"
    debug: bool = False
    log_level: str = "INFO"

    # Servers: redirects and management API listen on separate ports
    host: str = "0.0.0.0"
    service_port: int = 8080
    api_port: int = 8081

    # Database
    database_url: str = "sqlite:///./urls.db"

    # Redirect behaviour
    use_302: Optional[str] = None  # any value switches 301 -> 302
    address_to_redirect_if_not_found: Optional[str] = None

    # API keys
    admin_uid: int = 0
    api_key_length: int = 30

    # Pydantic v2 configuration
    model_config = SettingsConfigDict(
        env_prefix="SHORTURL_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        frozen=True,
    )

    @property
    def redirect_status_code(self) -> int:
        """301 unless SHORTURL_USE_302 is set"""
        return 302 if self.use_302 is not None else 301
