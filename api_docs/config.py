from __future__ import annotations

from urllib.parse import urlparse

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="API_DOCS_", case_sensitive=False, extra="ignore")

    app_env: str = Field(default="development")
    log_level: str = Field(default="INFO")

    default_base_url: str = Field(default="https://api.penguimpay.com")
    relay_allowed_origins: str = Field(default="https://api.penguimpay.com")
    upstream_timeout_sec: float = Field(default=15.0, ge=1.0, le=300.0)
    strict_path_params: bool = Field(default=False)

    rate_limit_enabled: bool = Field(default=False)
    rate_limit_requests_per_minute: int = Field(default=60, ge=1, le=10000)
    rate_limit_trust_proxy_headers: bool = Field(default=False)
    trusted_proxy_ips: str = Field(default="")

    docs_ui_enabled: bool = Field(default=True)
    server_host: str = Field(default="127.0.0.1")
    server_port: int = Field(default=8000, ge=1, le=65535)

    def parsed_relay_allowed_origins(self) -> tuple[str, ...]:
        origins = (value.strip().rstrip("/") for value in self.relay_allowed_origins.split(","))
        return tuple(origin for origin in origins if origin)

    def parsed_trusted_proxy_ips(self) -> set[str]:
        return {value.strip() for value in self.trusted_proxy_ips.split(",") if value.strip()}

    def is_production(self) -> bool:
        return self.app_env.strip().lower() == "production"

    def production_safety_errors(self) -> list[str]:
        if not self.is_production():
            return []

        errors: list[str] = []
        origins = self.parsed_relay_allowed_origins()

        if not origins:
            errors.append("API_DOCS_RELAY_ALLOWED_ORIGINS must be configured in production")

        for origin in origins:
            if urlparse(origin).scheme != "https":
                errors.append(f"API_DOCS_RELAY_ALLOWED_ORIGINS entry `{origin}` must use https in production")

        if not self.rate_limit_enabled:
            errors.append("API_DOCS_RATE_LIMIT_ENABLED must be enabled in production")

        base_url = self.default_base_url.strip().rstrip("/")
        if not any(base_url == origin or base_url.startswith(f"{origin}/") for origin in origins):
            errors.append("API_DOCS_DEFAULT_BASE_URL must be covered by API_DOCS_RELAY_ALLOWED_ORIGINS")

        if self.rate_limit_trust_proxy_headers and not self.parsed_trusted_proxy_ips():
            errors.append("API_DOCS_TRUSTED_PROXY_IPS must be configured when trusting proxy headers")

        return errors


def get_settings() -> Settings:
    return Settings()
