from __future__ import annotations

import pytest

import api_docs.main as app_main
from api_docs.config import Settings


def _hardened_production_settings(**overrides: object) -> Settings:
    values: dict[str, object] = {
        "app_env": "production",
        "default_base_url": "https://api.penguimpay.com",
        "relay_allowed_origins": "https://api.penguimpay.com",
        "rate_limit_enabled": True,
    }
    values.update(overrides)
    return Settings(**values)


def test_production_safety_errors_empty_for_hardened_config() -> None:
    assert _hardened_production_settings().production_safety_errors() == []


def test_production_safety_errors_report_critical_misconfiguration() -> None:
    settings = _hardened_production_settings(
        relay_allowed_origins="http://api.penguimpay.com",
        rate_limit_enabled=False,
        default_base_url="https://app.penguimpay.com",
        rate_limit_trust_proxy_headers=True,
        trusted_proxy_ips="",
    )

    errors = settings.production_safety_errors()

    assert any("must use https" in item for item in errors)
    assert any("API_DOCS_RATE_LIMIT_ENABLED" in item for item in errors)
    assert any("API_DOCS_DEFAULT_BASE_URL" in item for item in errors)
    assert any("API_DOCS_TRUSTED_PROXY_IPS" in item for item in errors)


def test_empty_allow_list_is_reported() -> None:
    errors = _hardened_production_settings(relay_allowed_origins=" , ").production_safety_errors()
    assert any("API_DOCS_RELAY_ALLOWED_ORIGINS must be configured" in item for item in errors)


def test_non_production_environment_does_not_enforce_production_guards() -> None:
    settings = Settings(app_env="development", relay_allowed_origins="", rate_limit_enabled=False)
    assert settings.production_safety_errors() == []


def test_parsed_relay_allowed_origins_strips_trailing_slashes() -> None:
    settings = Settings(relay_allowed_origins="https://api.penguimpay.com/, https://sandbox.penguimpay.com ,")
    assert settings.parsed_relay_allowed_origins() == (
        "https://api.penguimpay.com",
        "https://sandbox.penguimpay.com",
    )


def test_runtime_configuration_guard_raises_on_unsafe_production() -> None:
    settings = _hardened_production_settings(rate_limit_enabled=False)
    with pytest.raises(RuntimeError, match="Unsafe production configuration"):
        app_main._validate_runtime_configuration(settings)
