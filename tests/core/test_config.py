from __future__ import annotations

from dataclasses import replace

import pytest

from badgeflow.core.config import (
    DEFAULT_API_BASE,
    DEFAULT_REDIRECT_URL,
    DEMO_SEED,
    load_settings,
    sanitize_hex_seed,
    warn_on_insecure_settings,
)
from tests.fakes import make_settings

_ENV_VARS = (
    "APP_ENV",
    "LOG_LEVEL",
    "LOG_JSON",
    "PORT",
    "SECURE_SEED",
    "PROFILE_ID",
    "PROFILE_NAME",
    "LEARNCARD_API_BASE",
    "LEARNCARD_API_KEY",
    "LEARNCARD_APP_BASE",
    "LEARNCARD_CONSENT_BASE",
    "TEST_RECIPIENT_EMAIL",
    "ORG_DISPLAY_NAME",
    "ORG_LOGO_URL",
    "WEBHOOK_PUBLIC_URL",
    "SIGNING_AUTH_NAME",
    "SIGNING_AUTH_ENDPOINT",
    "PIXELPET_PROFILE_ID",
    "PIXELPET_DISPLAY_NAME",
    "GAMEFLOW_REDIRECT_URL",
)

SEED = "ab" * 32


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)


# ---- valid values ----


def test_load_settings_defaults() -> None:
    settings = load_settings()
    assert settings.app_env == "dev"
    assert settings.log_level == "info"
    assert settings.log_json is False
    assert settings.port == 3000
    assert settings.api_base == DEFAULT_API_BASE
    assert settings.api_key is None
    assert settings.profile_id == "my-awesome-org-profile"
    assert settings.test_recipient_email == "student@example.com"
    assert settings.pixelpet_profile_id == "pixelpet-designer-game"
    assert settings.gameflow_redirect_url == DEFAULT_REDIRECT_URL
    assert settings.webhook_public_url is None


def test_load_settings_respects_env_vars(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("APP_ENV", "prod")
    monkeypatch.setenv("LOG_LEVEL", "error")
    monkeypatch.setenv("LOG_JSON", "true")
    monkeypatch.setenv("PORT", "8080")
    monkeypatch.setenv("LEARNCARD_API_KEY", "secret")
    monkeypatch.setenv("LEARNCARD_API_BASE", "https://staging.network.test/")
    monkeypatch.setenv("SIGNING_AUTH_ENDPOINT", "https://signer.test")
    settings = load_settings()
    assert settings.app_env == "prod"
    assert settings.log_level == "error"
    assert settings.log_json is True
    assert settings.port == 8080
    assert settings.api_key == "secret"
    assert settings.api_base == "https://staging.network.test"
    assert settings.signing_auth_endpoint == "https://signer.test"


def test_load_settings_normalizes_case(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("APP_ENV", "PROD")
    monkeypatch.setenv("LOG_LEVEL", "DEBUG")
    settings = load_settings()
    assert settings.app_env == "prod"
    assert settings.log_level == "debug"


def test_blank_optional_values_are_none(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("LEARNCARD_API_KEY", "   ")
    monkeypatch.setenv("ORG_DISPLAY_NAME", "")
    settings = load_settings()
    assert settings.api_key is None
    assert settings.org_display_name is None


def test_pixelpet_profile_falls_back_to_profile_id(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("PROFILE_ID", "shared-org")
    monkeypatch.setenv("PROFILE_NAME", "Shared Org")
    settings = load_settings()
    assert settings.pixelpet_profile_id == "shared-org"
    assert settings.pixelpet_display_name == "Shared Org"

    monkeypatch.setenv("PIXELPET_PROFILE_ID", "pets")
    assert load_settings().pixelpet_profile_id == "pets"


# ---- invalid values ----


def test_load_settings_rejects_invalid_app_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("APP_ENV", "staging")
    with pytest.raises(ValueError, match="APP_ENV must be dev|test|prod"):
        load_settings()


def test_load_settings_rejects_invalid_log_level(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("LOG_LEVEL", "verbose")
    with pytest.raises(ValueError, match="LOG_LEVEL must be debug|info|warning|error"):
        load_settings()


def test_load_settings_rejects_non_integer_port(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("PORT", "eighty")
    with pytest.raises(ValueError, match="PORT must be an integer"):
        load_settings()


# ---- seed handling ----


@pytest.mark.parametrize(
    "raw",
    [SEED, f"0x{SEED}", f'"{SEED}"', f"  '{SEED}'  ", SEED.upper(), f"0X{SEED}"],
)
def test_sanitize_hex_seed_accepts_common_spellings(raw: str) -> None:
    assert sanitize_hex_seed(raw) == SEED


@pytest.mark.parametrize("raw", [None, "", "abc", "g" * 64, SEED + "00"])
def test_sanitize_hex_seed_rejects_bad_values(raw: str | None) -> None:
    assert sanitize_hex_seed(raw) is None


def test_missing_seed_falls_back_to_demo_seed() -> None:
    settings = load_settings()
    assert settings.secure_seed == DEMO_SEED
    assert settings.uses_demo_seed is True


def test_invalid_seed_falls_back_to_demo_seed(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("SECURE_SEED", "not-hex")
    settings = load_settings()
    assert settings.secure_seed == DEMO_SEED
    assert settings.uses_demo_seed is True


def test_valid_seed_is_used(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("SECURE_SEED", f"0x{SEED}")
    settings = load_settings()
    assert settings.secure_seed == SEED
    assert settings.uses_demo_seed is False


# ---- Settings properties ----


@pytest.mark.parametrize(
    ("app_env", "flags"),
    [
        ("dev", (True, False, False)),
        ("test", (False, True, False)),
        ("prod", (False, False, True)),
    ],
)
def test_settings_env_flags(app_env: str, flags: tuple[bool, bool, bool]) -> None:
    s = make_settings(app_env=app_env)
    assert (s.is_dev, s.is_test, s.is_prod) == flags


def test_settings_is_frozen() -> None:
    s = make_settings()
    with pytest.raises(AttributeError):
        s.app_env = "prod"  # type: ignore[misc]


# ---- startup warnings ----


def test_warns_on_demo_seed_and_missing_key(caplog: pytest.LogCaptureFixture) -> None:
    settings = make_settings(api_key=None)
    with caplog.at_level("WARNING", logger="badgeflow.core.config"):
        warn_on_insecure_settings(settings)
    messages = [r.getMessage() for r in caplog.records]
    assert any("DEMO_SEED" in m for m in messages)
    assert any("LEARNCARD_API_KEY" in m for m in messages)


def test_no_warnings_when_configured(caplog: pytest.LogCaptureFixture) -> None:
    settings = replace(make_settings(), secure_seed=SEED, uses_demo_seed=False)
    with caplog.at_level("WARNING", logger="badgeflow.core.config"):
        warn_on_insecure_settings(settings)
    assert caplog.records == []
