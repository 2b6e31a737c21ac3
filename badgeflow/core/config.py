"""Environment-driven settings for badgeflow.

Everything the service and the quickstart script read from the
environment is loaded ONCE into a frozen ``Settings`` object.  Call sites
never touch ``os.environ`` directly; they receive a ``Settings`` and read
attributes.  Tests build their own ``Settings`` with ``dataclasses.replace``
or ``load_settings()`` under ``monkeypatch``.

A ``.env`` file in the working directory is honoured (python-dotenv), but
real environment variables always win over it.

SEED HANDLING
--------------
``SECURE_SEED`` is the issuer's key material: 64 hex characters.  Values
pasted from other tools often carry a ``0x`` prefix or stray quotes, so
those are stripped before validation.  A missing or malformed seed does
not stop the process; we fall back to a well-known DEMO seed and log a
warning.  The demo seed is public, so anything issued with it is only
good for local development.
"""

from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass
from typing import Literal

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

AppEnv = Literal["dev", "test", "prod"]
LogLevel = Literal["debug", "info", "warning", "error"]

DEMO_SEED = "0123456789abcdef0123456789abcdef0123456789abcdef0123456789abcdef"

DEFAULT_API_BASE = "https://network.learncard.com"
DEFAULT_APP_BASE = "https://learncard.app"
DEFAULT_CONSENT_BASE = "https://learncard.app/consent-flow"
DEFAULT_REDIRECT_URL = "http://localhost:3000/learncard-callback"

_HEX_SEED = re.compile(r"^[0-9a-fA-F]{64}$")


def _getenv(name: str, default: str = "") -> str:
    # Centralize env access so it's easy to extend later (type casting, required vars)
    return os.environ.get(name, default).strip()


def _optional(name: str) -> str | None:
    return _getenv(name) or None


def sanitize_hex_seed(raw: str | None) -> str | None:
    """Normalize a hex seed, or return None when it isn't 64 hex chars."""
    if not raw:
        return None
    seed = raw.strip()
    if seed[:2].lower() == "0x":
        seed = seed[2:]
    seed = seed.replace('"', "").replace("'", "")
    if _HEX_SEED.match(seed):
        return seed.lower()
    return None


@dataclass(frozen=True)
class Settings:
    app_env: AppEnv
    log_level: LogLevel
    log_json: bool
    port: int

    # Issuer identity
    secure_seed: str
    uses_demo_seed: bool
    profile_id: str
    profile_name: str

    # LearnCard network
    api_base: str
    api_key: str | None
    app_base: str
    consent_base: str

    # Universal Inbox defaults
    test_recipient_email: str
    org_display_name: str | None
    org_logo_url: str | None
    webhook_public_url: str | None
    signing_auth_name: str | None
    signing_auth_endpoint: str | None

    # Pixel Pet consent flow
    pixelpet_profile_id: str
    pixelpet_display_name: str
    gameflow_redirect_url: str

    @property
    def is_dev(self) -> bool:
        return self.app_env == "dev"

    @property
    def is_test(self) -> bool:
        return self.app_env == "test"

    @property
    def is_prod(self) -> bool:
        return self.app_env == "prod"


def load_settings() -> Settings:
    app_env_raw = _getenv("APP_ENV", "dev").lower()
    log_level_raw = _getenv("LOG_LEVEL", "info").lower()
    port_raw = _getenv("PORT", "3000")

    if app_env_raw not in ("dev", "test", "prod"):
        raise ValueError(f"APP_ENV must be dev|test|prod (got {app_env_raw!r})")

    if log_level_raw not in ("debug", "info", "warning", "error"):
        raise ValueError(
            f"LOG_LEVEL must be debug|info|warning|error (got {log_level_raw!r})"
        )

    try:
        port = int(port_raw)
    except ValueError:
        raise ValueError(f"PORT must be an integer (got {port_raw!r})") from None

    seed = sanitize_hex_seed(_getenv("SECURE_SEED"))

    profile_id = _getenv("PROFILE_ID") or "my-awesome-org-profile"
    profile_name = _getenv("PROFILE_NAME") or "My Awesome Org"

    return Settings(  # type: ignore[arg-type]
        app_env=app_env_raw,
        log_level=log_level_raw,
        log_json=_getenv("LOG_JSON", "false").lower() in ("1", "true", "yes"),
        port=port,
        secure_seed=seed or DEMO_SEED,
        uses_demo_seed=seed is None,
        profile_id=profile_id,
        profile_name=profile_name,
        api_base=(_getenv("LEARNCARD_API_BASE") or DEFAULT_API_BASE).rstrip("/"),
        api_key=_optional("LEARNCARD_API_KEY"),
        app_base=(_getenv("LEARNCARD_APP_BASE") or DEFAULT_APP_BASE).rstrip("/"),
        consent_base=_getenv("LEARNCARD_CONSENT_BASE") or DEFAULT_CONSENT_BASE,
        test_recipient_email=_getenv("TEST_RECIPIENT_EMAIL") or "student@example.com",
        org_display_name=_optional("ORG_DISPLAY_NAME"),
        org_logo_url=_optional("ORG_LOGO_URL"),
        webhook_public_url=_optional("WEBHOOK_PUBLIC_URL"),
        signing_auth_name=_optional("SIGNING_AUTH_NAME"),
        signing_auth_endpoint=_optional("SIGNING_AUTH_ENDPOINT"),
        pixelpet_profile_id=(
            _getenv("PIXELPET_PROFILE_ID")
            or _getenv("PROFILE_ID")
            or "pixelpet-designer-game"
        ),
        pixelpet_display_name=(
            _getenv("PIXELPET_DISPLAY_NAME")
            or _getenv("PROFILE_NAME")
            or "Pixel Pet Designer Official"
        ),
        gameflow_redirect_url=_getenv("GAMEFLOW_REDIRECT_URL") or DEFAULT_REDIRECT_URL,
    )


def warn_on_insecure_settings(settings: Settings) -> None:
    """Log the startup warnings for missing secrets.  Never raises."""
    if settings.uses_demo_seed:
        logger.warning("SECURE_SEED missing or invalid; using DEMO_SEED (dev only)")
    if not settings.api_key:
        logger.warning("LEARNCARD_API_KEY missing; network and inbox calls will fail")


load_dotenv(override=False)

# Optional: module-level singleton so imports are cheap
SETTINGS = load_settings()
