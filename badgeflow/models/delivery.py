"""Universal Inbox delivery configuration.

The inbox endpoint accepts an optional ``configuration`` object.  Every
field in it overrides a network default, so the rule here is: a field
the caller did not ask for is ABSENT from the payload, never present as
an empty object.

Composition runs as three named steps, in order:

  1. delivery         - suppression flag and branded email template
  2. webhook          - where claim events are POSTed
  3. signing authority - which external signer the network should use

Each step takes the explicit argument first and only then looks at the
environment fallback, so an explicit value is never clobbered.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from badgeflow.core.config import Settings

DEFAULT_ISSUER_NAME = "LearnHaus"
DEFAULT_CREDENTIAL_TYPE = "badge"


@dataclass(frozen=True, slots=True)
class Recipient:
    """Inbox addressing.  Only ``email`` is used today."""

    type: str
    value: str

    @staticmethod
    def email(address: str) -> Recipient:
        return Recipient(type="email", value=address)

    def to_payload(self) -> dict:
        return {"type": self.type, "value": self.value}


@dataclass(frozen=True, slots=True)
class Brand:
    issuer_name: str | None = None
    issuer_logo_url: str | None = None
    credential_name: str | None = None
    credential_type: str | None = None
    recipient_name: str | None = None


@dataclass(frozen=True, slots=True)
class SigningAuthority:
    name: str
    endpoint: str

    def to_payload(self) -> dict:
        return {"name": self.name, "endpoint": self.endpoint}


@dataclass(frozen=True, slots=True)
class EnvironmentFallbacks:
    """The environment values the composer may fall back to."""

    org_display_name: str | None = None
    org_logo_url: str | None = None
    webhook_url: str | None = None
    signing_auth_name: str | None = None
    signing_auth_endpoint: str | None = None

    @staticmethod
    def from_settings(settings: Settings) -> EnvironmentFallbacks:
        return EnvironmentFallbacks(
            org_display_name=settings.org_display_name,
            org_logo_url=settings.org_logo_url,
            webhook_url=settings.webhook_public_url,
            signing_auth_name=settings.signing_auth_name,
            signing_auth_endpoint=settings.signing_auth_endpoint,
        )


@dataclass(slots=True)
class DeliveryConfiguration:
    delivery: dict = field(default_factory=dict)
    webhook_url: str | None = None
    signing_authority: SigningAuthority | None = None

    def is_empty(self) -> bool:
        return not self.delivery and not self.webhook_url and not self.signing_authority

    def to_payload(self) -> dict:
        payload: dict = {}
        if self.delivery:
            payload["delivery"] = self.delivery
        if self.webhook_url:
            payload["webhookUrl"] = self.webhook_url
        if self.signing_authority is not None:
            payload["signingAuthority"] = self.signing_authority.to_payload()
        return payload


def _compose_delivery(
    config: DeliveryConfiguration,
    *,
    skill_name: str,
    brand: Brand | None,
    suppress_delivery: bool,
    env: EnvironmentFallbacks,
) -> None:
    if brand is None and not suppress_delivery:
        return

    config.delivery["suppress"] = bool(suppress_delivery)
    if brand is None:
        return

    issuer: dict = {
        "name": brand.issuer_name or env.org_display_name or DEFAULT_ISSUER_NAME,
    }
    logo = brand.issuer_logo_url or env.org_logo_url
    if logo:
        issuer["logoUrl"] = logo

    model: dict = {
        "issuer": issuer,
        "credential": {
            "name": brand.credential_name or skill_name,
            "type": brand.credential_type or DEFAULT_CREDENTIAL_TYPE,
        },
    }
    if brand.recipient_name:
        model["recipient"] = {"name": brand.recipient_name}

    config.delivery["template"] = {"template": "default", "model": model}


def _compose_webhook(
    config: DeliveryConfiguration,
    *,
    webhook_url: str | None,
    env: EnvironmentFallbacks,
) -> None:
    config.webhook_url = webhook_url or env.webhook_url or None


def _compose_signing_authority(
    config: DeliveryConfiguration,
    *,
    signing_authority: SigningAuthority | None,
    env: EnvironmentFallbacks,
) -> None:
    if signing_authority is not None:
        config.signing_authority = signing_authority
    elif env.signing_auth_name and env.signing_auth_endpoint:
        config.signing_authority = SigningAuthority(
            name=env.signing_auth_name, endpoint=env.signing_auth_endpoint
        )


def compose_configuration(
    *,
    skill_name: str,
    brand: Brand | None = None,
    suppress_delivery: bool = False,
    webhook_url: str | None = None,
    signing_authority: SigningAuthority | None = None,
    env: EnvironmentFallbacks | None = None,
) -> DeliveryConfiguration:
    env = env or EnvironmentFallbacks()
    config = DeliveryConfiguration()
    _compose_delivery(
        config,
        skill_name=skill_name,
        brand=brand,
        suppress_delivery=suppress_delivery,
        env=env,
    )
    _compose_webhook(config, webhook_url=webhook_url, env=env)
    _compose_signing_authority(config, signing_authority=signing_authority, env=env)
    return config
