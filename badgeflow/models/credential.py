"""Unsigned credential documents.

Maps to the W3C VC data model / Open Badges v3 AchievementCredential.
These builders only ASSEMBLE documents; nothing here signs.  The issuer
and subject ids may be placeholders that the network rebinds at claim
time, and DIDs are passed through uninterpreted.
"""

from __future__ import annotations

import uuid
from datetime import UTC, datetime
from urllib.parse import quote

VC_CONTEXT = "https://www.w3.org/2018/credentials/v1"
OB3_CONTEXT = "https://purl.imsglobal.org/spec/ob/v3p0/context-3.0.2.json"

PLACEHOLDER_ISSUER = "did:key:placeholder"
PLACEHOLDER_SUBJECT = "did:example:placeholder"

# encodeURIComponent leaves these unescaped in addition to [A-Za-z0-9_.-~]
_URI_COMPONENT_SAFE = "!*'()"


def encode_uri_component(value: str) -> str:
    return quote(value, safe=_URI_COMPONENT_SAFE)


def achievement_id(skill_name: str) -> str:
    return f"urn:achievement:{encode_uri_component(skill_name)}"


def issuance_timestamp(now: datetime | None = None) -> str:
    """ISO-8601 UTC with millisecond precision and a ``Z`` suffix."""
    moment = now or datetime.now(UTC)
    return moment.astimezone(UTC).isoformat(timespec="milliseconds").replace(
        "+00:00", "Z"
    )


def build_open_badge_credential(
    *,
    skill_name: str,
    issuer_did: str | None = None,
    evidence_text: str | None = None,
    subject_id: str | None = None,
) -> dict:
    if not skill_name or not skill_name.strip():
        raise ValueError("skill_name must be non-empty")

    narrative = evidence_text or f"Completed {skill_name}"
    return {
        "@context": [VC_CONTEXT, OB3_CONTEXT],
        "type": ["VerifiableCredential", "OpenBadgeCredential"],
        "issuer": issuer_did or PLACEHOLDER_ISSUER,
        "issuanceDate": issuance_timestamp(),
        "name": skill_name,
        "credentialSubject": {
            "id": subject_id or PLACEHOLDER_SUBJECT,
            "type": ["AchievementSubject"],
            "achievement": {
                "id": achievement_id(skill_name),
                "type": ["Achievement"],
                "name": skill_name,
                "description": narrative,
                "criteria": {"narrative": narrative},
            },
        },
    }


def build_skill_badge_credential(
    *,
    issuer_did: str,
    recipient_did: str,
    name: str = "Demo Skill Badge",
    description: str = "A simple test badge issued from the demo service",
) -> dict:
    return {
        "@context": [VC_CONTEXT],
        "id": f"urn:uuid:{uuid.uuid4()}",
        "type": ["VerifiableCredential", "SkillBadge"],
        "issuer": issuer_did,
        "issuanceDate": issuance_timestamp(),
        "credentialSubject": {
            "id": recipient_did,
            "name": name,
            "description": description,
        },
    }


def build_pet_badge_credential(
    *,
    issuer_did: str,
    recipient_did: str,
    pet_name: str,
    pet_design: list[str],
) -> dict:
    """OpenBadge for a designed pixel pet, bound directly to the player DID.

    The design (one CSS colour per grid cell) travels as evidence so the
    wallet can re-render the pet.
    """
    credential = build_open_badge_credential(
        skill_name=f"Pixel Pet: {pet_name}",
        issuer_did=issuer_did,
        evidence_text=f"Designed the pixel pet {pet_name!r} in Pixel Pet Designer.",
        subject_id=recipient_did,
    )
    credential["id"] = f"urn:uuid:{uuid.uuid4()}"
    credential["evidence"] = [
        {
            "id": f"urn:uuid:{uuid.uuid4()}",
            "type": ["Evidence"],
            "name": pet_name,
            "description": "Pixel grid, row-major, one colour per cell",
            "genre": "PixelArt",
            "narrative": ",".join(pet_design),
        }
    ]
    return credential


def build_boost_template(
    *,
    name: str,
    image: str,
    description: str,
    narrative: str,
    issuer_did: str | None = None,
    achievement_type: str = "Achievement",
) -> dict:
    """Reusable boost (badge template) published to the network.

    The subject stays a placeholder; each claim binds it to the claimer.
    """
    credential = build_open_badge_credential(
        skill_name=name, issuer_did=issuer_did, evidence_text=narrative
    )
    credential["type"] = ["VerifiableCredential", "OpenBadgeCredential", "BoostCredential"]
    credential["image"] = image
    achievement = credential["credentialSubject"]["achievement"]
    achievement["achievementType"] = achievement_type
    achievement["description"] = description
    achievement["image"] = image
    return credential
