"""Quickstart: issue a first badge two different ways.

RUN:  python -m badgeflow.quickstart

Steps:
  1. open an issuer session (DID from SECURE_SEED)
  2. make sure the org profile exists (an existing profile is fine,
     any other failure aborts)
  3. BOOST path: build a boost template, publish it, generate a claim link
  4. INBOX path: send an email-addressed credential through the
     Universal Inbox to TEST_RECIPIENT_EMAIL

The two issuance paths are independent.  One can succeed while the
other fails; nothing is rolled back.  Both outcomes are reported in the
returned ``QuickstartResult`` and the exit code is non-zero unless both
succeeded.
"""

from __future__ import annotations

import asyncio
import logging
import sys
from dataclasses import dataclass

import httpx

from badgeflow.core.config import SETTINGS, Settings, warn_on_insecure_settings
from badgeflow.core.errors import BadgeflowError, UnexpectedFatalError
from badgeflow.core.logging import setup_logging
from badgeflow.models.credential import build_boost_template
from badgeflow.models.delivery import Brand
from badgeflow.services.inbox_client import InboxClient
from badgeflow.services.issuer_session import (
    IssuerSession,
    ensure_profile,
    open_issuer_session,
)

logger = logging.getLogger("quickstart")

ACHIEVEMENT_NAME = "Quickstart Achievement"
ACHIEVEMENT_IMAGE = "https://placehold.co/400x400?text=Quickstart"


@dataclass
class QuickstartResult:
    claim_link: str | None = None
    boost_error: str | None = None
    inbox_issuance_id: str | None = None
    inbox_claim_url: str | None = None
    inbox_error: str | None = None

    @property
    def ok(self) -> bool:
        return self.boost_error is None and self.inbox_error is None


async def _ensure_org_profile(session: IssuerSession, settings: Settings) -> None:
    logger.info("Creating profile %r...", settings.profile_id)
    try:
        created = await ensure_profile(
            session.network,
            profile_id=settings.profile_id,
            display_name=settings.profile_name,
            description="Issuing awesome credentials.",
        )
    except (BadgeflowError, httpx.HTTPError) as exc:
        raise UnexpectedFatalError(f"Failed to create profile: {exc}") from exc
    if created:
        logger.info("Profile %r created.", settings.profile_id)


async def _issue_boost(session: IssuerSession, result: QuickstartResult) -> None:
    try:
        template = build_boost_template(
            name=ACHIEVEMENT_NAME,
            image=ACHIEVEMENT_IMAGE,
            description="Completed the quickstart guide!",
            narrative="User successfully ran the quickstart script.",
            issuer_did=session.did,
        )
        boost_uri = await session.network.create_boost(
            template,
            name=ACHIEVEMENT_NAME,
            description="Completed the quickstart guide!",
        )
        result.claim_link = await session.network.generate_boost_claim_link(boost_uri)
    except (BadgeflowError, httpx.HTTPError) as exc:
        logger.error("Boost path failed: %s", exc)
        result.boost_error = str(exc)
        return
    logger.info("Boost claim link: %s", result.claim_link)


async def _issue_inbox(
    session: IssuerSession, inbox: InboxClient, settings: Settings, result: QuickstartResult
) -> None:
    try:
        response = await inbox.issue_via_inbox(
            email=settings.test_recipient_email,
            skill_name=ACHIEVEMENT_NAME,
            issuer_did=session.did,
            evidence_text="Completed the quickstart guide at LearnHaus.",
            brand=Brand(
                issuer_name=settings.org_display_name,
                issuer_logo_url=settings.org_logo_url,
                credential_name=ACHIEVEMENT_NAME,
                credential_type="badge",
                recipient_name="Your Learner",
            ),
            suppress_delivery=False,
        )
    except (BadgeflowError, httpx.HTTPError) as exc:
        logger.error("Inbox path failed: %s", exc)
        result.inbox_error = str(exc)
        return

    # Success bodies are returned verbatim and need not be objects.
    summary = response if isinstance(response, dict) else {}
    result.inbox_issuance_id = summary.get("issuanceId")
    result.inbox_claim_url = summary.get("claimUrl")
    if result.inbox_claim_url:
        logger.info("Inbox claim URL (delivery suppressed): %s", result.inbox_claim_url)
    else:
        logger.info(
            "Inbox issuance created: %s (email will be sent by LearnCard)",
            result.inbox_issuance_id,
        )


async def run_quickstart(
    settings: Settings,
    *,
    session: IssuerSession | None = None,
    inbox: InboxClient | None = None,
) -> QuickstartResult:
    """Run both issuance paths.

    Raises:
        UnexpectedFatalError: the profile could not be ensured.
    """
    own_session = session is None
    if session is None:
        logger.info("Initializing issuer session...")
        session = await open_issuer_session(settings)
    inbox = inbox or InboxClient.from_settings(settings)

    try:
        await _ensure_org_profile(session, settings)
        result = QuickstartResult()
        await _issue_boost(session, result)
        await _issue_inbox(session, inbox, settings, result)
        return result
    finally:
        if own_session:
            await session.aclose()


def main() -> int:
    setup_logging(SETTINGS.log_level, json_format=SETTINGS.log_json)
    warn_on_insecure_settings(SETTINGS)
    try:
        result = asyncio.run(run_quickstart(SETTINGS))
    except UnexpectedFatalError as exc:
        logger.error("Error during quickstart process: %s", exc)
        return 1
    except Exception:
        logger.exception("Error during quickstart process")
        return 1

    logger.info(
        "Quickstart finished boost=%s inbox=%s",
        "ok" if result.boost_error is None else f"failed ({result.boost_error})",
        "ok" if result.inbox_error is None else f"failed ({result.inbox_error})",
    )
    return 0 if result.ok else 1


if __name__ == "__main__":
    sys.exit(main())
