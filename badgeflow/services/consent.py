"""Pixel Pet consent-flow contract and consent URL.

Before the game may write badges into a player's wallet, the player (or
a guardian) approves a consent CONTRACT hosted by the network.  The game
sends the player to the network's consent page with the contract URI;
after approval the network redirects back to ``GAMEFLOW_REDIRECT_URL``
with the player's DID in the query string.
"""

from __future__ import annotations

from urllib.parse import urlencode

CONTRACT_NAME = "Pixel Pet Designer - Badge Connection"


def build_gameflow_contract(redirect_url: str) -> dict:
    return {
        "name": CONTRACT_NAME,
        "subtitle": "Connect to save your pixel pet designs as verifiable badges!",
        "description": (
            "Allows Pixel Pet Designer to issue you a unique badge for each pet "
            "you create. Guardian consent is required for younger designers."
        ),
        "needsGuardianConsent": True,
        "redirectUrl": redirect_url,
        "reasonForAccessing": (
            "Pixel Pet Designer needs permission to issue you a digital badge for "
            "your created pet. This badge will include your pet's name and its design."
        ),
        "contract": {
            "read": {},
            "write": {
                "credentials": {"categories": {"Achievement": {"required": True}}}
            },
        },
    }


def build_consent_url(consent_base: str, contract_uri: str, return_to: str) -> str:
    return f"{consent_base}?{urlencode({'uri': contract_uri, 'returnTo': return_to})}"
