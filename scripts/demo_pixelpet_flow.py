"""Demo: walk the Pixel Pet consent -> badge flow against a running service.

Start the service first:
    uvicorn badgeflow.main:app --port 3000

Then run:
    python scripts/demo_pixelpet_flow.py [base_url] [player_did]

The callback step is simulated: in a browser the network redirects the
player back with their DID after they approve the consent contract.
"""

from __future__ import annotations

import sys
from urllib.parse import parse_qs, urlparse

import httpx

BASE_URL = "http://localhost:3000"
PLAYER_DID = "did:key:z6MkhaXgBZDvotDkL5257faiztiGiC2QtKLGpbnnEGta2doK"


def main() -> int:
    base_url = sys.argv[1] if len(sys.argv) > 1 else BASE_URL
    player_did = sys.argv[2] if len(sys.argv) > 2 else PLAYER_DID
    client = httpx.Client(base_url=base_url, follow_redirects=False, timeout=30.0)

    # ── Step 1: readiness ───────────────────────────────────────────
    r = client.get("/ready")
    print(f"1. GET  /ready                  → {r.status_code}  {r.json()}")

    # ── Step 2: consent URL ─────────────────────────────────────────
    r = client.get("/api/get-consent-url")
    if r.status_code != 200:
        print(f"2. GET  /api/get-consent-url    → {r.status_code}  {r.json()}")
        return 1
    consent_url = r.json()["consentUrl"]
    print(f"2. GET  /api/get-consent-url    → {r.status_code}  {consent_url[:60]}...")

    # ── Step 3: callback (what the network redirect would hit) ──────
    r = client.get("/learncard-callback", params={"did": player_did})
    location = r.headers.get("location", "")
    did = parse_qs(urlparse(location).query).get("learncard_did", [""])[0]
    print(f"3. GET  /learncard-callback     → {r.status_code}  did={did[:24]}...")

    # ── Step 4: issue a pet badge ───────────────────────────────────
    r = client.post(
        "/api/issue-pet-badge",
        json={
            "playerName": "Sparky",
            "petDesign": ["#000000", "#ffcc00", "#ffcc00", "#000000"],
            "playerLearnCardDid": did,
        },
    )
    body = r.json()
    if r.status_code != 200:
        print(f"4. POST /api/issue-pet-badge    → {r.status_code}  {body.get('error')}")
        return 1
    credential = body["credential"]
    issuer = credential.get("issuer", "") if isinstance(credential, dict) else "(jwt)"
    print(
        f"4. POST /api/issue-pet-badge    → {r.status_code}  "
        f"pet={body['issuedPetName']}  issuer={str(issuer)[:24]}..."
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
