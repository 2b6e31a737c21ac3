"""Issuer DID derivation.

The issuer's identity is a ``did:key`` for the Ed25519 key whose 32-byte
private seed is ``SECURE_SEED``.  The DID is just the public key with a
multicodec prefix, base58btc multibase-encoded:

    did:key:z6Mk...   =  "did:key:" + multibase(base58btc, 0xed01 || pubkey)

The private key never leaves this function; signing is done elsewhere.
"""

from __future__ import annotations

import multibase
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PrivateKey

# multicodec varint for ed25519-pub
_ED25519_PUB_PREFIX = b"\xed\x01"


def did_key_from_seed(seed_hex: str) -> str:
    seed = bytes.fromhex(seed_hex)
    if len(seed) != 32:
        raise ValueError("seed must be 32 bytes (64 hex chars)")

    public_key = Ed25519PrivateKey.from_private_bytes(seed).public_key()
    raw = public_key.public_bytes(
        encoding=serialization.Encoding.Raw,
        format=serialization.PublicFormat.Raw,
    )
    encoded = multibase.encode("base58btc", _ED25519_PUB_PREFIX + raw)
    return f"did:key:{encoded.decode('ascii')}"
