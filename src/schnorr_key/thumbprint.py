"""
JWK thumbprints.

Computes RFC 7638 thumbprints used as content-derived key identifiers.
https://www.rfc-editor.org/rfc/rfc7638
"""

from __future__ import annotations

import base64
import hashlib
import json
from typing import Any

from schnorr_key.schnorr_es256k import InvalidKeyError


# Members that take part in the thumbprint, per key type (RFC 7638 section 3.2).
REQUIRED_MEMBERS: dict[str, tuple[str, ...]] = {
    "EC": ("crv", "kty", "x", "y"),
    "OKP": ("crv", "kty", "x"),
    "RSA": ("e", "kty", "n"),
    "oct": ("k", "kty"),
}


def canonical_jwk(jwk: dict[str, Any]) -> str:
    """Return the RFC 7638 canonical JSON form of a JWK.

    Only the required members for the key type are kept, serialized with
    sorted keys and no whitespace.

    Args:
        jwk: The JWK to canonicalize.

    Returns:
        Canonical JSON string.

    Raises:
        InvalidKeyError: If the key type is unknown or a member is missing.
    """
    kty = jwk.get("kty")
    if kty not in REQUIRED_MEMBERS:
        raise InvalidKeyError(f"Unsupported kty for thumbprint: {kty!r}")

    members: dict[str, Any] = {}
    for name in REQUIRED_MEMBERS[kty]:
        if not jwk.get(name):
            raise InvalidKeyError(f"JWK is missing required member {name!r}")
        members[name] = jwk[name]

    return json.dumps(members, sort_keys=True, separators=(",", ":"), ensure_ascii=False)


def compute_thumbprint(jwk: dict[str, Any]) -> str:
    """Compute the SHA-256 JWK thumbprint, base64url encoded without padding."""
    digest = hashlib.sha256(canonical_jwk(jwk).encode("utf-8")).digest()
    return base64.urlsafe_b64encode(digest).decode().rstrip("=")
