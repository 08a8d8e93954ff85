"""
JWS protected header checks.

A SchnorrES256K detached JWS must carry exactly
``{"alg": "SchnorrES256K", "b64": false, "crit": ["b64"]}``.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any

from schnorr_key.schnorr_es256k import ALGORITHM, b64url_decode, encode_header


class JWSHeaderError(Exception):
    """Raised when a JWS header cannot be trusted."""


class HeaderParseError(JWSHeaderError):
    """Raised when the header segment is not base64url encoded JSON."""


class InvalidHeaderShapeError(JWSHeaderError):
    """Raised when the decoded header is not a JSON object."""


class InvalidHeaderParametersError(JWSHeaderError):
    """Raised when the header claims do not match the signature suite."""


@dataclass(frozen=True)
class JWSHeader:
    """Protected header of an unencoded-payload JWS."""

    alg: str = ALGORITHM
    b64: bool = False
    crit: tuple[str, ...] = field(default=("b64",))

    def to_dict(self) -> dict[str, Any]:
        """Return the header as a JSON-ready dictionary."""
        return {"alg": self.alg, "b64": self.b64, "crit": list(self.crit)}

    def encode(self) -> str:
        """Return the base64url encoded compact JSON header."""
        return encode_header(self.to_dict())


@dataclass
class HeaderCheck:
    """Result of validating a decoded JWS header."""

    valid: bool
    header: JWSHeader | None = None
    error: str | None = None


def decode_header(signature: str) -> Any:
    """Decode the protected header of a detached JWS.

    Args:
        signature: The compact detached JWS ``<header>..<signature>``.

    Returns:
        The decoded JSON value, which may not be an object.

    Raises:
        HeaderParseError: If the header segment is not base64url JSON.
    """
    encoded_header = signature.split("..")[0]
    try:
        return json.loads(b64url_decode(encoded_header).decode("utf-8"))
    except ValueError as e:
        raise HeaderParseError(f"Could not parse JWS header; {e}") from e


def validate_header(header: dict[str, Any], alg: str = ALGORITHM) -> HeaderCheck:
    """Check decoded header claims against the expected algorithm.

    Every claim is checked, and extra members are rejected: the header must
    consist of exactly ``alg``, ``b64`` and ``crit``.

    Args:
        header: The decoded header object.
        alg: The required ``alg`` value.

    Returns:
        HeaderCheck with the typed header when valid.
    """
    if header.get("alg") != alg:
        return HeaderCheck(valid=False, error=f"alg must be {alg!r}, got {header.get('alg')!r}")

    if header.get("b64") is not False:
        return HeaderCheck(valid=False, error="b64 must be false")

    crit = header.get("crit")
    if not (isinstance(crit, list) and crit == ["b64"]):
        return HeaderCheck(valid=False, error='crit must be exactly ["b64"]')

    extra = sorted(set(header) - {"alg", "b64", "crit"})
    if extra:
        return HeaderCheck(valid=False, error=f"unexpected header members: {', '.join(extra)}")

    return HeaderCheck(valid=True, header=JWSHeader(alg=alg, b64=False, crit=("b64",)))
