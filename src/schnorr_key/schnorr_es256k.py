"""
SchnorrES256K detached JWS.

Signs and verifies detached JWS (RFC 7797, "b64": false) with BIP-340
Schnorr signatures over secp256k1.

The JWS signing input is ``base64url(header) + "." + payload``; its
SHA-256 digest is what gets signed. The compact serialization carries an
empty payload segment: ``<header>..<signature>``.
"""

from __future__ import annotations

import base64
import hashlib
import json
import logging
from dataclasses import dataclass
from typing import Any

from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec
from embit import ec as schnorr

LOGGER = logging.getLogger(__name__)

ALGORITHM = "SchnorrES256K"
CURVE = "secp256k1"
SIGNATURE_LENGTH = 64


class InvalidKeyError(ValueError):
    """Raised when JWK key material is unusable."""


class SignatureVerificationError(Exception):
    """Raised when a detached JWS does not verify."""


@dataclass
class Secp256k1JWK:
    """EC secp256k1 key in JWK format."""

    kty: str
    crv: str
    x: str
    y: str
    d: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Secp256k1JWK:
        """Create Secp256k1JWK from a JWK dictionary."""
        return cls(
            kty=data.get("kty", ""),
            crv=data.get("crv", ""),
            x=data.get("x", ""),
            y=data.get("y", ""),
            d=data.get("d"),
        )

    def is_valid_secp256k1(self) -> bool:
        """Check if this is structurally a secp256k1 EC key."""
        return self.kty == "EC" and self.crv == CURVE and bool(self.x) and bool(self.y)

    def public_numbers(self) -> ec.EllipticCurvePublicNumbers:
        """Decode the x and y coordinates."""
        x = int.from_bytes(_coordinate(self.x, "x"), byteorder="big")
        y = int.from_bytes(_coordinate(self.y, "y"), byteorder="big")
        return ec.EllipticCurvePublicNumbers(x, y, ec.SECP256K1())

    def public_point(self) -> bytes:
        """Return the uncompressed SEC1 encoding of the public point.

        Raises:
            InvalidKeyError: If the point is not on secp256k1.
        """
        if not self.is_valid_secp256k1():
            raise InvalidKeyError(
                f"Public key is not a valid secp256k1 EC key: kty={self.kty!r} crv={self.crv!r}"
            )
        public_numbers = self.public_numbers()
        try:
            public_key = public_numbers.public_key()
        except ValueError as e:
            raise InvalidKeyError(f"Public key is not on curve {CURVE}") from e
        return public_key.public_bytes(
            serialization.Encoding.X962,
            serialization.PublicFormat.UncompressedPoint,
        )

    def secret(self) -> bytes:
        """Return the 32-byte private scalar.

        The scalar is checked against the curve order and, when the JWK
        carries coordinates, against its own public point.

        Raises:
            InvalidKeyError: If there is no usable private scalar.
        """
        if not self.d:
            raise InvalidKeyError("JWK has no private key member 'd'")
        secret = _coordinate(self.d, "d")
        try:
            private_key = ec.derive_private_key(
                int.from_bytes(secret, byteorder="big"), ec.SECP256K1()
            )
        except ValueError as e:
            raise InvalidKeyError("Private key is out of range for secp256k1") from e

        if self.x and self.y and private_key.public_key().public_numbers() != self.public_numbers():
            raise InvalidKeyError("Private key does not match the JWK public coordinates")
        return secret


def b64url_encode(data: bytes) -> str:
    """Encode bytes as base64url without padding."""
    return base64.urlsafe_b64encode(data).decode().rstrip("=")


def b64url_decode(data: str) -> bytes:
    """Decode base64url without padding.

    Args:
        data: Base64url encoded string.

    Returns:
        Decoded bytes.
    """
    # Add padding if needed
    padding = 4 - (len(data) % 4)
    if padding != 4:
        data += "=" * padding
    return base64.urlsafe_b64decode(data)


def _coordinate(value: str, name: str) -> bytes:
    """Decode a 32-byte JWK member."""
    try:
        decoded = b64url_decode(value)
    except (TypeError, ValueError) as e:
        raise InvalidKeyError(f"JWK member {name!r} is not valid base64url") from e
    if len(decoded) != 32:
        raise InvalidKeyError(f"JWK member {name!r} must be 32 bytes, got {len(decoded)}")
    return decoded


def encode_header(header: dict[str, Any]) -> str:
    """Serialize a JWS protected header as compact JSON, base64url encoded."""
    return b64url_encode(json.dumps(header, separators=(",", ":")).encode("utf-8"))


def signing_input(encoded_header: str, payload: bytes) -> bytes:
    """Build the unencoded-payload JWS signing input (RFC 7797 section 3)."""
    return encoded_header.encode("ascii") + b"." + bytes(payload)


def sign_detached(payload: bytes, private_key_jwk: dict[str, Any], header: dict[str, Any]) -> str:
    """Create a detached JWS over the payload.

    Args:
        payload: The bytes to sign, sent out of band.
        private_key_jwk: secp256k1 private key JWK.
        header: The protected header.

    Returns:
        The compact detached JWS ``<header>..<signature>``.

    Raises:
        InvalidKeyError: If the private key is unusable.
    """
    secret = Secp256k1JWK.from_dict(private_key_jwk).secret()
    encoded_header = encode_header(header)
    digest = hashlib.sha256(signing_input(encoded_header, payload)).digest()

    signature = schnorr.PrivateKey(secret).schnorr_sign(digest)
    return encoded_header + ".." + b64url_encode(signature.serialize())


def verify_detached(signature: str, payload: bytes, public_key_jwk: dict[str, Any]) -> None:
    """Verify a detached JWS against the payload.

    The transmitted header segment is used verbatim to rebuild the signing
    input, so header checks belong to the caller.

    Args:
        signature: The compact detached JWS.
        payload: The detached payload bytes.
        public_key_jwk: secp256k1 public key JWK.

    Raises:
        InvalidKeyError: If the public key is unusable.
        SignatureVerificationError: If the signature is malformed or invalid.
    """
    point = Secp256k1JWK.from_dict(public_key_jwk).public_point()

    encoded_header, separator, encoded_signature = signature.partition("..")
    if not separator or not encoded_header or not encoded_signature:
        raise SignatureVerificationError("Not a detached JWS")

    try:
        signature_bytes = base64.b64decode(
            encoded_signature + "=" * (-len(encoded_signature) % 4), altchars=b"-_", validate=True
        )
    except ValueError as e:
        raise SignatureVerificationError("Signature is not valid base64url") from e
    # Only the canonical encoding is accepted; unused trailing bits must be zero.
    if b64url_encode(signature_bytes) != encoded_signature:
        raise SignatureVerificationError("Signature is not canonical base64url")
    if len(signature_bytes) != SIGNATURE_LENGTH:
        raise SignatureVerificationError(
            f"Signature must be {SIGNATURE_LENGTH} bytes, got {len(signature_bytes)}"
        )

    digest = hashlib.sha256(signing_input(encoded_header, payload)).digest()
    public_key = schnorr.PublicKey.parse(point)
    try:
        verified = public_key.schnorr_verify(schnorr.SchnorrSig(signature_bytes), digest)
    except ValueError as e:
        raise SignatureVerificationError(f"Signature is malformed: {e}") from e
    if not verified:
        raise SignatureVerificationError("Signature does not match payload")
    LOGGER.debug("Verified %s signature for key %s", ALGORITHM, public_key_jwk.get("kid", ""))
