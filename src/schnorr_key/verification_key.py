"""
SchnorrSecp256k1VerificationKey2019.

A secp256k1 key pair in JWK form for linked data proofs. Keys hand out
signer and verifier objects for use with a linked data signature engine,
and are identified by their RFC 7638 thumbprint.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Union

from schnorr_key import schnorr_es256k
from schnorr_key.header import (
    InvalidHeaderParametersError,
    InvalidHeaderShapeError,
    JWSHeader,
    decode_header,
    validate_header,
)
from schnorr_key.schnorr_es256k import InvalidKeyError
from schnorr_key.thumbprint import compute_thumbprint

LOGGER = logging.getLogger(__name__)

KEY_TYPE = "SchnorrSecp256k1VerificationKey2019"


class VerificationKeyError(Exception):
    """Raised when a key cannot perform the requested operation."""


class NoPrivateKeyError(VerificationKeyError):
    """Raised when signing with a key that has no private key."""


class NoPublicKeyError(VerificationKeyError):
    """Raised when verifying with a key that has no public key."""


@dataclass
class FingerprintVerification:
    """Result of checking a fingerprint against a key."""

    valid: bool
    error: str | None = None


def _payload(data: Any) -> bytes:
    # A memoryview slice carries its own offset and length.
    return bytes(memoryview(data))


class ReadySigner:
    """Signer bound to a private key."""

    def __init__(self, private_key_jwk: dict[str, Any]) -> None:
        self.private_key_jwk = private_key_jwk

    async def sign(self, *, data: Any) -> str:
        """Sign data, returning a detached JWS.

        Args:
            data: Bytes-like payload to sign.

        Returns:
            The detached JWS ``<header>..<signature>``.
        """
        header = JWSHeader().to_dict()
        return schnorr_es256k.sign_detached(_payload(data), self.private_key_jwk, header)


class UnavailableSigner:
    """Signer for a key without a private key; always fails."""

    async def sign(self, *, data: Any = None) -> str:
        """Raise NoPrivateKeyError; nothing is signed."""
        raise NoPrivateKeyError("No private key to sign with.")


class ReadyVerifier:
    """Verifier bound to a public key."""

    def __init__(self, public_key_jwk: dict[str, Any], key_type: str = KEY_TYPE) -> None:
        self.public_key_jwk = public_key_jwk
        self.key_type = key_type

    async def verify(self, *, data: Any, signature: str) -> bool:
        """Verify a detached JWS over data.

        Malformed headers raise; a signature that does not verify returns
        False.

        Args:
            data: Bytes-like payload that was signed.
            signature: The detached JWS.

        Returns:
            True if the signature is valid for data and this key.

        Raises:
            HeaderParseError: If the header segment cannot be decoded.
            InvalidHeaderShapeError: If the header is not an object.
            InvalidHeaderParametersError: If the header claims are wrong.
        """
        header = decode_header(signature)
        if not isinstance(header, dict):
            raise InvalidHeaderShapeError("Invalid JWS header.")

        check = validate_header(header)
        if not check.valid:
            LOGGER.warning("Rejected JWS header %s: %s", header, check.error)
            raise InvalidHeaderParametersError(
                f"Invalid JWS header parameters for {self.key_type}: {check.error}"
            )

        try:
            schnorr_es256k.verify_detached(signature, _payload(data), self.public_key_jwk)
        except Exception as e:
            LOGGER.debug("Signature verification failed: %s", e)
            return False
        return True


class UnavailableVerifier:
    """Verifier for a key without a public key; always fails."""

    async def verify(self, *, data: Any = None, signature: str | None = None) -> bool:
        """Raise NoPublicKeyError; nothing is verified."""
        raise NoPublicKeyError("No public key to verify with.")


Signer = Union[ReadySigner, UnavailableSigner]
Verifier = Union[ReadyVerifier, UnavailableVerifier]


class SchnorrSecp256k1VerificationKey2019:
    """A secp256k1 linked data key.

    Either JWK may be omitted, but not both. Without ``public_key_jwk`` the
    public key is the private JWK minus ``d``.
    """

    def __init__(
        self,
        controller: str,
        *,
        id: str | None = None,
        type: str | None = None,
        private_key_jwk: dict[str, Any] | None = None,
        public_key_jwk: dict[str, Any] | None = None,
    ) -> None:
        """Initialize the key.

        Args:
            controller: DID of the entity controlling this key.
            id: Key id. Defaults to ``controller#fingerprint``.
            type: Linked data key type.
            private_key_jwk: JWK private key.
            public_key_jwk: JWK public key.

        Raises:
            InvalidKeyError: If neither JWK is given.
        """
        if private_key_jwk is None and public_key_jwk is None:
            raise InvalidKeyError("A private or public JWK is required")

        self.controller = controller
        self.type = type or KEY_TYPE
        self.private_key_jwk = private_key_jwk

        source = public_key_jwk if public_key_jwk is not None else private_key_jwk
        self.public_key_jwk = {k: v for k, v in source.items() if k != "d"}

        self.id = id or f"{self.controller}#{self.fingerprint()}"

    @classmethod
    async def from_options(cls, options: dict[str, Any]) -> SchnorrSecp256k1VerificationKey2019:
        """Create a key from a verification method record.

        Used to import public keys from resolvers.

        Args:
            options: Record with ``controller`` and ``publicKeyJwk`` and/or
                ``privateKeyJwk``, optionally ``id`` and ``type``.
        """
        return cls(
            options.get("controller"),
            id=options.get("id"),
            type=options.get("type"),
            private_key_jwk=options.get("privateKeyJwk"),
            public_key_jwk=options.get("publicKeyJwk"),
        )

    @staticmethod
    def fingerprint_from_public_key(public_key_jwk: dict[str, Any]) -> str:
        """Generate a public key fingerprint (RFC 7638), ignoring any ``kid``."""
        unlabeled = {k: v for k, v in public_key_jwk.items() if k != "kid"}
        return compute_thumbprint(unlabeled)

    @property
    def public_key(self) -> dict[str, Any] | None:
        """The public JWK, or None when it has been cleared."""
        return self.public_key_jwk

    @property
    def private_key(self) -> dict[str, Any] | None:
        """The private JWK, or None for a public-only key."""
        return self.private_key_jwk

    def fingerprint(self) -> str:
        """Generate this key's fingerprint."""
        return self.fingerprint_from_public_key(self.public_key_jwk)

    def verify_fingerprint(self, fingerprint: Any) -> FingerprintVerification:
        """Test whether a fingerprint was generated from this key.

        Args:
            fingerprint: The fingerprint to check.

        Returns:
            FingerprintVerification; never raises for bad input.
        """
        if not isinstance(fingerprint, str) or not fingerprint:
            return FingerprintVerification(valid=False, error="Fingerprint must be a non-empty string")

        try:
            expected = self.fingerprint()
        except InvalidKeyError as e:
            return FingerprintVerification(valid=False, error=str(e))

        if fingerprint != expected:
            return FingerprintVerification(
                valid=False, error="The fingerprint does not match the public key"
            )
        return FingerprintVerification(valid=True)

    def signer(self) -> Signer:
        """Return a signer for use with linked data signatures."""
        if not self.private_key_jwk:
            return UnavailableSigner()
        return ReadySigner(self.private_key_jwk)

    def verifier(self) -> Verifier:
        """Return a verifier for use with linked data signatures."""
        if not self.public_key_jwk:
            return UnavailableVerifier()
        return ReadyVerifier(self.public_key_jwk, key_type=self.type)

    def add_encoded_public_key(self, public_key_node: dict[str, Any]) -> dict[str, Any]:
        """Add the public JWK to a public key node and return the node."""
        public_key_node["publicKeyJwk"] = self.public_key_jwk
        return public_key_node

    def public_node(self) -> dict[str, Any]:
        """Build the public key node used in verification methods.

        ``controller`` is only included when set.
        """
        public_node: dict[str, Any] = {
            "id": self.id,
            "type": self.type,
        }
        if self.controller:
            public_node["controller"] = self.controller
        return self.add_encoded_public_key(public_node)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(id={self.id!r}, controller={self.controller!r})"
