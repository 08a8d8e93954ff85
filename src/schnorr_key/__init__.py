"""
schnorr-key - Schnorr secp256k1 verification keys for linked data proofs.

Supports:
- SchnorrSecp256k1VerificationKey2019 keys in JWK form
- Detached JWS signing and verification (SchnorrES256K, "b64": false)
- RFC 7638 key fingerprints
- Static JSON-LD document loading for DID and security contexts
"""

__version__ = "0.1.0"

from schnorr_key.document_loader import (
    ContextResolver,
    UnsupportedContextUrlError,
    default_resolver,
)
from schnorr_key.header import (
    HeaderParseError,
    InvalidHeaderParametersError,
    InvalidHeaderShapeError,
    JWSHeader,
)
from schnorr_key.schnorr_es256k import InvalidKeyError, SignatureVerificationError
from schnorr_key.thumbprint import compute_thumbprint
from schnorr_key.verification_key import (
    NoPrivateKeyError,
    NoPublicKeyError,
    SchnorrSecp256k1VerificationKey2019,
)

__all__ = [
    "SchnorrSecp256k1VerificationKey2019",
    "NoPrivateKeyError",
    "NoPublicKeyError",
    "HeaderParseError",
    "InvalidHeaderShapeError",
    "InvalidHeaderParametersError",
    "JWSHeader",
    "InvalidKeyError",
    "SignatureVerificationError",
    "compute_thumbprint",
    "ContextResolver",
    "UnsupportedContextUrlError",
    "default_resolver",
]
