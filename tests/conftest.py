"""Shared fixtures for schnorr-key tests."""

import base64

import pytest
from cryptography.hazmat.primitives.asymmetric import ec

# secp256k1 generator point, i.e. the public key for private scalar 1.
GENERATOR_JWK = {
    "kty": "EC",
    "crv": "secp256k1",
    "x": "eb5mfvncu6xVoGKVzocLBwKb_NstzijZWfKBWxb4F5g",
    "y": "SDradyajxGVdpPv8DhEIqP0XtEimhVQZnEfQj_sQ1Lg",
}
SCALAR_ONE = "AAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAE"
GENERATOR_THUMBPRINT = "2JF8vg9etJzjFwZwmkvhBLLZ0bfMVVOPivYR5lFtcec"


def b64url(value: int) -> str:
    return base64.urlsafe_b64encode(value.to_bytes(32, byteorder="big")).decode().rstrip("=")


@pytest.fixture
def secp256k1_key():
    """Generate a test secp256k1 private key."""
    return ec.generate_private_key(ec.SECP256K1())


@pytest.fixture
def private_key_jwk(secp256k1_key):
    """Get the private key as JWK."""
    private_numbers = secp256k1_key.private_numbers()
    public_numbers = private_numbers.public_numbers
    return {
        "kty": "EC",
        "crv": "secp256k1",
        "x": b64url(public_numbers.x),
        "y": b64url(public_numbers.y),
        "d": b64url(private_numbers.private_value),
    }


@pytest.fixture
def public_key_jwk(private_key_jwk):
    """Get the public key as JWK."""
    return {k: v for k, v in private_key_jwk.items() if k != "d"}


@pytest.fixture
def generator_private_jwk():
    """Private JWK for scalar 1, matching the example DID document."""
    return {**GENERATOR_JWK, "d": SCALAR_ONE}
