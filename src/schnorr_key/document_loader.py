"""
Static JSON-LD document loader.

Resolves a closed set of JSON-LD contexts and DID documents from files
shipped with the package. Anything else is rejected; there is no network
fallback.
"""

from __future__ import annotations

import copy
import json
import logging
from importlib import resources
from types import MappingProxyType
from typing import Any, Mapping

LOGGER = logging.getLogger(__name__)

DID_V1_CONTEXT_URL = "https://www.w3.org/ns/did/v1"
DID_V0_11_CONTEXT_URL = "https://w3id.org/did/v1"
SECURITY_CONTEXT_V1_URL = "https://w3id.org/security/v1"
SECURITY_CONTEXT_V2_URL = "https://w3id.org/security/v2"
SCHNORR_CONTEXT_V1_URL = (
    "https://identity.foundation/SchnorrSecp256k1Signature2019/contexts/schnorr-v1.json"
)
EXAMPLE_DID = "did:example:123"

CONTEXT_FILE_MAPPING = {
    DID_V1_CONTEXT_URL: "did-v1.json",
    DID_V0_11_CONTEXT_URL: "did-v0.11.json",
    SECURITY_CONTEXT_V1_URL: "security-v1.json",
    SECURITY_CONTEXT_V2_URL: "security-v2.json",
    SCHNORR_CONTEXT_V1_URL: "schnorr-v1.json",
}

DID_FILE_MAPPING = {
    EXAMPLE_DID: "did-example-123.json",
}


class UnsupportedContextUrlError(LookupError):
    """Raised when a URL is not in the resolver's tables."""


def _load_json_file(filename: str, resource_path: str = __package__) -> Any:
    """Load a JSON document shipped with the package."""
    path = resources.files(resource_path) / "contexts" / filename
    return json.loads(path.read_text(encoding="utf-8"))


class ContextResolver:
    """Closed-world resolver for JSON-LD contexts and DID documents.

    Context URLs must match exactly. DID URLs match on the part before any
    ``#`` fragment. Tables are read-only once the resolver is built.
    """

    def __init__(
        self,
        contexts: Mapping[str, Any],
        dids: Mapping[str, Any] | None = None,
    ) -> None:
        """Initialize the resolver.

        Args:
            contexts: Context URL to parsed document.
            dids: DID (without fragment) to parsed DID document.
        """
        self.contexts = MappingProxyType(dict(contexts))
        self.dids = MappingProxyType(dict(dids or {}))

    @classmethod
    def from_package(cls) -> ContextResolver:
        """Build the resolver from the contexts shipped with the package."""
        return cls(
            contexts={url: _load_json_file(name) for url, name in CONTEXT_FILE_MAPPING.items()},
            dids={did: _load_json_file(name) for did, name in DID_FILE_MAPPING.items()},
        )

    def resolve(self, url: str) -> dict[str, Any]:
        """Resolve a URL to a remote document record.

        Args:
            url: Context URL or DID URL.

        Returns:
            ``{"contextUrl": None, "document": ..., "documentUrl": url}``

        Raises:
            UnsupportedContextUrlError: If the URL is unknown.
        """
        document = self.contexts.get(url)
        if document is None:
            document = self.dids.get(url.split("#")[0])

        if document is None:
            raise UnsupportedContextUrlError(f"No custom context support for {url}")

        LOGGER.debug("Resolved %s from static table", url)
        return {
            # Only set for contexts received via a Link header.
            "contextUrl": None,
            "document": copy.deepcopy(document),
            "documentUrl": url,
        }

    def __call__(self, url: str, options: dict | None = None) -> dict[str, Any]:
        """Document loader entry point, ``loader(url, options)``."""
        return self.resolve(url)

    def __contains__(self, url: str) -> bool:
        return url in self.contexts or url.split("#")[0] in self.dids


default_resolver = ContextResolver.from_package()
