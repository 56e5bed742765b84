"""PKCE code verifier / challenge generation (:rfc:`7636`, S256 only)."""

from __future__ import annotations

import base64
import hashlib
import secrets
from dataclasses import dataclass

from pydantic import SecretStr

PKCE_METHOD = "S256"


class PkceCodeVerifier(SecretStr):
    """The PKCE secret. Sent only to the token endpoint, never in the authorize URL."""


def generate_pkce_pair() -> tuple[str, str]:
    """Generate a PKCE code_verifier and code_challenge (S256).

    Returns:
        A tuple of ``(code_verifier, code_challenge)``.
    """
    # RFC 7636: 43-128 characters from unreserved character set
    code_verifier = secrets.token_urlsafe(64)[:128]
    return code_verifier, compute_challenge(code_verifier)


def compute_challenge(code_verifier: str) -> str:
    """Return the unpadded base64url SHA-256 digest of *code_verifier*."""
    digest = hashlib.sha256(code_verifier.encode("ascii")).digest()
    return base64.urlsafe_b64encode(digest).rstrip(b"=").decode("ascii")


@dataclass(frozen=True)
class PkceChallenge:
    """A challenge sent with the authorize request and its matching verifier."""

    challenge: str
    verifier: PkceCodeVerifier
    method: str = PKCE_METHOD

    @classmethod
    def new_random_sha256(cls) -> PkceChallenge:
        code_verifier, code_challenge = generate_pkce_pair()
        return cls(challenge=code_challenge, verifier=PkceCodeVerifier(code_verifier))
