"""CSRF ``state`` tokens round-tripped through the authorization redirect."""

from __future__ import annotations

import secrets

from pydantic import SecretStr


class CsrfToken(SecretStr):
    """Opaque, unpredictable ``state`` value tied to one authorization attempt."""

    @classmethod
    def new_random(cls) -> CsrfToken:
        return cls(secrets.token_urlsafe(16))

    def matches(self, candidate: str) -> bool:
        """Exact, constant-time comparison against the callback ``state``."""
        return secrets.compare_digest(
            self.get_secret_value().encode("utf-8"), candidate.encode("utf-8")
        )
