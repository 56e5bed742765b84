"""Canonical Pydantic models shared across all twcred modules.

This is the single source of truth for data shapes in the project. The
models fall into three groups:

**Secret value types** -- distinct :class:`~pydantic.SecretStr` subclasses
for every secret that flows through the OAuth2 exchange:
    :class:`AccessToken`, :class:`RefreshToken`, :class:`AuthorizationCode`.
    (:class:`~twcred.oauth.pkce.PkceCodeVerifier` and
    :class:`~twcred.oauth.csrf.CsrfToken` live beside their generators.)
    ``str()`` and ``repr()`` of these are masked, so they can be passed to
    log and error helpers without leaking; the raw value is only reachable
    through ``get_secret_value()``.

**Provider models** -- :class:`ClientCredentials` and :class:`TokenResponse`.

**Configuration models** -- :class:`ToolConfig`, serialised as
``config.json`` in the user's config directory.

The persisted :class:`~twcred.credentials.Credentials` record lives in
:mod:`twcred.credentials` together with its file handling.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, SecretStr


DEFAULT_SCOPES: tuple[str, ...] = (
    "tweet.read",
    "tweet.write",
    "users.read",
    "follows.read",
    "follows.write",
    "like.read",
    "like.write",
    "list.read",
    "offline.access",
)
"""Scopes requested when none are configured.

``offline.access`` is what makes the provider issue a refresh token.
"""


# --- Secret value types ---


class AccessToken(SecretStr):
    """Bearer token used to call the API."""


class RefreshToken(SecretStr):
    """Long-lived token exchanged for a new :class:`AccessToken`."""


class AuthorizationCode(SecretStr):
    """Single-use code returned on the authorization redirect."""


# --- Provider models ---


class ClientCredentials(BaseModel):
    """OAuth2 client identity registered with the provider.

    Supplied at process start and never persisted.

    Example::

        ClientCredentials(client_id="abc", client_secret="s3cr3t")
    """

    model_config = ConfigDict(frozen=True)

    client_id: str = Field(min_length=1, description="OAuth2 client id")
    client_secret: SecretStr = Field(description="OAuth2 client secret")


class TokenResponse(BaseModel):
    """Successful body of the provider's token endpoint.

    Only ``access_token`` is required. ``refresh_token`` is present when the
    provider issues or rotates one; callers must not treat its absence as a
    revocation.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    access_token: AccessToken
    refresh_token: Optional[RefreshToken] = None
    token_type: str = "bearer"
    expires_in: Optional[int] = None
    scope: Optional[str] = None

    @property
    def scopes(self) -> list[str]:
        """Granted scopes, split from the space-delimited ``scope`` field."""
        return self.scope.split() if self.scope else []


# --- Configuration ---


class ToolConfig(BaseModel):
    """Defaults read from ``config.json`` in the config directory.

    Every field can be overridden by an environment variable or a CLI
    option; see :func:`twcred.config.resolve_settings`.
    """

    model_config = ConfigDict(extra="ignore")

    redirect_url: Optional[str] = Field(
        default=None,
        description="Callback URL registered for the client (init only)",
    )
    scopes: list[str] = Field(
        default_factory=lambda: list(DEFAULT_SCOPES),
        description="Scopes to request during authorization",
    )
    timeout: float = Field(
        default=30.0,
        gt=0,
        description="Timeout in seconds for token endpoint requests",
    )
