"""Twitter (X) OAuth2 client: authorization code exchange and token refresh.

:class:`TwitterOAuth2Client` binds a :class:`~twcred.models.ClientCredentials`
to a :class:`~twcred.oauth.transport.TokenTransport` and implements the two
token endpoint grants:

* ``authorization_code`` with the PKCE verifier (:meth:`exchange_code`,
  driven end-to-end by :meth:`complete_authorization`).
* ``refresh_token`` (:meth:`refresh_token`).

The client is confidential, so it authenticates with HTTP Basic
(``client_id:client_secret``) on every token request. Neither grant is
retried: an authorization code is single-use, and a failed refresh is left
for the operator to act on.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Sequence
from typing import Any, Optional

from pydantic import ValidationError

from twcred.exceptions import InvalidUsageError, TokenExchangeError
from twcred.models import (
    AuthorizationCode,
    ClientCredentials,
    RefreshToken,
    TokenResponse,
)
from twcred.oauth.authorize import (
    AuthorizationAttempt,
    build_authorization,
    require_absolute_url,
    validate_callback,
)
from twcred.oauth.endpoints import TWITTER_AUTHORIZE_URL, TWITTER_TOKEN_URL
from twcred.oauth.pkce import PkceCodeVerifier
from twcred.oauth.transport import TokenTransport, TransportResponse

logger = logging.getLogger(__name__)


class TwitterOAuth2Client:
    """OAuth2 client for the Twitter API v2 endpoints.

    Args:
        credentials: Client id and secret.
        transport: HTTP capability used for token requests.
        redirect_url: Callback URL; required for :meth:`authorizer` and the
            code exchange, unused by :meth:`refresh_token`.
        authorize_url: Authorize endpoint override.
        token_url: Token endpoint override.

    Raises:
        InvalidUrlError: If *redirect_url* is given but has no scheme.
    """

    def __init__(
        self,
        credentials: ClientCredentials,
        transport: TokenTransport,
        redirect_url: Optional[str] = None,
        authorize_url: str = TWITTER_AUTHORIZE_URL,
        token_url: str = TWITTER_TOKEN_URL,
    ) -> None:
        self._credentials = credentials
        self._transport = transport
        self._redirect_url = (
            require_absolute_url(redirect_url) if redirect_url is not None else None
        )
        self._authorize_url = authorize_url
        self._token_url = token_url

    @classmethod
    def with_callback_url(
        cls,
        credentials: ClientCredentials,
        transport: TokenTransport,
        callback_url: str,
    ) -> TwitterOAuth2Client:
        """Create a client bound to *callback_url*, ready for authorization."""
        return cls(credentials, transport, redirect_url=callback_url)

    @property
    def client_id(self) -> str:
        return self._credentials.client_id

    @property
    def redirect_url(self) -> Optional[str]:
        return self._redirect_url

    # ------------------------------------------------------------------ #
    # Authorization code grant
    # ------------------------------------------------------------------ #

    def authorizer(self, scopes: Sequence[str]) -> AuthorizationAttempt:
        """Start an authorization attempt requesting *scopes*.

        Raises:
            InvalidUsageError: If the client has no callback URL bound.
        """
        if self._redirect_url is None:
            raise _unbound_callback_error()
        return build_authorization(
            self._credentials,
            self._redirect_url,
            scopes,
            authorize_endpoint=self._authorize_url,
        )

    def complete_authorization(
        self, attempt: AuthorizationAttempt, redirect_url: str
    ) -> TokenResponse:
        """Consume *attempt*, validate the pasted redirect, and exchange the code.

        The attempt is consumed before anything else, so it cannot be used
        again whether validation or the exchange succeeds or fails.

        Raises:
            AttemptConsumedError: If *attempt* was already used.
            InvalidUrlError: If *redirect_url* has no scheme.
            MissingParameterError: If ``code`` or ``state`` is absent.
            CsrfMismatchError: If ``state`` does not match.
            TokenExchangeError: If the provider rejects the exchange.
            NetworkError: On transport failure.
        """
        csrf_state, pkce_verifier = attempt.consume()
        code = validate_callback(csrf_state, redirect_url)
        return self.exchange_code(code, pkce_verifier, attempt.redirect_url)

    def exchange_code(
        self,
        code: AuthorizationCode,
        pkce_verifier: PkceCodeVerifier,
        redirect_url: Optional[str] = None,
    ) -> TokenResponse:
        """Exchange an authorization code and PKCE verifier for tokens.

        Args:
            code: The code extracted from the callback.
            pkce_verifier: Verifier from the same attempt.
            redirect_url: Callback URL used in the authorize request;
                defaults to the one the client is bound to.

        Raises:
            TokenExchangeError: On a non-2xx or unparseable response.
            NetworkError: On transport failure.
        """
        redirect_url = redirect_url or self._redirect_url
        if redirect_url is None:
            raise _unbound_callback_error()

        data = {
            "grant_type": "authorization_code",
            "code": code.get_secret_value(),
            "redirect_uri": redirect_url,
            "code_verifier": pkce_verifier.get_secret_value(),
            "client_id": self._credentials.client_id,
        }
        response = self._post(data)
        return _parse_token_response(response, grant="authorization_code")

    # ------------------------------------------------------------------ #
    # Refresh grant
    # ------------------------------------------------------------------ #

    def refresh_token(self, refresh_token: RefreshToken) -> TokenResponse:
        """Exchange *refresh_token* for a new access token.

        The returned :class:`TokenResponse` carries a ``refresh_token`` only
        if the provider rotated it.

        Raises:
            TokenExchangeError: On a non-2xx or unparseable response.
            NetworkError: On transport failure.
        """
        data = {
            "grant_type": "refresh_token",
            "refresh_token": refresh_token.get_secret_value(),
            "client_id": self._credentials.client_id,
        }
        response = self._post(data)
        return _parse_token_response(response, grant="refresh_token")

    def _post(self, data: dict[str, str]) -> TransportResponse:
        basic_auth = (
            self._credentials.client_id,
            self._credentials.client_secret.get_secret_value(),
        )
        return self._transport.post_form(self._token_url, data, basic_auth=basic_auth)


def _unbound_callback_error() -> InvalidUsageError:
    return InvalidUsageError(
        "A callback URL is required for the authorization code grant"
    )


def _parse_token_response(response: TransportResponse, grant: str) -> TokenResponse:
    """Turn a raw token endpoint response into a :class:`TokenResponse`.

    Raises:
        TokenExchangeError: With the provider's raw body on a non-2xx
            status, or a description of what could not be parsed.
    """
    if not response.is_success:
        raise TokenExchangeError(
            response.text.strip(), status_code=response.status_code, grant=grant
        )

    try:
        body: Any = json.loads(response.text)
    except json.JSONDecodeError as exc:
        raise TokenExchangeError(
            f"response body is not JSON ({exc.msg})",
            status_code=response.status_code,
            grant=grant,
        ) from exc

    if not isinstance(body, dict):
        raise TokenExchangeError(
            "response body is not a JSON object",
            status_code=response.status_code,
            grant=grant,
        )

    try:
        token = TokenResponse.model_validate(body)
    except ValidationError as exc:
        fields = ", ".join(
            ".".join(str(part) for part in err["loc"]) for err in exc.errors()
        )
        raise TokenExchangeError(
            f"unexpected token response shape (invalid: {fields})",
            status_code=response.status_code,
            grant=grant,
        ) from exc

    logger.debug(
        "Token response: token_type=%s expires_in=%s refresh_token=%s",
        token.token_type,
        token.expires_in,
        "present" if token.refresh_token is not None else "absent",
    )
    return token
