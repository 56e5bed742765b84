"""OAuth2 Authorization Code + PKCE protocol core for the Twitter API v2.

Leaf to root:

- :mod:`~twcred.oauth.pkce` -- PKCE verifier / challenge pairs.
- :mod:`~twcred.oauth.csrf` -- CSRF ``state`` tokens.
- :mod:`~twcred.oauth.authorize` -- authorize URL construction and redirect
  callback validation around a single-use :class:`AuthorizationAttempt`.
- :mod:`~twcred.oauth.transport` -- the narrow HTTP capability the token
  endpoint calls need.
- :mod:`~twcred.oauth.client` -- :class:`TwitterOAuth2Client`, code
  exchange and token refresh.

Typical usage::

    from twcred.oauth import HttpxTransport, TwitterOAuth2Client

    with HttpxTransport() as transport:
        client = TwitterOAuth2Client.with_callback_url(creds, transport, callback)
        attempt = client.authorizer(scopes)
        print(attempt.authorize_url)
        token = client.complete_authorization(attempt, input())
"""

from twcred.oauth.authorize import (
    AttemptState,
    AuthorizationAttempt,
    build_authorization,
    validate_callback,
)
from twcred.oauth.client import TwitterOAuth2Client
from twcred.oauth.csrf import CsrfToken
from twcred.oauth.endpoints import TWITTER_AUTHORIZE_URL, TWITTER_TOKEN_URL
from twcred.oauth.pkce import PkceChallenge, PkceCodeVerifier, generate_pkce_pair
from twcred.oauth.transport import HttpxTransport, TokenTransport, TransportResponse

__all__ = [
    "AttemptState",
    "AuthorizationAttempt",
    "CsrfToken",
    "HttpxTransport",
    "PkceChallenge",
    "PkceCodeVerifier",
    "TWITTER_AUTHORIZE_URL",
    "TWITTER_TOKEN_URL",
    "TokenTransport",
    "TransportResponse",
    "TwitterOAuth2Client",
    "build_authorization",
    "generate_pkce_pair",
    "validate_callback",
]
