"""Authorization URL construction and redirect callback validation.

:func:`build_authorization` starts an attempt: it generates a fresh PKCE
pair and CSRF state and returns an :class:`AuthorizationAttempt` holding
the authorize URL plus the two secrets needed later.
:func:`validate_callback` checks the URL the operator pastes back after
approving access in the browser and extracts the authorization code.

An attempt is single-use. :meth:`AuthorizationAttempt.consume` hands out
its secrets exactly once; the owning client calls it before validating the
callback, so a rejected callback or a failed exchange also retires the
attempt.
"""

from __future__ import annotations

import enum
from collections.abc import Sequence
from urllib.parse import parse_qsl, urlencode, urlparse

from twcred.exceptions import (
    AttemptConsumedError,
    CsrfMismatchError,
    InvalidUrlError,
    MissingParameterError,
)
from twcred.models import AuthorizationCode, ClientCredentials
from twcred.oauth.csrf import CsrfToken
from twcred.oauth.endpoints import TWITTER_AUTHORIZE_URL
from twcred.oauth.pkce import PkceChallenge, PkceCodeVerifier


class AttemptState(str, enum.Enum):
    """Lifecycle tag of an :class:`AuthorizationAttempt`."""

    PENDING = "pending"
    CONSUMED = "consumed"


class AuthorizationAttempt:
    """One in-flight authorization: the URL to open and its secrets.

    Args:
        authorize_url: Fully-formed provider authorize URL.
        csrf_state: The ``state`` value embedded in *authorize_url*.
        pkce_verifier: Verifier matching the embedded ``code_challenge``.
        redirect_url: Callback URL the client is bound to; the token
            exchange must repeat it.
        scopes: The requested scopes, in request order.
    """

    def __init__(
        self,
        authorize_url: str,
        csrf_state: CsrfToken,
        pkce_verifier: PkceCodeVerifier,
        redirect_url: str,
        scopes: Sequence[str] = (),
    ) -> None:
        self._authorize_url = authorize_url
        self._csrf_state = csrf_state
        self._pkce_verifier = pkce_verifier
        self._redirect_url = redirect_url
        self._scopes = tuple(scopes)
        self._state = AttemptState.PENDING

    @property
    def authorize_url(self) -> str:
        return self._authorize_url

    @property
    def redirect_url(self) -> str:
        return self._redirect_url

    @property
    def scopes(self) -> tuple[str, ...]:
        return self._scopes

    @property
    def state(self) -> AttemptState:
        return self._state

    @property
    def csrf_state(self) -> CsrfToken:
        """The issued CSRF token (masked on ``str()``)."""
        return self._csrf_state

    def consume(self) -> tuple[CsrfToken, PkceCodeVerifier]:
        """Move the attempt to ``CONSUMED`` and hand out its secrets.

        Returns:
            ``(csrf_state, pkce_verifier)``.

        Raises:
            AttemptConsumedError: If the attempt was already consumed.
        """
        if self._state is AttemptState.CONSUMED:
            raise AttemptConsumedError()
        self._state = AttemptState.CONSUMED
        return self._csrf_state, self._pkce_verifier

    def __repr__(self) -> str:
        return (
            f"AuthorizationAttempt(state={self._state.value!r}, "
            f"redirect_url={self._redirect_url!r}, scopes={list(self._scopes)!r})"
        )


def _without_query(url: str) -> str:
    return url.split("#", 1)[0].split("?", 1)[0]


def require_absolute_url(url: str) -> str:
    """Return *url* stripped of surrounding whitespace if it is absolute.

    Private-use schemes need no host (``com.example.app:/oauth2redirect``);
    http(s) URLs do. The error message leaves out the query and fragment,
    where a pasted redirect carries the authorization code and state.

    Raises:
        InvalidUrlError: If *url* has no scheme, or is an http(s) URL
            without a host.
    """
    candidate = url.strip()
    try:
        parsed = urlparse(candidate)
    except ValueError as exc:
        raise InvalidUrlError(_without_query(candidate), str(exc)) from exc
    if not parsed.scheme or (parsed.scheme in ("http", "https") and not parsed.netloc):
        raise InvalidUrlError(_without_query(candidate))
    return candidate


def build_authorization(
    client: ClientCredentials,
    redirect_url: str,
    scopes: Sequence[str],
    authorize_endpoint: str = TWITTER_AUTHORIZE_URL,
) -> AuthorizationAttempt:
    """Start an authorization attempt.

    Scopes are sent space-joined in the given order; duplicates are passed
    through unchanged.

    Args:
        client: The registered client identity.
        redirect_url: Callback URL registered for the client.
        scopes: Scopes to request.
        authorize_endpoint: Provider authorize endpoint.

    Returns:
        A pending :class:`AuthorizationAttempt`.

    Raises:
        InvalidUrlError: If *redirect_url* has no scheme.
    """
    redirect_url = require_absolute_url(redirect_url)
    pkce = PkceChallenge.new_random_sha256()
    csrf_state = CsrfToken.new_random()

    params: dict[str, str] = {
        "response_type": "code",
        "client_id": client.client_id,
        "redirect_uri": redirect_url,
        "state": csrf_state.get_secret_value(),
        "code_challenge": pkce.challenge,
        "code_challenge_method": pkce.method,
    }
    if scopes:
        params["scope"] = " ".join(scopes)

    return AuthorizationAttempt(
        authorize_url=f"{authorize_endpoint}?{urlencode(params)}",
        csrf_state=csrf_state,
        pkce_verifier=pkce.verifier,
        redirect_url=redirect_url,
        scopes=scopes,
    )


def validate_callback(csrf_state: CsrfToken, redirect_url: str) -> AuthorizationCode:
    """Extract the authorization code from the redirected URL.

    Args:
        csrf_state: The state issued for this attempt.
        redirect_url: The full URL the browser was redirected to.

    Returns:
        The authorization code.

    Raises:
        InvalidUrlError: If *redirect_url* has no scheme.
        MissingParameterError: If ``code`` or ``state`` is absent, checked
            in that order.
        CsrfMismatchError: If ``state`` differs from *csrf_state*.
    """
    redirect_url = require_absolute_url(redirect_url)
    # Last value wins on duplicate keys
    params = dict(parse_qsl(urlparse(redirect_url).query, keep_blank_values=True))

    code = params.get("code")
    if code is None:
        detail = None
        if "error" in params:
            detail = f"provider returned error: {params['error']}"
            if params.get("error_description"):
                detail += f" - {params['error_description']}"
        raise MissingParameterError("code", detail)

    state = params.get("state")
    if state is None:
        raise MissingParameterError("state")

    if not csrf_state.matches(state):
        raise CsrfMismatchError()

    return AuthorizationCode(code)
