"""The three operations the CLI exposes, independent of Typer.

* :func:`begin_authorization` -- start an attempt and get the URL to open.
* :func:`complete_authorization` -- turn the pasted redirect URL into a
  :class:`~twcred.credentials.Credentials` record, optionally written
  with exclusive-create semantics.
* :func:`refresh_credentials` -- refresh a stored record in place.

The refresh flow never destroys existing data: if the provider rejects the
refresh token or the network fails, the file is left byte-for-byte as it
was and the error propagates so the operator sees it.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from twcred.credentials import CredentialFile, Credentials
from twcred.exceptions import (
    FileAlreadyExistsError,
    MissingRefreshTokenError,
    NetworkError,
    TokenExchangeError,
)
from twcred.models import TokenResponse
from twcred.oauth.authorize import AuthorizationAttempt
from twcred.oauth.client import TwitterOAuth2Client

logger = logging.getLogger(__name__)


def begin_authorization(
    client: TwitterOAuth2Client, scopes: Sequence[str]
) -> AuthorizationAttempt:
    """Start an authorization attempt; no network call is made."""
    attempt = client.authorizer(scopes)
    logger.debug("Authorization attempt created for %d scope(s)", len(attempt.scopes))
    return attempt


def complete_authorization(
    client: TwitterOAuth2Client,
    attempt: AuthorizationAttempt,
    redirect_url: str,
    path: Optional[Path] = None,
) -> Credentials:
    """Finish *attempt* with the URL the browser was redirected to.

    Args:
        client: The client that created *attempt*.
        attempt: The pending attempt; consumed by this call.
        redirect_url: The pasted redirect URL.
        path: If given, where to create the credentials file. The file must
            not exist yet.

    Returns:
        The new credentials.

    Raises:
        FileAlreadyExistsError: If *path* exists. Checked before the code
            is exchanged so an authorization is not wasted, and again on
            the actual create.
        TwcredError: Any error from validation or the exchange.
    """
    store = CredentialFile(path) if path is not None else None
    if store is not None and store.exists():
        raise FileAlreadyExistsError(store.path)

    token = client.complete_authorization(attempt, redirect_url)
    logger.debug("Granted scopes: %s", " ".join(token.scopes) or "(not reported)")
    credentials = Credentials.from_token_response(token)

    if store is not None:
        store.create(credentials)
        logger.debug("Credentials written to %s", store.path)
    return credentials


@dataclass(frozen=True)
class RefreshOutcome:
    """Result of a successful :func:`refresh_credentials` call."""

    previous: Credentials
    credentials: Credentials
    token: TokenResponse

    @property
    def refresh_token_rotated(self) -> bool:
        return self.token.refresh_token is not None


def refresh_credentials(client: TwitterOAuth2Client, path: Path) -> RefreshOutcome:
    """Refresh the credentials stored at *path* and rewrite the file.

    Raises:
        CredentialsFileError: If the file is missing or unreadable.
        InvalidCredentialsFormatError: If the file is malformed.
        MissingRefreshTokenError: If the record has no refresh token. No
            network call is made.
        TokenExchangeError: If the provider rejects the refresh. The file
            is left untouched.
        NetworkError: On transport failure. The file is left untouched.
    """
    store = CredentialFile(path)
    previous = store.load()
    if previous.refresh_token is None:
        raise MissingRefreshTokenError(store.path)

    try:
        token = client.refresh_token(previous.refresh_token)
    except (TokenExchangeError, NetworkError):
        logger.debug("Refresh failed; keeping %s unchanged", store.path)
        raise

    credentials = Credentials.from_token_response(token, previous=previous)
    store.overwrite(credentials)
    return RefreshOutcome(previous=previous, credentials=credentials, token=token)
