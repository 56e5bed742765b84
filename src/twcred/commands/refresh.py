"""Refresh command -- exchange the stored refresh token for a new access token.

Implements ``twcred refresh PATH``. The credentials file at ``PATH`` is
rewritten only when the provider accepts the refresh; a rejected refresh
token or a network failure leaves it exactly as it was and exits non-zero
with the provider's error. The client is not bound to a callback URL here,
since refresh is a server-to-server grant.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer

from twcred.commands.common import (
    CLIENT_ID_HELP,
    CLIENT_SECRET_HELP,
    build_client_credentials,
    reported_errors,
)
from twcred.config import ENV_CLIENT_ID, ENV_CLIENT_SECRET
from twcred.output import debug, get_output, success, warning


def refresh_command(
    path: Path = typer.Argument(..., help="Path to an existing credentials file."),
    client_id: str = typer.Option(
        ..., "--client-id", "-i", envvar=ENV_CLIENT_ID, help=CLIENT_ID_HELP
    ),
    client_secret: str = typer.Option(
        ..., "--client-secret", "-s", envvar=ENV_CLIENT_SECRET, help=CLIENT_SECRET_HELP
    ),
    timeout: Optional[float] = typer.Option(
        None, "--timeout", min=0.1, help="Token request timeout in seconds."
    ),
) -> None:
    """Refresh the access token stored at PATH.

    Example::

        twcred refresh credentials.json -i env:TW_ID -s env:TW_SECRET
    """
    from twcred.commands.common import open_transport
    from twcred.config import resolve_settings
    from twcred.exceptions import NetworkError, TokenExchangeError
    from twcred.flows import refresh_credentials
    from twcred.oauth.client import TwitterOAuth2Client

    output = get_output()

    with reported_errors():
        client_credentials = build_client_credentials(client_id, client_secret)
        settings = resolve_settings(timeout=timeout)

        with open_transport(settings.timeout) as transport:
            client = TwitterOAuth2Client(client_credentials, transport)
            try:
                outcome = refresh_credentials(client, path)
            except (TokenExchangeError, NetworkError):
                warning(f"Existing credentials in {path} were left unchanged.")
                raise

    debug(f"Previous refresh token: {output.secret(outcome.previous.refresh_token)}")
    debug(f"New access token: {output.secret(outcome.credentials.access_token)}")
    if outcome.refresh_token_rotated:
        debug("Provider rotated the refresh token")
    else:
        debug("Provider did not rotate the refresh token; kept the existing one")
    if outcome.token.expires_in is not None:
        debug(f"Access token expires in {outcome.token.expires_in}s")

    success(f"Credentials in {path} refreshed.")
