"""Init command -- obtain the first credentials record interactively.

Implements ``twcred init``. It prints the provider's authorize URL (with a
fresh PKCE challenge and CSRF state), waits for the operator to paste back
the URL the browser was redirected to, exchanges the authorization code,
and either creates the credentials file given by ``--output`` or prints
the credentials JSON on stdout.

The output file is created exclusively: an existing file is never
overwritten, and the check runs before the authorize URL is shown.
"""

from __future__ import annotations

import webbrowser
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
from twcred.exit_codes import EXIT_CANCELLED
from twcred.output import debug, get_output, info, success, suggest, warning


def init_command(
    output_path: Optional[Path] = typer.Option(
        None,
        "--output",
        "-o",
        help="Create the credentials file at this path (must not exist).",
    ),
    client_id: str = typer.Option(
        ..., "--client-id", "-i", envvar=ENV_CLIENT_ID, help=CLIENT_ID_HELP
    ),
    client_secret: str = typer.Option(
        ...,
        "--client-secret",
        "-s",
        envvar=ENV_CLIENT_SECRET,
        help=CLIENT_SECRET_HELP,
    ),
    redirect_url: Optional[str] = typer.Option(
        None,
        "--redirect-url",
        "-r",
        help="Callback URL registered for the app.",
    ),
    scopes: Optional[list[str]] = typer.Option(
        None,
        "--scope",
        help="Scope to request; repeat for several. Defaults to config or built-ins.",
    ),
    timeout: Optional[float] = typer.Option(
        None, "--timeout", min=0.1, help="Token request timeout in seconds."
    ),
    open_browser: bool = typer.Option(
        False, "--open", help="Also open the authorize URL in a browser."
    ),
) -> None:
    """Authorize interactively and create a credentials record.

    Args:
        output_path: Where to create the credentials file. When omitted,
            the credentials JSON is printed on stdout.
        client_id: Client id or its source descriptor.
        client_secret: Client secret or its source descriptor.
        redirect_url: Callback URL; falls back to ``TWCRED_REDIRECT_URL``
            and ``config.json``.
        scopes: Scopes to request.
        timeout: Token request timeout.
        open_browser: Open the URL with :mod:`webbrowser` as well.

    Example::

        twcred init -i env:TW_ID -s env:TW_SECRET \\
            -r http://127.0.0.1:8080/callback -o credentials.json
    """
    from twcred.commands.common import open_transport
    from twcred.config import resolve_settings
    from twcred.exceptions import FileAlreadyExistsError, InvalidUsageError
    from twcred.flows import begin_authorization, complete_authorization
    from twcred.oauth.client import TwitterOAuth2Client

    output = get_output()

    with reported_errors():
        if output_path is not None and output_path.exists():
            raise FileAlreadyExistsError(output_path)

        client_credentials = build_client_credentials(client_id, client_secret)
        settings = resolve_settings(
            redirect_url=redirect_url, scopes=scopes, timeout=timeout
        )
        if not settings.redirect_url:
            raise InvalidUsageError(
                "A redirect URL is required: pass --redirect-url, set "
                "TWCRED_REDIRECT_URL, or add redirect_url to config.json"
            )

        with open_transport(settings.timeout) as transport:
            client = TwitterOAuth2Client.with_callback_url(
                client_credentials, transport, settings.redirect_url
            )
            attempt = begin_authorization(client, settings.scopes)
            debug(f"Requested scopes: {' '.join(settings.scopes)}")
            debug(f"CSRF state: {output.secret(attempt.csrf_state)}")

            info("Open this URL in a browser and authorize the app:")
            output.print_data(attempt.authorize_url)
            if open_browser:
                webbrowser.open(attempt.authorize_url)

            try:
                pasted = typer.prompt(
                    "Paste the full URL you were redirected to", err=True
                )
            except typer.Abort:
                info("Cancelled.")
                raise typer.Exit(code=EXIT_CANCELLED) from None

            credentials = complete_authorization(
                client, attempt, pasted, path=output_path
            )

    debug(f"Access token: {output.secret(credentials.access_token)}")
    debug(f"Refresh token: {output.secret(credentials.refresh_token)}")
    if credentials.refresh_token is None:
        warning(
            "The provider issued no refresh token; request the offline.access "
            "scope to be able to refresh."
        )

    if output_path is not None:
        success(f"Credentials written to {output_path}")
        if credentials.refresh_token is not None:
            suggest(f"Refresh later with: twcred refresh {output_path}")
    else:
        output.print_data(credentials.to_json().rstrip("\n"))
