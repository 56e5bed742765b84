"""Helpers shared by the command modules."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager

import typer

from twcred.config import resolve_credential
from twcred.exceptions import TwcredError
from twcred.models import ClientCredentials
from twcred.oauth.transport import HttpxTransport
from twcred.output import error

CLIENT_ID_HELP = "OAuth2 client id (literal, env:VAR or file:PATH)."
CLIENT_SECRET_HELP = "OAuth2 client secret (literal, env:VAR or file:PATH)."


def build_client_credentials(client_id: str, client_secret: str) -> ClientCredentials:
    """Resolve the client id/secret option values into :class:`ClientCredentials`."""
    return ClientCredentials(
        client_id=resolve_credential(client_id),
        client_secret=resolve_credential(client_secret),
    )


def open_transport(timeout: float) -> HttpxTransport:
    """Create the HTTP transport used for token requests."""
    return HttpxTransport(timeout=timeout)


@contextmanager
def reported_errors() -> Iterator[None]:
    """Print a :class:`TwcredError` and exit with its code."""
    try:
        yield
    except TwcredError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None
