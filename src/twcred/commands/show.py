"""Show command -- inspect a credentials file without leaking it.

Implements ``twcred show PATH``: prints which tokens are present, with
only a short prefix of each unless ``--reveal`` is given. With ``--json``
it prints one object instead of a table.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer
from pydantic import SecretStr

from twcred.commands.common import reported_errors
from twcred.output import OutputFormat, get_output, mask_token


def show_command(
    path: Path = typer.Argument(..., help="Path to a credentials file."),
    reveal: bool = typer.Option(
        False, "--reveal", help="Print full token values."
    ),
) -> None:
    """Show the credentials stored at PATH with tokens masked.

    Example::

        twcred show credentials.json
        twcred --json show credentials.json
    """
    from twcred.credentials import CredentialFile

    with reported_errors():
        credentials = CredentialFile(path).load()

    def _render(value: Optional[SecretStr]) -> Optional[str]:
        if value is None:
            return None
        raw = value.get_secret_value()
        return raw if reveal else mask_token(raw)

    output = get_output()
    if output.format == OutputFormat.JSON:
        output.print_json(
            {
                "path": str(path),
                "access_token": _render(credentials.access_token),
                "refresh_token": _render(credentials.refresh_token),
                "refreshable": credentials.refresh_token is not None,
            }
        )
        return

    headers = ["Field", "Value"]
    rows = [
        ["Path", str(path)],
        ["Access Token", _render(credentials.access_token) or "-"],
        ["Refresh Token", _render(credentials.refresh_token) or "-"],
        ["Refreshable", "yes" if credentials.refresh_token is not None else "no"],
    ]
    output.print_table(headers, rows, title="Stored Credentials")
