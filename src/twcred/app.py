"""Typer application factory and CLI entry point for twcred.

This module wires together the top-level Typer application and registers
the built-in commands (``init``, ``refresh``, ``show``).

The :func:`main` function is the console-script entry point declared in
``pyproject.toml``. It installs signal handlers and invokes the Typer app.
:class:`~twcred.exceptions.TwcredError` exits with the error's code;
other unhandled exceptions are written to a crash log under the data
directory.

See Also:
    :mod:`twcred.config`: Settings resolution.
    :mod:`twcred.output`: Output formatting initialised in :func:`main_callback`.
"""

from __future__ import annotations

import logging
import signal
import sys
import traceback
from datetime import datetime
from typing import Any

import typer

from twcred import __version__
from twcred.commands.init import init_command
from twcred.commands.refresh import refresh_command
from twcred.commands.show import show_command
from twcred.exit_codes import EXIT_CANCELLED, EXIT_GENERIC_FAILURE, EXIT_SUCCESS


app = typer.Typer(
    name="twcred",
    help="Bootstrap and refresh Twitter API OAuth2 credentials.",
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich",
)

app.command("init")(init_command)
app.command("refresh")(refresh_command)
app.command("show")(show_command)


def _version_callback(value: bool) -> None:
    """Print version and exit when --version is passed."""
    if value:
        typer.echo(f"twcred {__version__}")
        raise typer.Exit(code=EXIT_SUCCESS)


def _configure_logging(verbosity: int) -> None:
    """Route ``twcred`` log records to the output manager when ``-v`` is given."""
    from twcred.output import OutputLogHandler

    logger = logging.getLogger("twcred")
    logger.setLevel(logging.DEBUG if verbosity >= 1 else logging.WARNING)
    if not any(isinstance(h, OutputLogHandler) for h in logger.handlers):
        logger.addHandler(OutputLogHandler())


@app.callback()
def main_callback(
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    json_output: bool = typer.Option(
        False, "--json", help="JSON output format."
    ),
    no_color: bool = typer.Option(
        False, "--no-color", help="Disable color output."
    ),
    quiet: bool = typer.Option(
        False, "--quiet", "-q", help="Suppress non-essential output."
    ),
    verbose: int = typer.Option(
        0,
        "--verbose",
        "-v",
        count=True,
        help="Enable debug output; repeat (-vv) to include secret values.",
    ),
) -> None:
    """Root callback executed before every sub-command.

    Initialises the global :class:`~twcred.output.OutputManager` from
    CLI flags and configures logging for the ``twcred`` loggers.

    Args:
        version: If ``True``, print the version string and exit.
        json_output: Force JSON output format.
        no_color: Disable all colour and Rich markup.
        quiet: Suppress non-essential diagnostic output.
        verbose: Debug level; ``2`` or more also reveals secrets.
    """
    from twcred.output import OutputFormat, OutputManager, set_output

    fmt = OutputFormat.JSON if json_output else OutputFormat.AUTO
    set_output(
        OutputManager(
            format=fmt,
            no_color=no_color,
            quiet=quiet,
            verbosity=verbose,
        )
    )
    _configure_logging(verbose)


def _setup_signal_handlers() -> None:
    """Install a SIGINT handler so Ctrl-C exits cleanly."""

    def _handler(signum: int, frame: Any) -> None:  # noqa: ANN401
        sys.stderr.write("\nCancelled.\n")
        sys.exit(EXIT_CANCELLED)

    signal.signal(signal.SIGINT, _handler)


def _write_crash_log(exc: Exception) -> str:
    """Write a crash traceback to disk and return the log file path.

    Args:
        exc: The unhandled exception to log.

    Returns:
        Absolute path to the written crash log file.
    """
    from twcred.config import get_data_dir

    logs_dir = get_data_dir() / "logs"
    logs_dir.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d-%H%M%S")
    log_path = logs_dir / f"crash-{timestamp}.log"
    log_path.write_text(traceback.format_exc())
    return str(log_path)


def main() -> None:
    """CLI entry point invoked by the ``twcred`` console script.

    Unhandled :class:`~twcred.exceptions.TwcredError` instances
    cause a clean exit with the error's ``exit_code``. All other exceptions
    produce a crash log and a generic failure exit.

    Raises:
        SystemExit: Always raised (either by Typer or explicitly).
    """
    _setup_signal_handlers()
    try:
        app()
    except SystemExit:
        raise
    except KeyboardInterrupt:
        sys.stderr.write("\nCancelled.\n")
        sys.exit(EXIT_CANCELLED)
    except Exception as exc:
        from twcred.exceptions import TwcredError
        from twcred.output import error

        if isinstance(exc, TwcredError):
            error(str(exc))
            sys.exit(exc.exit_code)
        else:
            log_path = _write_crash_log(exc)
            error(f"Unexpected error. Debug log: {log_path}")
            sys.exit(EXIT_GENERIC_FAILURE)
