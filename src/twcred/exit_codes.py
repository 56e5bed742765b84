"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~twcred.exceptions.TwcredError` subclass.
Shell wrappers and cron jobs can inspect the exit code to tell a rejected
refresh token apart from a flaky network without parsing stderr.

Example::

    $ twcred refresh credentials.json
    $ echo $?
    3   # EXIT_AUTH_FAILURE -- the provider rejected the refresh token
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid arguments, URLs or parameters."""

EXIT_AUTH_FAILURE = 3
"""Authorization failed or the provider rejected a token request."""

EXIT_CREDENTIALS_FILE = 4
"""The credentials file is missing, malformed, or already exists."""

EXIT_CONNECTION_ERROR = 6
"""A network-level error occurred (timeout, DNS failure, connection refused)."""

EXIT_CANCELLED = 130
"""The operator interrupted the command (Ctrl-C)."""
