"""Exception hierarchy for twcred.

All exceptions inherit from :class:`TwcredError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`twcred.exit_codes`.
The top-level error handler in :func:`twcred.app.main` catches
``TwcredError`` and exits with the appropriate code, while unexpected
exceptions produce a crash log and exit with :data:`EXIT_GENERIC_FAILURE`.

Messages never embed token values, the PKCE verifier, or the CSRF state.

Subclass hierarchy::

    TwcredError (exit 1)
    +-- InvalidUsageError              (exit 2)
    |   +-- InvalidUrlError            (exit 2)
    |   +-- MissingParameterError      (exit 2)
    +-- AuthError                      (exit 3)
    |   +-- CsrfMismatchError          (exit 3)
    |   +-- TokenExchangeError         (exit 3)
    |   +-- MissingRefreshTokenError   (exit 3)
    +-- AttemptConsumedError           (exit 1)
    +-- CredentialsFileError           (exit 4)
    |   +-- InvalidCredentialsFormatError (exit 4)
    |   +-- FileAlreadyExistsError     (exit 4)
    +-- NetworkError                   (exit 6)
    +-- ConfigError                    (exit 1)
"""

from __future__ import annotations

from typing import Optional

from twcred.exit_codes import (
    EXIT_AUTH_FAILURE,
    EXIT_CONNECTION_ERROR,
    EXIT_CREDENTIALS_FILE,
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
)


class TwcredError(Exception):
    """Base exception for all twcred errors.

    Every subclass sets a class-level ``exit_code`` corresponding to one of
    the constants in :mod:`twcred.exit_codes`. The entry point catches
    this exception type and calls ``sys.exit(exc.exit_code)``.

    Args:
        message: Human-readable error description printed to stderr.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class InvalidUsageError(TwcredError):
    """Raised for invalid CLI arguments or missing required options."""

    exit_code = EXIT_INVALID_USAGE


class InvalidUrlError(InvalidUsageError):
    """Raised when a URL has no scheme, or is an http(s) URL without a host."""

    def __init__(self, url: str, reason: str = "not a well-formed absolute URL"):
        super().__init__(f"Invalid URL {url!r}: {reason}")
        self.url = url


class MissingParameterError(InvalidUsageError):
    """Raised when the redirected URL lacks a required query parameter.

    Args:
        name: The missing parameter (``"code"`` or ``"state"``).
        detail: Optional extra context, e.g. the provider's ``error`` value.
    """

    def __init__(self, name: str, detail: Optional[str] = None):
        message = f"Redirect URL has no '{name}' query parameter"
        if detail:
            message += f" ({detail})"
        super().__init__(message)
        self.name = name


class AuthError(TwcredError):
    """Raised when authorization fails or the provider rejects a token request."""

    exit_code = EXIT_AUTH_FAILURE


class CsrfMismatchError(AuthError):
    """Raised when the ``state`` returned in the callback is not the one issued."""

    def __init__(self) -> None:
        super().__init__(
            "CSRF state mismatch: the redirect URL does not belong to this "
            "authorization attempt"
        )


class TokenExchangeError(AuthError):
    """Raised on a non-2xx or unparseable response from the token endpoint.

    Args:
        detail: The provider's raw response body (or a parse failure note).
        status_code: HTTP status of the response, if one was received.
        grant: The grant type that was attempted, for the message prefix.
    """

    def __init__(
        self,
        detail: str,
        status_code: Optional[int] = None,
        grant: str = "authorization_code",
    ):
        prefix = f"Token request ({grant}) failed"
        if status_code is not None:
            prefix += f" with status {status_code}"
        super().__init__(f"{prefix}: {detail}" if detail else prefix)
        self.detail = detail
        self.status_code = status_code
        self.grant = grant


class MissingRefreshTokenError(AuthError):
    """Raised before any network call when the stored record has no refresh token."""

    def __init__(self, path: object = None):
        message = "Refresh token is not found"
        if path is not None:
            message += f" in {path}"
        super().__init__(message)


class AttemptConsumedError(TwcredError):
    """Raised when an authorization attempt is used for a second exchange."""

    def __init__(self) -> None:
        super().__init__(
            "This authorization attempt has already been used; start a new one"
        )


class CredentialsFileError(TwcredError):
    """Raised when the credentials file cannot be read or written."""

    exit_code = EXIT_CREDENTIALS_FILE


class InvalidCredentialsFormatError(CredentialsFileError):
    """Raised when a credentials document does not match the persisted shape."""


class FileAlreadyExistsError(CredentialsFileError):
    """Raised when initialising credentials at a path that already exists."""

    def __init__(self, path: object):
        super().__init__(f"Credentials file already exists: {path}")
        self.path = path


class NetworkError(TwcredError):
    """Raised on transport failures (DNS, TLS, timeout, connection reset)."""

    exit_code = EXIT_CONNECTION_ERROR


class ConfigError(TwcredError):
    """Raised for configuration problems (invalid config.json, bad credential sources)."""

    exit_code = EXIT_GENERIC_FAILURE
