"""Persisted credentials record and the file that holds it.

The credentials file is the only state twcred owns. It is a UTF-8 JSON
object with exactly two keys, always in this order::

    {
      "access_token": "<string>",
      "refresh_token": "<string>" | null
    }

Unknown keys are accepted on read and dropped on the next write.

:class:`CredentialFile` applies the two write policies the commands need:

* :meth:`CredentialFile.create` -- exclusive create, used by ``init``. An
  existing file is never touched.
* :meth:`CredentialFile.overwrite` -- atomic replace, used by ``refresh``.
  Content is written to a temporary file in the same directory, fsynced,
  then renamed into place, so a crash never leaves a half-written record.

Both write with ``0o600`` permissions so that tokens are never
world-readable, even momentarily.

See Also:
    :func:`twcred.flows.refresh_credentials` -- the policy deciding when
    a file is rewritten.
"""

from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path
from typing import Any, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    SecretStr,
    ValidationError,
    field_serializer,
    field_validator,
)

from twcred.exceptions import (
    CredentialsFileError,
    FileAlreadyExistsError,
    InvalidCredentialsFormatError,
)
from twcred.models import AccessToken, RefreshToken, TokenResponse

_FILE_MODE = 0o600


class Credentials(BaseModel):
    """Access token plus the refresh token, if the provider issued one.

    Attributes:
        access_token: Bearer token for API calls.
        refresh_token: Token for the refresh grant, or ``None`` when unknown.

    Example::

        creds = Credentials(access_token="AT1", refresh_token="RT1")
        assert Credentials.from_json(creds.to_json()) == creds
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    access_token: AccessToken
    refresh_token: Optional[RefreshToken] = None

    @field_validator("access_token", "refresh_token", mode="before")
    @classmethod
    def _require_string(cls, value: Any) -> Any:
        if value is None or isinstance(value, (str, SecretStr)):
            return value
        raise ValueError("must be a string")

    @field_serializer("access_token", "refresh_token")
    def _reveal(self, value: Optional[SecretStr]) -> Optional[str]:
        return value.get_secret_value() if value is not None else None

    @classmethod
    def from_token_response(
        cls, token: TokenResponse, previous: Optional[Credentials] = None
    ) -> Credentials:
        """Build a record from a token response.

        When the provider does not rotate the refresh token, the one from
        *previous* is kept.
        """
        refresh_token = token.refresh_token
        if refresh_token is None and previous is not None:
            refresh_token = previous.refresh_token
        return cls(access_token=token.access_token, refresh_token=refresh_token)

    @classmethod
    def from_json(cls, text: str) -> Credentials:
        """Parse a persisted credentials document.

        Raises:
            InvalidCredentialsFormatError: If *text* is not a JSON object
                with a string ``access_token`` and a string or null
                ``refresh_token``.
        """
        try:
            data = json.loads(text)
        except json.JSONDecodeError as exc:
            raise InvalidCredentialsFormatError(
                f"Credentials are not valid JSON: {exc.msg} (line {exc.lineno})"
            ) from exc
        if not isinstance(data, dict):
            raise InvalidCredentialsFormatError(
                "Credentials must be a JSON object"
            )
        try:
            return cls.model_validate(data)
        except ValidationError as exc:
            problems = "; ".join(
                f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}"
                for err in exc.errors()
            )
            raise InvalidCredentialsFormatError(
                f"Invalid credentials format ({problems})"
            ) from exc

    def to_json(self) -> str:
        """Serialise to the persisted format (2-space indent, trailing newline)."""
        return json.dumps(self.model_dump(mode="json"), indent=2) + "\n"


class CredentialFile:
    """Read and write a :class:`Credentials` record at a fixed path.

    Args:
        path: Location of the credentials file.

    Example::

        store = CredentialFile(Path("creds.json"))
        store.create(Credentials(access_token="AT1"))
        assert store.load().refresh_token is None
    """

    def __init__(self, path: Path | str) -> None:
        self._path = Path(path).expanduser()

    @property
    def path(self) -> Path:
        """The filesystem path of the credentials file."""
        return self._path

    def exists(self) -> bool:
        return self._path.exists()

    def load(self) -> Credentials:
        """Read and parse the credentials file.

        Raises:
            CredentialsFileError: If the file is missing or unreadable.
            InvalidCredentialsFormatError: If its content is malformed.
        """
        try:
            text = self._path.read_text(encoding="utf-8")
        except FileNotFoundError as exc:
            raise CredentialsFileError(
                f"Credentials file not found: {self._path}"
            ) from exc
        except (OSError, UnicodeDecodeError) as exc:
            raise CredentialsFileError(
                f"Cannot read credentials file {self._path}: {exc}"
            ) from exc
        return Credentials.from_json(text)

    def create(self, credentials: Credentials) -> None:
        """Write *credentials* to a file that must not exist yet.

        Raises:
            FileAlreadyExistsError: If the path already exists; the existing
                file is left as it was.
            CredentialsFileError: On any other write failure.
        """
        text = credentials.to_json()
        self._path.parent.mkdir(parents=True, exist_ok=True)
        try:
            fd = os.open(
                self._path, os.O_WRONLY | os.O_CREAT | os.O_EXCL, _FILE_MODE
            )
        except FileExistsError as exc:
            raise FileAlreadyExistsError(self._path) from exc
        except OSError as exc:
            raise CredentialsFileError(
                f"Cannot create credentials file {self._path}: {exc}"
            ) from exc

        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(text)
                f.flush()
                os.fsync(f.fileno())
        except BaseException:
            # Only remove what this call created
            self._path.unlink(missing_ok=True)
            raise

    def overwrite(self, credentials: Credentials) -> None:
        """Atomically replace the file content with *credentials*.

        Raises:
            CredentialsFileError: If the file cannot be written.
        """
        text = credentials.to_json()

        fd = None
        tmp_path: Optional[str] = None
        try:
            fd = tempfile.NamedTemporaryFile(
                mode="w",
                dir=self._path.parent,
                prefix=f".{self._path.name}.",
                suffix=".tmp",
                delete=False,
                encoding="utf-8",
            )
            tmp_path = fd.name
            # Set restrictive permissions before writing content
            os.chmod(tmp_path, _FILE_MODE)
            fd.write(text)
            fd.flush()
            os.fsync(fd.fileno())
            fd.close()
            fd = None
            os.replace(tmp_path, self._path)
        except BaseException as exc:
            if fd is not None:
                fd.close()
            if tmp_path is not None:
                try:
                    os.unlink(tmp_path)
                except OSError:
                    pass
            if isinstance(exc, OSError):
                raise CredentialsFileError(
                    f"Cannot write credentials file {self._path}: {exc}"
                ) from exc
            raise
