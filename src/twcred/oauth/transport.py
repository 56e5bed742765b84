"""HTTP capability used by the token endpoint calls.

The OAuth2 client only needs to POST a form-encoded body and read back a
status code and a body, so that is all :class:`TokenTransport` promises.
:class:`HttpxTransport` is the production implementation; tests plug in
either a fake transport or an :class:`httpx.MockTransport`.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Protocol

import httpx

from twcred.exceptions import NetworkError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0
"""Seconds before a token request is abandoned with :class:`NetworkError`."""


@dataclass(frozen=True)
class TransportResponse:
    """Status code and raw body of a token endpoint response."""

    status_code: int
    text: str

    @property
    def is_success(self) -> bool:
        return 200 <= self.status_code < 300


class TokenTransport(Protocol):
    """Anything that can POST a form and return a :class:`TransportResponse`."""

    def post_form(
        self,
        url: str,
        data: dict[str, str],
        basic_auth: Optional[tuple[str, str]] = None,
    ) -> TransportResponse:
        """POST *data* form-encoded to *url*.

        Raises:
            NetworkError: On any transport-level failure.
        """
        ...


class HttpxTransport:
    """:class:`TokenTransport` backed by :class:`httpx.Client`.

    Args:
        timeout: Overall timeout in seconds for each request.
        client: Optional pre-built client (tests inject one wrapping an
            :class:`httpx.MockTransport`). When omitted, a client is created
            and owned by this transport.

    Example::

        with HttpxTransport(timeout=10) as transport:
            response = transport.post_form(url, {"grant_type": "refresh_token"})
    """

    def __init__(
        self,
        timeout: float = DEFAULT_TIMEOUT,
        client: Optional[httpx.Client] = None,
    ) -> None:
        self._owns_client = client is None
        self._client = client or httpx.Client(timeout=timeout, follow_redirects=False)

    def __enter__(self) -> HttpxTransport:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def post_form(
        self,
        url: str,
        data: dict[str, str],
        basic_auth: Optional[tuple[str, str]] = None,
    ) -> TransportResponse:
        logger.debug("POST %s (grant_type=%s)", url, data.get("grant_type"))
        try:
            response = self._client.post(
                url,
                data=data,
                auth=basic_auth,
                headers={"Accept": "application/json"},
            )
        except httpx.TimeoutException as exc:
            raise NetworkError(f"Request to {url} timed out: {exc}") from exc
        except httpx.TransportError as exc:
            raise NetworkError(f"Request to {url} failed: {exc}") from exc

        logger.debug("POST %s -> HTTP %d", url, response.status_code)
        return TransportResponse(status_code=response.status_code, text=response.text)
