"""Transports: the single blocking HTTP round trip behind every client call."""

from __future__ import annotations

from dataclasses import dataclass, field
from http import HTTPStatus
from typing import TYPE_CHECKING, Any, Mapping, Optional, Protocol, Sequence
from urllib.parse import urlencode

from ..constants import DEFAULT_TIMEOUT

if TYPE_CHECKING:
    import httpx
    import requests

FormBody = Sequence[tuple[str, Any]]


# ============================================================================
# Transport Protocol
# ============================================================================


@dataclass
class TransportResponse:
    """Status, headers and raw body of an HTTP response."""

    status_code: int
    content: bytes = b""
    headers: dict[str, str] = field(default_factory=dict)
    reason: Optional[str] = None

    @property
    def text(self) -> str:
        return self.content.decode("utf-8", errors="replace")

    @property
    def status_line(self) -> str:
        """e.g. ``"400 Bad Request"``."""
        reason = self.reason
        if not reason:
            try:
                reason = HTTPStatus(self.status_code).phrase
            except ValueError:
                reason = ""
        return f"{self.status_code} {reason}".rstrip()


class Transport(Protocol):
    """Sends one HTTP request and returns the response.

    Implementations raise only for failures below HTTP (connection refused,
    DNS, timeouts). Any status code, including errors, is a response.
    """

    def send(
        self,
        method: str,
        url: str,
        headers: Mapping[str, str],
        body: FormBody | None = None,
    ) -> TransportResponse:
        """Send a request. ``body`` holds form pairs for POST requests."""
        ...


def encode_form_body(body: FormBody) -> bytes:
    """Urlencode form pairs, repeating the key for each element of a list value."""
    expanded: list[tuple[str, Any]] = []
    for key, value in body:
        if isinstance(value, (list, tuple)):
            expanded.extend((key, item) for item in value)
        else:
            expanded.append((key, value))
    return urlencode(expanded).encode("utf-8")


# ============================================================================
# httpx
# ============================================================================


class HttpxTransport:
    """Transport backed by ``httpx.Client``. This is the default."""

    def __init__(self, client: httpx.Client | None = None, timeout: float = DEFAULT_TIMEOUT):
        """Create the transport.

        Args:
            client: Optional httpx.Client to use. When omitted one is created
                lazily and closed by ``close()``.
            timeout: Timeout in seconds for a created client.
        """
        self._client = client
        self._timeout = timeout
        self._owns_client = client is None

    def _get_client(self) -> httpx.Client:
        """Get or create HTTP client."""
        if self._client is None:
            import httpx

            self._client = httpx.Client(timeout=self._timeout, follow_redirects=True)
        return self._client

    def send(
        self,
        method: str,
        url: str,
        headers: Mapping[str, str],
        body: FormBody | None = None,
    ) -> TransportResponse:
        content = encode_form_body(body) if body is not None else None
        response = self._get_client().request(method, url, headers=dict(headers), content=content)
        return TransportResponse(
            status_code=response.status_code,
            content=response.content,
            headers=dict(response.headers),
            reason=response.reason_phrase,
        )

    def close(self) -> None:
        """Close HTTP client if we own it."""
        if self._owns_client and self._client is not None:
            self._client.close()
            self._client = None


# ============================================================================
# requests
# ============================================================================


class RequestsTransport:
    """Transport backed by ``requests.Session``."""

    def __init__(
        self,
        session: requests.Session | None = None,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        self._session = session
        self._timeout = timeout
        self._owns_session = session is None

    def _get_session(self) -> requests.Session:
        if self._session is None:
            import requests

            self._session = requests.Session()
        return self._session

    def send(
        self,
        method: str,
        url: str,
        headers: Mapping[str, str],
        body: FormBody | None = None,
    ) -> TransportResponse:
        data = encode_form_body(body) if body is not None else None
        response = self._get_session().request(
            method,
            url,
            headers=dict(headers),
            data=data,
            timeout=self._timeout,
        )
        return TransportResponse(
            status_code=response.status_code,
            content=response.content,
            headers=dict(response.headers),
            reason=response.reason,
        )

    def close(self) -> None:
        if self._owns_session and self._session is not None:
            self._session.close()
            self._session = None
