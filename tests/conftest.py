"""Shared fixtures for netstripe tests."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Mapping

import pytest

from netstripe import StripeClient, StripeConfig
from netstripe.http import TransportResponse

API_KEY = "sk_test_123"


# =============================================================================
# Doubles
# =============================================================================


class BoxedBool:
    """Boolean wrapper in the style some JSON decoders produce."""

    def __init__(self, value: bool):
        self._value = value

    def __bool__(self) -> bool:
        return self._value

    def __repr__(self) -> str:
        return f"BoxedBool({self._value})"


@dataclass
class SentRequest:
    method: str
    url: str
    headers: dict[str, str]
    body: list[tuple[str, Any]] | None


@dataclass
class FakeTransport:
    """Transport double returning queued responses and recording requests."""

    responses: list[TransportResponse] = field(default_factory=list)
    requests: list[SentRequest] = field(default_factory=list)
    error: Exception | None = None
    closed: bool = False

    def queue(self, payload: Any, status_code: int = 200, reason: str | None = None) -> None:
        content = payload if isinstance(payload, bytes) else json.dumps(payload).encode()
        self.responses.append(
            TransportResponse(status_code=status_code, content=content, reason=reason)
        )

    def send(
        self,
        method: str,
        url: str,
        headers: Mapping[str, str],
        body: Any = None,
    ) -> TransportResponse:
        self.requests.append(
            SentRequest(method, url, dict(headers), list(body) if body is not None else None)
        )
        if self.error is not None:
            raise self.error
        return self.responses.pop(0)

    def close(self) -> None:
        self.closed = True

    @property
    def last(self) -> SentRequest:
        return self.requests[-1]


# =============================================================================
# Payloads
# =============================================================================


def customer_payload(customer_id: str = "cus_01", **overrides: Any) -> dict[str, Any]:
    payload = {
        "id": customer_id,
        "object": "customer",
        "created": 1583000000,
        "balance": 0,
        "email": "jane@example.com",
        "livemode": False,
        "metadata": {},
    }
    payload.update(overrides)
    return payload


def list_payload(items: list[Any], url: str = "/v1/customers", has_more: bool = False) -> dict:
    return {"object": "list", "data": items, "has_more": has_more, "url": url}


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def client(transport: FakeTransport) -> StripeClient:
    return StripeClient(StripeConfig(api_key=API_KEY, transport=transport))


@pytest.fixture
def boxed() -> type[BoxedBool]:
    return BoxedBool


@pytest.fixture
def make_customer() -> Any:
    return customer_payload


@pytest.fixture
def make_list() -> Any:
    return list_payload
