"""Error taxonomy for the netstripe client.

Every failure raised by the client is a StripeError except transport-level
failures, which propagate exactly as the transport raised them.
"""

from __future__ import annotations

from typing import Any


class StripeError(Exception):
    """Base class for structured Stripe errors.

    Attributes are read-only; an error is built once per failed call.
    """

    def __init__(
        self,
        type: str,
        message: str,
        code: str | None = None,
        param: str | None = None,
    ) -> None:
        super().__init__(message)
        self._type = type
        self._message = message
        self._code = code
        self._param = param

    @property
    def type(self) -> str:
        return self._type

    @property
    def message(self) -> str:
        return self._message

    @property
    def code(self) -> str | None:
        return self._code

    @property
    def param(self) -> str | None:
        return self._param

    def to_dict(self) -> dict[str, str]:
        """Return the populated error fields as a plain dict."""
        fields = {"type": self._type, "message": self._message}
        if self._code is not None:
            fields["code"] = self._code
        if self._param is not None:
            fields["param"] = self._param
        return fields

    def __str__(self) -> str:
        parts = [f"{self._type}: {self._message}"]
        if self._code is not None:
            parts.append(f"code={self._code}")
        if self._param is not None:
            parts.append(f"param={self._param}")
        return " ".join(parts)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.to_dict()!r})"


class StripeValidationError(StripeError, ValueError):
    """Raised locally when an argument fails a format check.

    Never reaches the transport.
    """

    def __init__(self, message: str, param: str | None = None) -> None:
        super().__init__(type="validation_error", message=message, param=param)


class APIError(StripeError):
    """Raised when the API answers with a non-200 status."""

    def __init__(
        self,
        type: str,
        message: str,
        code: str | None = None,
        param: str | None = None,
        http_status: int | None = None,
        http_body: str | None = None,
        json_body: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(type=type, message=message, code=code, param=param)
        self._http_status = http_status
        self._http_body = http_body
        self._json_body = json_body

    @property
    def http_status(self) -> int | None:
        return self._http_status

    @property
    def http_body(self) -> str | None:
        return self._http_body

    @property
    def json_body(self) -> dict[str, Any] | None:
        return self._json_body


class ServerError(APIError):
    """Raised for 5xx responses, whether or not the body could be decoded."""


class ResponseDecodeError(APIError):
    """Raised when a response body is not valid or not the expected JSON.

    Synthesized from the HTTP status line and the raw body.
    """
