"""HTTP transports for the netstripe client."""

from .transport import (
    FormBody,
    HttpxTransport,
    RequestsTransport,
    Transport,
    TransportResponse,
    encode_form_body,
)

__all__ = [
    "FormBody",
    "HttpxTransport",
    "RequestsTransport",
    "Transport",
    "TransportResponse",
    "encode_form_body",
]
