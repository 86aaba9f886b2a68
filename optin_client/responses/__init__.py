from optin_client.responses.action import Action
from optin_client.responses.envelope import ResponseEnvelope, ResponseSnapshot
from optin_client.responses.errors import (
    DecodeError,
    MissingFieldError,
    NoDecodedBodyError,
    NoResultError,
    ResponseError,
)
from optin_client.responses.payload import FlatError, Many, Single, StructuredError
from optin_client.responses.rate_limit import RateLimit

__all__ = [
    "Action",
    "DecodeError",
    "FlatError",
    "Many",
    "MissingFieldError",
    "NoDecodedBodyError",
    "NoResultError",
    "RateLimit",
    "ResponseEnvelope",
    "ResponseError",
    "ResponseSnapshot",
    "Single",
    "StructuredError",
]
