from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Tuple, Union

from optin_client.responses.errors import MissingFieldError

# detail lines are emitted in this order, whatever order the server used
ERROR_ATTRIBUTES: Tuple[str, ...] = ("action", "hash", "scope", "data")


@dataclass(frozen=True)
class Single:
    record: Any


@dataclass(frozen=True)
class Many:
    records: Tuple[Any, ...] = ()


Data = Union[Single, Many]


def resolve_data(value: Any) -> Data:
    """Classify the decoded `data` field.

    - list  -> Many (any length, including 1)
    - other -> Single, null included
    """
    if isinstance(value, list):
        return Many(tuple(value))
    return Single(value)


@dataclass(frozen=True)
class StructuredError:
    message: str
    code: Any


@dataclass(frozen=True)
class FlatError:
    message: str
    errors: Dict[str, List[str]] = field(default_factory=dict)


ErrorShape = Union[StructuredError, FlatError]


def _render(v: Any) -> str:
    # strings as-is, everything else as it appeared on the wire
    if isinstance(v, str):
        return v
    return json.dumps(v, ensure_ascii=False)


def _values(raw: Any) -> List[str]:
    if isinstance(raw, (list, tuple)):
        return [_render(v) for v in raw]
    return [_render(raw)]


def _attributes(raw: Any) -> Dict[str, List[str]]:
    if not isinstance(raw, Mapping):
        return {}
    out: Dict[str, List[str]] = {}
    for key in ERROR_ATTRIBUTES:
        if raw.get(key) is not None:
            out[key] = _values(raw[key])
    return out


def parse_error_payload(decoded: Any) -> ErrorShape:
    """Pick the error shape of a decoded failure body.

    `error` wins over the flat `message`/`errors` pair. Optional parts
    (`errors` and its keys) default to absent; required ones raise
    MissingFieldError.
    """
    if not isinstance(decoded, Mapping):
        raise MissingFieldError("message")

    error = decoded.get("error")
    if error is not None:
        if not isinstance(error, Mapping) or error.get("message") is None:
            raise MissingFieldError("error.message")
        if error.get("code") is None:
            raise MissingFieldError("error.code")
        return StructuredError(message=str(error["message"]), code=error["code"])

    if decoded.get("message") is None:
        raise MissingFieldError("message")
    return FlatError(message=str(decoded["message"]), errors=_attributes(decoded.get("errors")))


def format_error(shape: ErrorShape, status_code: int) -> str:
    if isinstance(shape, StructuredError):
        return f"{shape.message} ({shape.code})"

    message = f"{shape.message} ({status_code})"
    for key in ERROR_ATTRIBUTES:
        if key in shape.errors:
            message += "\n" + f"  {key}: " + ", ".join(shape.errors[key])
    return message
