from __future__ import annotations

import json
import threading
from typing import Any, Callable, Dict, List, Mapping, Optional, Protocol

from optin_client.responses.action import Action
from optin_client.responses.errors import DecodeError, MissingFieldError, NoResultError
from optin_client.responses.payload import Data, Many, Single, format_error, parse_error_payload, resolve_data
from optin_client.responses.rate_limit import RateLimit

JSON_CONTENT_TYPE = "application/json"


class ResponseSnapshot(Protocol):
    status_code: int
    headers: Mapping[str, str]

    def get_header(self, name: str) -> Optional[str]: ...

    def body(self) -> str: ...


_UNRESOLVED = object()


class _DecodeCell:
    """Compute-once holder for the decoded body.

    States: unresolved -> resolved(value) | resolved(None) | failed(exc).
    The first access runs `compute`; every later access returns the same
    result, or raises a new DecodeError chained to the original parse error.
    """

    def __init__(self, compute: Callable[[], Any]):
        self._compute = compute
        self._value: Any = _UNRESOLVED
        self._error: Optional[DecodeError] = None
        self._lock = threading.Lock()

    @property
    def resolved(self) -> bool:
        return self._value is not _UNRESOLVED or self._error is not None

    def get(self) -> Any:
        if not self.resolved:
            with self._lock:
                if not self.resolved:
                    try:
                        self._value = self._compute()
                    except DecodeError as e:
                        self._error = e
        if self._error is not None:
            raise DecodeError(str(self._error)) from self._error.__cause__
        return self._value


class ResponseEnvelope:
    """Interpretation of one completed HTTP exchange with the opt-in API.

    Success bodies look like {"data": ..., "meta": ...}; failure bodies carry
    either {"error": {"message", "code"}} or {"message", "errors": {...}}.
    The body is decoded lazily, only when served as exactly application/json.
    """

    def __init__(self, response: ResponseSnapshot):
        self._status_code = int(response.status_code)
        self._headers: Dict[str, str] = dict(response.headers or {})
        self._content_type = str(response.get_header("content-type") or "")
        self._response = response
        self._limiter = RateLimit.from_headers(self._headers)
        self._decoded = _DecodeCell(self._decode)

    def _decode(self) -> Any:
        # exact match only: "application/json; charset=utf-8" is not decoded
        if self._content_type != JSON_CONTENT_TYPE:
            return None
        text = self._response.body()
        try:
            return json.loads(text)
        except ValueError as e:
            raise DecodeError(f"Response body is not valid JSON: {e}") from e

    def decoded(self) -> Optional[Any]:
        return self._decoded.get()

    def _field(self, name: str) -> Any:
        decoded = self.decoded()
        if decoded is None:
            raise NoResultError()
        if not isinstance(decoded, Mapping) or name not in decoded:
            raise MissingFieldError(name)
        return decoded[name]

    @property
    def status_code(self) -> int:
        return self._status_code

    @property
    def headers(self) -> Dict[str, str]:
        return dict(self._headers)

    @property
    def content_type(self) -> str:
        return self._content_type

    def limiter(self) -> RateLimit:
        return self._limiter

    def fails(self) -> bool:
        return self._status_code >= 300

    def data(self) -> Any:
        return self._field("data")

    def meta(self) -> Any:
        return self._field("meta")

    def resolved_data(self) -> Data:
        return resolve_data(self.data())

    def all(self) -> List[Action]:
        resolved = self.resolved_data()
        if isinstance(resolved, Single):
            return [Action.from_object(resolved.record)]
        return [Action.from_object(r) for r in resolved.records]

    def action(self) -> Optional[Action]:
        """Single action, or None when the server returned a list."""
        resolved = self.resolved_data()
        if isinstance(resolved, Many):
            return None
        return Action.from_object(resolved.record)

    def error_message(self) -> str:
        decoded = self.decoded()
        if decoded is None:
            raise NoResultError()
        return format_error(parse_error_payload(decoded), self._status_code)

    def __repr__(self) -> str:
        return f"ResponseEnvelope(status_code={self._status_code}, content_type={self._content_type!r})"
