from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional

HEADER_LIMIT = "x-ratelimit-limit"
HEADER_REMAINING = "x-ratelimit-remaining"
HEADER_RESET = "x-ratelimit-reset"


def _to_int(v: Any) -> Optional[int]:
    if isinstance(v, (list, tuple)):
        v = v[0] if v else None
    if v is None:
        return None
    try:
        return int(str(v).strip())
    except ValueError:
        return None


@dataclass(frozen=True)
class RateLimit:
    """Request quota as reported by the X-RateLimit-* response headers.

    Any header that is missing or not an integer is left as None.
    """
    limit: Optional[int] = None
    remaining: Optional[int] = None
    reset: Optional[int] = None  # unix epoch seconds

    @staticmethod
    def from_headers(headers: Mapping[str, Any]) -> "RateLimit":
        lowered = {str(k).lower(): v for k, v in (headers or {}).items()}
        return RateLimit(
            limit=_to_int(lowered.get(HEADER_LIMIT)),
            remaining=_to_int(lowered.get(HEADER_REMAINING)),
            reset=_to_int(lowered.get(HEADER_RESET)),
        )

    @property
    def known(self) -> bool:
        return self.limit is not None or self.remaining is not None

    def exceeded(self) -> bool:
        return self.remaining is not None and self.remaining <= 0

    def to_dict(self) -> Dict[str, Optional[int]]:
        return {"limit": self.limit, "remaining": self.remaining, "reset": self.reset}
