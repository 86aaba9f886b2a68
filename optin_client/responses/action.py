from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Mapping, Optional


def _parse_time(v: Any) -> Optional[datetime]:
    if v is None or v == "":
        return None
    s = str(v).strip()
    try:
        return datetime.strptime(s, "%Y-%m-%d %H:%M:%S")
    except ValueError:
        pass
    try:
        return datetime.fromisoformat(s.replace("Z", "+00:00"))
    except ValueError:
        return None


def _opt_str(v: Any) -> Optional[str]:
    return None if v is None else str(v)


@dataclass(frozen=True)
class Action:
    """One logged opt-in action (register, confirm, blacklist, ...)."""
    hash: Optional[str] = None
    scope: Optional[str] = None
    action: Optional[str] = None
    data: Any = None
    ip: Optional[str] = None
    useragent: Optional[str] = None
    created_at: Optional[datetime] = None
    raw: Dict[str, Any] = field(default_factory=dict, compare=False, repr=False)

    @staticmethod
    def from_object(obj: Any) -> "Action":
        # `data: null` from the server is an action with no fields set
        if obj is None:
            return Action()
        if not isinstance(obj, Mapping):
            raise ValueError(f"Action record must be an object, got {type(obj).__name__}")
        return Action(
            hash=_opt_str(obj.get("hash")),
            scope=_opt_str(obj.get("scope")),
            action=_opt_str(obj.get("action")),
            data=obj.get("data"),
            ip=_opt_str(obj.get("ip")),
            useragent=_opt_str(obj.get("useragent")),
            created_at=_parse_time(obj.get("created_at")),
            raw=dict(obj),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "hash": self.hash,
            "scope": self.scope,
            "action": self.action,
            "data": self.data,
            "ip": self.ip,
            "useragent": self.useragent,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
