from __future__ import annotations

import json
import os
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import TYPE_CHECKING, Any, Dict, Optional

if TYPE_CHECKING:
    from optin_client.responses.envelope import ResponseEnvelope


def new_run_id() -> str:
    """Create a unique id for one client session."""
    return uuid.uuid4().hex


def _utc_iso() -> str:
    return datetime.now(timezone.utc).replace(microsecond=0).isoformat()


@dataclass
class EventLogger:
    """
    Append-only JSONL log of API exchanges, one line per request.

    response record:
    {
      "run_id": "...", "ts": "2026-10-18T01:23:45+00:00", "event": "response",
      "method": "GET", "path": "/api/actions", "status_code": 422, "fails": true,
      "content_type": "application/json",
      "rate_limit": {"limit": 60, "remaining": 0, "reset": 1760000000}
    }

    error record (transport failure, no response):
    {"run_id": "...", "ts": "...", "event": "error", "method": "GET",
     "path": "/api/actions", "error": "HttpClientError", "detail": "..."}
    """
    log_path: Path
    run_id: str = field(default_factory=new_run_id)

    def __post_init__(self) -> None:
        self.log_path = Path(self.log_path)

    def log_response(
        self,
        envelope: "ResponseEnvelope",
        *,
        method: str,
        path: str,
        ts: Optional[str] = None,
    ) -> Dict[str, Any]:
        limiter = envelope.limiter()
        return self._append({
            "run_id": self.run_id,
            "ts": ts or _utc_iso(),
            "event": "response",
            "method": method.upper(),
            "path": path,
            "status_code": envelope.status_code,
            "fails": envelope.fails(),
            "content_type": envelope.content_type,
            "rate_limit": limiter.to_dict() if limiter.known else None,
        })

    def log_error(
        self,
        error: BaseException,
        *,
        method: str,
        path: str,
        ts: Optional[str] = None,
    ) -> Dict[str, Any]:
        return self._append({
            "run_id": self.run_id,
            "ts": ts or _utc_iso(),
            "event": "error",
            "method": method.upper(),
            "path": path,
            "error": type(error).__name__,
            "detail": str(error),
        })

    def _append(self, rec: Dict[str, Any]) -> Dict[str, Any]:
        self.log_path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.log_path, "a", encoding="utf-8", newline="\n") as f:
            f.write(json.dumps(rec, ensure_ascii=False) + "\n")
            f.flush()
            os.fsync(f.fileno())
        return rec
