from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple
from urllib.parse import urljoin

import requests


@dataclass(frozen=True)
class HttpResponse:
    """Fully received response, detached from the requests session."""
    status_code: int
    headers: Dict[str, str] = field(default_factory=dict)
    text: str = ""

    def get_header(self, name: str) -> Optional[str]:
        key = name.lower()
        for k, v in self.headers.items():
            if k.lower() == key:
                return v
        return None

    def body(self) -> str:
        return self.text

    @staticmethod
    def from_requests(r: Any) -> "HttpResponse":
        return HttpResponse(
            status_code=int(r.status_code),
            headers={str(k): str(v) for k, v in dict(r.headers).items()},
            text=r.text or "",
        )


class HttpClientError(Exception):
    pass


class HttpClient:
    """Minimal HTTP client around requests.Session.
    - Centralizes base_url handling and timeout
    - Single attempt per request; callers decide whether to try again
    """

    def __init__(
        self,
        base_url: str,
        *,
        timeout_sec: int = 10,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = base_url.rstrip("/") + "/"
        self.timeout_sec = int(timeout_sec)
        self.session = session or requests.Session()

    def build_url(self, path: str) -> str:
        path = path.lstrip("/")
        return urljoin(self.base_url, path)

    def request(
        self,
        method: str,
        path: str,
        *,
        headers: Optional[Dict[str, Any]] = None,
        params: Optional[Dict[str, Any]] = None,
        json_body: Optional[Dict[str, Any]] = None,
        data: Any = None,
        dry_run: bool = False,
    ) -> Tuple[str, Optional[HttpResponse]]:
        """Perform an HTTP request.
        Returns (url, response).
        If dry_run=True, does not send the request and returns (url, None).
        """
        url = self.build_url(path)
        if dry_run:
            return url, None

        try:
            r = self.session.request(
                method=method.upper(),
                url=url,
                headers=headers or {},
                params=params,
                json=json_body,
                data=data,
                timeout=self.timeout_sec,
            )
        except requests.RequestException as e:
            raise HttpClientError(f"HTTP request failed: {e}") from e
        return url, HttpResponse.from_requests(r)
