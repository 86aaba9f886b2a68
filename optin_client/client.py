from __future__ import annotations

from typing import Any, Dict, Optional

from optin_client.core.event_logger import EventLogger
from optin_client.core.http_client import HttpClient, HttpClientError
from optin_client.core.settings import Settings
from optin_client.responses.envelope import ResponseEnvelope


class ApiClient:
    """Sends requests to the opt-in API and wraps each reply in a ResponseEnvelope.

    Every exchange is appended to the event log when a logger is configured.
    """

    def __init__(
        self,
        settings: Settings,
        http: Optional[HttpClient] = None,
        event_logger: Optional[EventLogger] = None,
    ):
        self.s = settings
        self.http = http or HttpClient(settings.base_url, timeout_sec=settings.optin_http_timeout_sec)
        self.events = event_logger

    @staticmethod
    def from_settings(settings: Settings) -> "ApiClient":
        return ApiClient(settings, event_logger=EventLogger(log_path=settings.event_log_path))

    def default_headers(self) -> Dict[str, str]:
        headers = {"Accept": "application/json"}
        if self.s.optin_api_token:
            headers["Authorization"] = f"Bearer {self.s.optin_api_token}"
        return headers

    def send(
        self,
        method: str,
        path: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        json_body: Optional[Dict[str, Any]] = None,
    ) -> ResponseEnvelope:
        try:
            _, resp = self.http.request(
                method,
                path,
                headers=self.default_headers(),
                params=params,
                json_body=json_body,
            )
        except HttpClientError as e:
            if self.events is not None:
                self.events.log_error(e, method=method, path=path)
            raise

        assert resp is not None
        envelope = ResponseEnvelope(resp)
        if self.events is not None:
            self.events.log_response(envelope, method=method, path=path)
        return envelope
