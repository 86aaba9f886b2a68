from optin_client.client import ApiClient
from optin_client.responses import Action, RateLimit, ResponseEnvelope

__all__ = ["ApiClient", "Action", "RateLimit", "ResponseEnvelope"]
