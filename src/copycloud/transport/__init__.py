"""Transport collaborators: HTTP execution and request signing."""

from .http import HttpRequest, HttpTransport, Transport
from .signing import OAuth1Signer, Signer

__all__ = ["HttpRequest", "HttpTransport", "Transport", "OAuth1Signer", "Signer"]
