"""Request signers producing the ``Authorization`` header."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from oauthlib.oauth1 import SIGNATURE_HMAC, Client

if TYPE_CHECKING:
    from copycloud.config.config import CloudApiConfig


class Signer(ABC):
    @abstractmethod
    def sign(self, method: str, url: str) -> str:
        """Return the Authorization header value for ``method`` on ``url``."""
        pass


class OAuth1Signer(Signer):
    """
    OAuth 1.0a HMAC-SHA1 signer.

    Only the method and the full target URL are signed; request bodies are
    binary or JSON and never contribute parameters.
    """

    def __init__(
        self,
        consumer_key: str,
        consumer_secret: str,
        access_token: str,
        token_secret: str,
    ) -> None:
        self._client = Client(
            consumer_key,
            client_secret=consumer_secret,
            resource_owner_key=access_token,
            resource_owner_secret=token_secret,
            signature_method=SIGNATURE_HMAC,
        )

    @classmethod
    def from_config(cls, config: "CloudApiConfig") -> "OAuth1Signer":
        if not config.has_credentials:
            raise ValueError(
                "OAuth credentials missing: consumer_key, consumer_secret, "
                "access_token and token_secret are all required"
            )
        return cls(
            config.consumer_key,
            config.consumer_secret,
            config.access_token,
            config.token_secret,
        )

    def sign(self, method: str, url: str) -> str:
        _, headers, _ = self._client.sign(url, http_method=method)
        return headers["Authorization"]


__all__ = ["Signer", "OAuth1Signer"]
