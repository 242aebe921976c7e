"""HTTP client capability injected into format handlers.

Handlers never open connections themselves. They receive an ``HTTPClient``
and call ``get()``; the client owns timeouts, TLS and redirects.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field

import httpx

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0
DEFAULT_USER_AGENT = "Mozilla/5.0 (compatible; OmniXRay/0.1)"


@dataclass
class HTTPResponse:
    """Result of a single GET request."""

    code: int
    body: str
    headers: dict[str, str] = field(default_factory=dict)
    url: str = ""
    error: str | None = None  # Set for transport failures (code 0)


class HTTPClient(ABC):
    """Interface for the HTTP capability handlers depend on."""

    @abstractmethod
    def get(self, url: str, headers: dict[str, str] | None = None) -> HTTPResponse:
        """Issue a GET request.

        Args:
            url: Fully built URL, query string included.
            headers: Extra request headers.

        Returns:
            HTTPResponse. Non-2xx statuses are returned, not raised.
        """
        pass

    def close(self) -> None:
        """Release any connections held by the client."""
        pass

    def __enter__(self) -> "HTTPClient":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()


class HttpxClient(HTTPClient):
    """Default HTTP client backed by httpx."""

    def __init__(
        self,
        timeout: float = DEFAULT_TIMEOUT,
        user_agent: str = DEFAULT_USER_AGENT,
        client: httpx.Client | None = None,
    ):
        self.timeout = timeout
        self.user_agent = user_agent
        self._client = client

    @property
    def client(self) -> httpx.Client:
        if self._client is None:
            self._client = httpx.Client(
                timeout=self.timeout,
                follow_redirects=True,
                headers={"User-Agent": self.user_agent},
            )
        return self._client

    def get(self, url: str, headers: dict[str, str] | None = None) -> HTTPResponse:
        try:
            response = self.client.get(url, headers=headers or {})
        except httpx.HTTPError as e:
            logger.warning(f"GET {url} failed: {e}")
            return HTTPResponse(code=0, body=str(e), url=url, error="http_error")

        return HTTPResponse(
            code=response.status_code,
            body=response.text,
            headers=dict(response.headers),
            url=str(response.url),
        )

    def close(self) -> None:
        if self._client is not None:
            self._client.close()
            self._client = None
