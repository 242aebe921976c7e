"""Base protocol for format handlers.

A format handler turns a URL for one kind of site into a normalized h-entry.
It provides:
1. matches_host / matches - classify a URL without network access
2. fetch - call whatever APIs are needed and return the raw aggregate
3. parse - turn that raw aggregate into a normalized entry

Expected failures are returned as FetchError values, never raised.
"""

from abc import ABC, abstractmethod
from typing import Any

from omnixray.http import HTTPClient
from omnixray.models import FetchError, FetchResult, ParseResult, ResourceDescriptor


class Format(ABC):
    """Interface every format handler implements.

    Example:
        class MyFormat(Format):
            @property
            def name(self) -> str:
                return "my_site"

            def matches_host(self, url: str) -> bool:
                return urlparse(url).hostname == "mysite.com"

            def matches(self, url: str) -> ResourceDescriptor:
                ...

            def fetch(self, http, url, creds):
                return FetchResult(url=url, body=...)

            def parse(self, body, url):
                return ParseResult(data={...}, original=body)
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Unique identifier for this format, e.g. "youtube"."""
        pass

    @abstractmethod
    def matches_host(self, url: str) -> bool:
        """Return True if the URL's host belongs to this format."""
        pass

    @abstractmethod
    def matches(self, url: str) -> ResourceDescriptor:
        """Classify a URL into a resource descriptor.

        Returns a descriptor of kind UNKNOWN when the URL is not recognized.
        """
        pass

    @abstractmethod
    def fetch(
        self, http: HTTPClient, url: str, creds: dict[str, Any]
    ) -> FetchResult | FetchError:
        """Fetch the raw data needed to parse the URL.

        Args:
            http: HTTP client used for every upstream request.
            url: The URL being parsed.
            creds: Credentials bundle for this request.

        Returns:
            FetchResult with the aggregated body, or FetchError.
        """
        pass

    @abstractmethod
    def parse(self, body: str | None, url: str) -> ParseResult:
        """Normalize a fetched body into an h-entry."""
        pass


def error_result(
    description: str, code: int = 400, error: str = "unknown_error"
) -> FetchError:
    """Build an error value in the shape handlers return."""
    return FetchError(error=error, error_description=description, error_code=code)


def unknown_result(original: str | None = None) -> ParseResult:
    """The sentinel returned when a body cannot be normalized."""
    return ParseResult(data={"type": "unknown"}, original=original)
