"""Core data models for OmniXRay."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ResourceKind(Enum):
    """What a URL points at, derived from its structure alone."""
    ENTRY = "entry"      # A single video
    FEED = "feed"        # A playlist
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class ResourceDescriptor:
    """Classification of a URL into a resource kind and identifier."""
    kind: ResourceKind
    id: str | None = None

    @property
    def is_known(self) -> bool:
        return self.kind is not ResourceKind.UNKNOWN

    def to_dict(self) -> dict[str, Any]:
        if self.id is None:
            return {"type": self.kind.value}
        return {"type": self.kind.value, "id": self.id}


UNKNOWN_RESOURCE = ResourceDescriptor(kind=ResourceKind.UNKNOWN)


@dataclass
class ApiEnvelope:
    """Uniform result of a single upstream API call."""
    status_code: int
    body: str
    error: bool = False


@dataclass
class AuthorCard:
    """The h-card describing who published an entry."""
    name: str
    photo: str | None
    url: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": "card",
            "name": self.name,
            "photo": self.photo,
            "url": self.url,
        }


@dataclass
class MediaLink:
    """An embeddable media reference attached to an entry."""
    url: str
    content_type: str = "text/html"

    def to_dict(self) -> dict[str, Any]:
        return {"content-type": self.content_type, "url": self.url}


@dataclass
class NormalizedEntry:
    """A normalized h-entry built from upstream metadata."""
    name: str
    content: str
    url: str
    published: str
    author: AuthorCard
    video: list[MediaLink] = field(default_factory=list)
    category: list[str] | None = None  # Omitted from output when None
    photo: list[str] | None = None     # Omitted from output when None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "type": "entry",
            "name": self.name,
            "content": self.content,
            "url": self.url,
            "published": self.published,
            "video": [link.to_dict() for link in self.video],
            "author": self.author.to_dict(),
        }
        if self.category is not None:
            data["category"] = list(self.category)
        if self.photo is not None:
            data["photo"] = list(self.photo)
        return data


# =============================================================================
# Transport results
# =============================================================================


@dataclass
class FetchResult:
    """Successful fetch: the aggregated upstream JSON for one URL."""
    url: str
    body: str
    code: int = 200

    @property
    def ok(self) -> bool:
        return True

    def to_dict(self) -> dict[str, Any]:
        return {"url": self.url, "body": self.body, "code": self.code}


@dataclass
class FetchError:
    """Failed fetch, returned as a value rather than raised."""
    error: str
    error_description: str
    error_code: int = 400

    @property
    def ok(self) -> bool:
        return False

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": self.error,
            "error_description": self.error_description,
            "error_code": self.error_code,
        }


@dataclass
class ParseResult:
    """Output of a parse: the normalized data plus the raw body it came from."""
    data: dict[str, Any]
    original: str | None

    @property
    def is_unknown(self) -> bool:
        return self.data.get("type") == "unknown"

    def to_dict(self) -> dict[str, Any]:
        return {"data": self.data, "original": self.original}
