"""YouTube format using the Data API.

Supports:
- Videos: youtu.be/ID, youtube.com/watch?v=ID, /embed/ID, /v/ID
- Playlists: youtube.com/playlist?list=ID, /embed/videoseries?list=ID
"""

import json
import logging
import re
from dataclasses import dataclass, field
from typing import Any
from urllib.parse import ParseResult as URLParts, parse_qs, urlencode, urlparse

from omnixray.formats.base import Format, error_result, unknown_result
from omnixray.http import HTTPClient
from omnixray.models import (
    UNKNOWN_RESOURCE,
    ApiEnvelope,
    AuthorCard,
    FetchError,
    FetchResult,
    MediaLink,
    NormalizedEntry,
    ParseResult,
    ResourceDescriptor,
    ResourceKind,
)

logger = logging.getLogger(__name__)


# YouTube Data API v3 endpoints
YOUTUBE_API_BASE = "https://www.googleapis.com/youtube/v3/"

# Playlist members fetched per feed URL
PLAYLIST_MAX_RESULTS = 15

HOST_PATTERN = re.compile(r"^((m|www)\.)?youtu(be\.com|\.be)$", re.IGNORECASE)

WATCH_URL = "https://www.youtube.com/watch?v={id}"
EMBED_URL = "https://www.youtube.com/embed/{id}"
CHANNEL_URL = "https://www.youtube.com/channel/{id}"
CUSTOM_URL = "https://www.youtube.com/{custom_url}"


class YouTubeAPIError(Exception):
    """Raised inside a fetch to abort it; converted to a FetchError value."""

    def __init__(self, result: FetchError):
        super().__init__(result.error_description)
        self.result = result


@dataclass(frozen=True)
class FetchContext:
    """Everything one fetch needs to talk to the API."""

    http: HTTPClient
    api_key: str
    headers: dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_creds(cls, http: HTTPClient, creds: dict[str, Any]) -> "FetchContext":
        headers = {}
        if creds.get("youtube_api_referer"):
            headers["Referer"] = creds["youtube_api_referer"]
        return cls(http=http, api_key=creds["youtube_api_key"], headers=headers)


def _last_param(query: dict[str, list[str]], name: str) -> str | None:
    values = query.get(name)
    return values[-1] if values else None


def _safe_urlparse(url: str) -> URLParts | None:
    """urlparse that returns None for malformed URLs, e.g. an unclosed IPv6 bracket."""
    try:
        parsed = urlparse(url)
        parsed.hostname
    except ValueError:
        return None
    return parsed


def _youtube_error(description: str, code: int = 400) -> FetchError:
    return error_result(description, code, "youtube_error")


def _as_dict(value: Any) -> dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _items(data: dict[str, Any], endpoint: str) -> list[dict[str, Any]]:
    """The dict items of a list response. A missing or null list counts as empty."""
    items = data.get("items") or []
    if not isinstance(items, list):
        raise YouTubeAPIError(
            _youtube_error(f"YouTube API returned an unexpected response from {endpoint}", 502)
        )
    return [item for item in items if isinstance(item, dict)]


class YouTubeFormat(Format):
    """Format handler for YouTube videos and playlists.

    Requires a YouTube Data API key in the credentials bundle under
    ``youtube_api_key``. An optional ``youtube_api_referer`` is sent as the
    Referer header, for keys restricted by HTTP referrer.
    """

    @property
    def name(self) -> str:
        return "youtube"

    def matches_host(self, url: str) -> bool:
        parsed = _safe_urlparse(url)
        host = parsed.hostname if parsed else None
        if not host:
            return False
        return HOST_PATTERN.match(host) is not None

    def matches(self, url: str) -> ResourceDescriptor:
        if not self.matches_host(url):
            return UNKNOWN_RESOURCE

        parsed = _safe_urlparse(url)
        host = parsed.hostname.lower()
        path = parsed.path.strip("/").split("/")
        head = path[0]
        tail = path[1] if len(path) > 1 else ""
        query = parse_qs(parsed.query)

        # Playlists: /embed/videoseries?list={ID} and /playlist?list={ID}
        playlist_id = _last_param(query, "list")
        if playlist_id and ((head == "embed" and tail == "videoseries") or head == "playlist"):
            return ResourceDescriptor(kind=ResourceKind.FEED, id=playlist_id)

        video_id = None
        # Short link: youtu.be/{ID}
        if host == "youtu.be" and head:
            video_id = head
        # /v/{ID} and /embed/{ID}
        if head in ("v", "embed") and tail:
            video_id = tail
        # ?v={ID} wins over anything in the path
        if _last_param(query, "v"):
            video_id = _last_param(query, "v")

        if video_id:
            return ResourceDescriptor(kind=ResourceKind.ENTRY, id=video_id)
        return UNKNOWN_RESOURCE

    def fetch(
        self, http: HTTPClient, url: str, creds: dict[str, Any]
    ) -> FetchResult | FetchError:
        if not creds.get("youtube_api_key"):
            return error_result(
                "YouTube credentials must be included in the request",
                400,
                "missing_parameters",
            )

        resource = self.matches(url)
        if not resource.is_known:
            return error_result("This YouTube URL is not supported", 400, "unsupported_url")

        logger.info(f"Fetching YouTube {resource.kind.value} {resource.id}")
        ctx = FetchContext.from_creds(http, creds)

        try:
            aggregate = self._collect(ctx, resource)
        except YouTubeAPIError as e:
            logger.warning(f"YouTube fetch for {url} failed: {e}")
            return e.result

        return FetchResult(url=url, body=json.dumps(aggregate), code=200)

    def _collect(self, ctx: FetchContext, resource: ResourceDescriptor) -> dict[str, Any]:
        """Run the API calls for a resource and aggregate the snippets."""
        aggregate: dict[str, Any] = {}
        channel_ids: list[str] = []
        video_ids: list[str] = []

        if resource.kind is ResourceKind.FEED:
            playlist = self._get_playlist(ctx, resource.id)
            aggregate["feed"] = playlist
            if isinstance(playlist.get("channelId"), str):
                channel_ids.append(playlist["channelId"])
            video_ids = self._get_playlist_video_ids(ctx, resource.id)
        else:
            video_ids = [resource.id]

        videos = []
        if video_ids:
            videos = self._get_snippets(ctx, "videos", {"id": ",".join(video_ids)})
            channel_ids.extend(video["channelId"] for video in videos if isinstance(video.get("channelId"), str))
        aggregate["videos"] = videos

        channels = []
        if channel_ids:
            unique_ids = list(dict.fromkeys(channel_ids))
            channels = self._get_snippets(ctx, "channels", {
                "id": ",".join(unique_ids),
                "maxResults": len(unique_ids),
            })
        aggregate["channels"] = channels

        logger.info(f"Fetched {len(videos)} videos and {len(channels)} channels")
        return aggregate

    def _get_playlist(self, ctx: FetchContext, playlist_id: str) -> dict[str, Any]:
        """Get playlist metadata; exactly one playlist must come back."""
        playlists = self._get_snippets(ctx, "playlists", {"id": playlist_id})
        if len(playlists) != 1:
            raise YouTubeAPIError(_youtube_error("YouTube API did not return a playlist."))
        return playlists[0]

    def _get_playlist_video_ids(self, ctx: FetchContext, playlist_id: str) -> list[str]:
        data = self._api_json(ctx, "playlistItems", {
            "playlistId": playlist_id,
            "maxResults": PLAYLIST_MAX_RESULTS,
        })
        video_ids = []
        for item in _items(data, "playlistItems"):
            resource_id = _as_dict(_as_dict(item.get("snippet")).get("resourceId"))
            video_id = resource_id.get("videoId")
            if video_id and isinstance(video_id, str):
                video_ids.append(video_id)
        return video_ids

    def _get_snippets(
        self, ctx: FetchContext, endpoint: str, params: dict[str, Any]
    ) -> list[dict[str, Any]]:
        """Fetch a list endpoint and return each item's snippet tagged with its id."""
        data = self._api_json(ctx, endpoint, params)
        snippets = []
        for item in _items(data, endpoint):
            if not item.get("id"):
                logger.warning(f"Skipping {endpoint} item without an id")
                continue
            snippet = dict(_as_dict(item.get("snippet")))
            snippet["id"] = item["id"]
            snippets.append(snippet)
        return snippets

    def _api_json(
        self, ctx: FetchContext, endpoint: str, params: dict[str, Any]
    ) -> dict[str, Any]:
        envelope = self._api_request(ctx, endpoint, params)
        if envelope.error:
            raise YouTubeAPIError(_youtube_error(envelope.body, envelope.status_code))

        try:
            data = json.loads(envelope.body)
        except ValueError as e:
            raise YouTubeAPIError(
                _youtube_error(f"YouTube API returned invalid JSON from {endpoint}", 502)
            ) from e
        if not isinstance(data, dict):
            raise YouTubeAPIError(
                _youtube_error(f"YouTube API returned an unexpected response from {endpoint}", 502)
            )
        return data

    def _api_request(
        self, ctx: FetchContext, endpoint: str, params: dict[str, Any]
    ) -> ApiEnvelope:
        query = {"key": ctx.api_key, "part": "snippet", **params}
        logger.debug(f"GET {endpoint} {params}")

        response = ctx.http.get(f"{YOUTUBE_API_BASE}{endpoint}?{urlencode(query)}", ctx.headers)
        if 200 <= response.code < 300:
            return ApiEnvelope(status_code=response.code, body=response.body)

        logger.warning(f"YouTube API {endpoint} returned {response.code}")
        return ApiEnvelope(status_code=response.code, body=response.body, error=True)

    def parse(self, body: str | None, url: str) -> ParseResult:
        try:
            data = json.loads(body) if body else None
        except (TypeError, ValueError):
            logger.warning(f"Could not decode YouTube response for {url}")
            data = None

        if not isinstance(data, dict) or not data:
            return unknown_result(body)

        videos = data.get("videos") or []
        channels = data.get("channels") or []
        if not videos or not channels:
            return unknown_result(body)

        # Only the first video and channel are normalized, even for playlists
        try:
            entry = self._build_entry(videos[0], channels[0])
        except (KeyError, TypeError, AttributeError) as e:
            logger.warning(f"Malformed YouTube aggregate for {url}: {e!r}")
            return unknown_result(body)
        return ParseResult(data=entry.to_dict(), original=body)

    def _build_entry(self, video: dict[str, Any], channel: dict[str, Any]) -> NormalizedEntry:
        author_url = CHANNEL_URL.format(id=channel["id"])
        if channel.get("customUrl"):
            author_url = CUSTOM_URL.format(custom_url=channel["customUrl"])

        author = AuthorCard(
            name=channel.get("title", ""),
            photo=channel.get("thumbnails", {}).get("high", {}).get("url"),
            url=author_url,
        )

        entry = NormalizedEntry(
            name=video.get("title", ""),
            content=video.get("description", ""),
            url=WATCH_URL.format(id=video["id"]),
            published=video.get("publishedAt", ""),
            author=author,
            video=[MediaLink(url=EMBED_URL.format(id=video["id"]))],
        )

        if video.get("tags"):
            entry.category = list(video["tags"])

        thumbnails = video.get("thumbnails", {})
        thumb = thumbnails.get("maxres") or thumbnails.get("standard")
        if thumb and thumb.get("url"):
            entry.photo = [thumb["url"]]

        return entry
