"""Shared fixtures: a fake HTTP client and canned YouTube API responses."""

import json
from urllib.parse import parse_qs, urlparse

import pytest

from omnixray.formats import YouTubeFormat
from omnixray.http import HTTPClient, HTTPResponse


class FakeHTTP(HTTPClient):
    """Replays canned responses keyed by API endpoint and records every call."""

    def __init__(self, responses: dict[str, HTTPResponse] | None = None):
        self.responses = dict(responses or {})
        self.calls: list[tuple[str, dict[str, str]]] = []
        self.closed = False

    def get(self, url, headers=None):
        self.calls.append((url, dict(headers or {})))
        endpoint = urlparse(url).path.rsplit("/", 1)[-1]
        if endpoint not in self.responses:
            return HTTPResponse(code=404, body=f"no canned response for {endpoint}", url=url)
        return self.responses[endpoint]

    def close(self):
        self.closed = True

    @property
    def endpoints(self) -> list[str]:
        return [urlparse(url).path.rsplit("/", 1)[-1] for url, _ in self.calls]

    def params(self, index: int) -> dict[str, str]:
        """Query parameters of the nth call, single-valued."""
        query = parse_qs(urlparse(self.calls[index][0]).query)
        return {key: values[-1] for key, values in query.items()}


def ok(payload: dict) -> HTTPResponse:
    return HTTPResponse(code=200, body=json.dumps(payload))


VIDEO_ITEM = {
    "id": "abc123",
    "snippet": {
        "publishedAt": "2024-01-15T12:00:00Z",
        "channelId": "chXYZ",
        "title": "Test Video",
        "description": "A video about testing.",
        "channelTitle": "Test Channel",
        "tags": ["testing", "python"],
        "thumbnails": {
            "default": {"url": "https://i.ytimg.com/vi/abc123/default.jpg"},
            "high": {"url": "https://i.ytimg.com/vi/abc123/hqdefault.jpg"},
            "standard": {"url": "https://i.ytimg.com/vi/abc123/sddefault.jpg"},
            "maxres": {"url": "https://i.ytimg.com/vi/abc123/maxresdefault.jpg"},
        },
    },
}

SECOND_VIDEO_ITEM = {
    "id": "def456",
    "snippet": {
        "publishedAt": "2024-02-01T08:30:00Z",
        "channelId": "chOTHER",
        "title": "Second Video",
        "description": "Another one.",
        "thumbnails": {},
    },
}

CHANNEL_ITEM = {
    "id": "chXYZ",
    "snippet": {
        "title": "Test Channel",
        "description": "A channel.",
        "thumbnails": {
            "default": {"url": "https://yt3.ggpht.com/default.jpg"},
            "high": {"url": "https://yt3.ggpht.com/high.jpg"},
        },
    },
}

PLAYLIST_ITEM = {
    "id": "PLtest",
    "snippet": {
        "publishedAt": "2023-06-01T00:00:00Z",
        "channelId": "chXYZ",
        "title": "Test Playlist",
        "description": "A playlist.",
    },
}

PLAYLIST_ITEMS = {
    "items": [
        {"id": "item1", "snippet": {"resourceId": {"kind": "youtube#video", "videoId": "abc123"}}},
        {"id": "item2", "snippet": {"resourceId": {"kind": "youtube#video", "videoId": "def456"}}},
    ]
}


@pytest.fixture
def youtube():
    return YouTubeFormat()


@pytest.fixture
def creds():
    return {"youtube_api_key": "K"}


@pytest.fixture
def video_http():
    """Upstream that knows one video and its channel."""
    return FakeHTTP({
        "videos": ok({"items": [VIDEO_ITEM]}),
        "channels": ok({"items": [CHANNEL_ITEM]}),
    })


@pytest.fixture
def playlist_http():
    """Upstream that knows a two-video playlist across two channels."""
    return FakeHTTP({
        "playlists": ok({"items": [PLAYLIST_ITEM]}),
        "playlistItems": ok(PLAYLIST_ITEMS),
        "videos": ok({"items": [VIDEO_ITEM, SECOND_VIDEO_ITEM]}),
        "channels": ok({"items": [CHANNEL_ITEM, {"id": "chOTHER", "snippet": {"title": "Other"}}]}),
    })


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep real credentials in the environment out of tests."""
    monkeypatch.delenv("YOUTUBE_API_KEY", raising=False)
    monkeypatch.delenv("YOUTUBE_API_REFERER", raising=False)
