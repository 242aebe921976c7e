"""FastAPI server exposing OmniXRay functionality."""

import logging
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, HTTPException, Query
from pydantic import BaseModel

from omnixray.config import Config
from omnixray.formats import YouTubeFormat
from omnixray.http import HTTPClient
from omnixray.models import FetchError

logger = logging.getLogger(__name__)


# =============================================================================
# Pydantic models for API
# =============================================================================


class MatchResponse(BaseModel):
    url: str
    host_matches: bool
    type: str
    id: str | None


class ParseResponse(BaseModel):
    url: str
    data: dict[str, Any]
    original: str | None = None


# =============================================================================
# App state
# =============================================================================


class AppState:
    config: Config
    http: HTTPClient
    youtube: YouTubeFormat


state = AppState()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialize and cleanup application state."""
    state.config = Config.load()
    state.youtube = YouTubeFormat()
    client = state.config.create_http_client()
    state.http = client

    yield
    client.close()


app = FastAPI(
    title="OmniXRay API",
    description="Normalize YouTube URLs into h-entries",
    version="0.1.0",
    lifespan=lifespan,
)


def _raise_for_error(result: FetchError) -> None:
    # Transport failures carry code 0; report them as a bad gateway
    status_code = result.error_code if result.error_code >= 400 else 502
    raise HTTPException(status_code=status_code, detail=result.to_dict())


# =============================================================================
# Routes
# =============================================================================


@app.get("/api/match", response_model=MatchResponse)
def match_url(url: str = Query(..., min_length=1, description="URL to classify")):
    """Classify a URL without calling the upstream API."""
    resource = state.youtube.matches(url)
    return MatchResponse(
        url=url,
        host_matches=state.youtube.matches_host(url),
        type=resource.kind.value,
        id=resource.id,
    )


@app.get("/api/parse", response_model=ParseResponse)
def parse_url(
    url: str = Query(..., min_length=1, description="YouTube video or playlist URL"),
    youtube_api_key: str | None = Query(None, description="Overrides the configured API key"),
    youtube_api_referer: str | None = Query(None, description="Referer sent to the API"),
):
    """Fetch a URL and return its normalized h-entry."""
    creds = state.config.get_credentials()
    if youtube_api_key:
        creds["youtube_api_key"] = youtube_api_key
    if youtube_api_referer:
        creds["youtube_api_referer"] = youtube_api_referer

    result = state.youtube.fetch(state.http, url, creds)
    if isinstance(result, FetchError):
        logger.info(f"Parse of {url} failed: {result.error}")
        _raise_for_error(result)

    parsed = state.youtube.parse(result.body, url)
    return ParseResponse(url=url, data=parsed.data, original=parsed.original)
