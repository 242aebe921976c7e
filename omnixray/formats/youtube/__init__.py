"""YouTube format.

Supports:
- Single videos (youtu.be/..., youtube.com/watch?v=..., /embed/..., /v/...)
- Playlists (youtube.com/playlist?list=..., /embed/videoseries?list=...)
- Fetches metadata via YouTube Data API v3

Requires:
- youtube_api_key in the credentials bundle
"""

from omnixray.formats.youtube.adapter import FetchContext, YouTubeFormat

__all__ = ["FetchContext", "YouTubeFormat"]
