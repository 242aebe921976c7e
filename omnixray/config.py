"""Configuration management for OmniXRay."""

import json
import os
from dataclasses import dataclass, field
from pathlib import Path

from omnixray.http import DEFAULT_TIMEOUT, DEFAULT_USER_AGENT, HttpxClient


DEFAULT_CONFIG_PATH = "~/.omnixray/config.json"

# Environment variables that override credentials from the config file
CREDENTIAL_ENV_VARS = {
    "youtube_api_key": "YOUTUBE_API_KEY",
    "youtube_api_referer": "YOUTUBE_API_REFERER",
}


@dataclass
class Config:
    """Application configuration."""

    credentials: dict[str, str] = field(default_factory=dict)
    http_timeout: float = DEFAULT_TIMEOUT
    user_agent: str = DEFAULT_USER_AGENT

    @classmethod
    def load(cls, path: str = DEFAULT_CONFIG_PATH) -> "Config":
        """Load config from a JSON file, or return defaults if not found."""
        config_path = Path(path).expanduser()

        if not config_path.exists():
            return cls()

        try:
            data = json.loads(config_path.read_text())
            return cls(
                credentials=dict(data.get("credentials", {})),
                http_timeout=float(data.get("http_timeout", DEFAULT_TIMEOUT)),
                user_agent=data.get("user_agent", DEFAULT_USER_AGENT),
            )
        except (json.JSONDecodeError, AttributeError, TypeError, ValueError):
            return cls()

    def save(self, path: str = DEFAULT_CONFIG_PATH) -> None:
        """Save config to a JSON file."""
        config_path = Path(path).expanduser()
        config_path.parent.mkdir(parents=True, exist_ok=True)

        data = {
            "credentials": self.credentials,
            "http_timeout": self.http_timeout,
            "user_agent": self.user_agent,
        }
        config_path.write_text(json.dumps(data, indent=2))

    def get_credentials(self) -> dict[str, str]:
        """Credentials from the config file, overridden by environment variables."""
        creds = dict(self.credentials)
        for key, env_var in CREDENTIAL_ENV_VARS.items():
            value = os.environ.get(env_var)
            if value:
                creds[key] = value
        return creds

    def create_http_client(self) -> HttpxClient:
        """Create the default HTTP client from this config."""
        return HttpxClient(timeout=self.http_timeout, user_agent=self.user_agent)
