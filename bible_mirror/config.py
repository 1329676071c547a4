"""Configuration management for bible-mirror."""

import json
import logging
import os
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Optional

from bible_mirror.errors import ConfigurationError

logger = logging.getLogger(__name__)

CONFIG_DIR = Path.home() / ".config" / "bible-mirror"
CONFIG_FILE = CONFIG_DIR / "config.json"

API_KEY_ENV = "BIBLE_API_KEY"

SOURCES = ("getbible", "apibible")
SYNC_BACKENDS = ("auto", "broadcast", "storage")


@dataclass
class Config:
    """Application configuration."""

    source: str = "getbible"
    api_key: str = ""
    getbible_url: str = "https://api.getbible.net/v2"
    api_bible_url: str = "https://rest.api.bible/v1"
    request_timeout: float = 15.0
    channel_name: str = "bible_app"
    sync_backend: str = "auto"
    mirror_snapshot: bool = True
    scroll_settle_delay: float = 0.3
    highlight_duration: float = 2.0
    poll_interval: float = 0.5
    log_level: str = "WARNING"
    data_dir: str = str(CONFIG_DIR)

    @classmethod
    def load(cls, path: Optional[Path] = None) -> "Config":
        """Load config from file, or return defaults."""
        path = path or CONFIG_FILE
        config = cls()
        if path.exists():
            try:
                with open(path, encoding="utf-8") as f:
                    data = json.load(f)
                known = {f.name for f in fields(cls)}
                config = cls(**{k: v for k, v in data.items() if k in known})
            except (json.JSONDecodeError, OSError, TypeError, AttributeError) as exc:
                logger.warning("Ignoring unreadable config %s: %s", path, exc)
                config = cls()

        env_key = os.environ.get(API_KEY_ENV)
        if env_key:
            config.api_key = env_key
        config._normalize()
        return config

    def save(self, path: Optional[Path] = None) -> None:
        """Save config to file."""
        path = path or CONFIG_FILE
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(asdict(self), f, indent=2)

    def _normalize(self) -> None:
        """Reset invalid enumerated values to their defaults."""
        if self.source not in SOURCES:
            logger.warning("Unknown source %r, using getbible", self.source)
            self.source = "getbible"
        if self.sync_backend not in SYNC_BACKENDS:
            logger.warning("Unknown sync backend %r, using auto", self.sync_backend)
            self.sync_backend = "auto"

    @property
    def data_path(self) -> Path:
        return Path(self.data_dir).expanduser()

    @property
    def store_file(self) -> Path:
        """JSON file holding preferences, bookmarks and history."""
        return self.data_path / "storage.json"

    def require_api_key(self) -> str:
        """Return the API.Bible key or raise ConfigurationError."""
        if not self.api_key:
            raise ConfigurationError(
                f"Bible API key not configured. Set {API_KEY_ENV} or add "
                f'"api_key" to {CONFIG_FILE}'
            )
        return self.api_key


def get_config(path: Optional[Path] = None) -> Config:
    """Get the application config."""
    return Config.load(path)
