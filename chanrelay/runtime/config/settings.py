"""Relay settings -- reads from a ``.env`` file with environment fallback."""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path
from typing import ClassVar

from ..util.env_file import EnvFile
from ..util.singletons import register_singleton

logger = logging.getLogger(__name__)

DEFAULT_PORT = 3000
DEFAULT_MAX_REQUEST_MB = 50
DEFAULT_VIDEO_MAX_WIDTH = 1280


class Settings:

    _DATA_DIR_ENV: ClassVar[str] = "CHANRELAY_DATA_DIR"

    def __init__(self) -> None:
        dotenv = os.getenv("DOTENV_PATH")
        if not dotenv:
            data_dir = os.getenv(self._DATA_DIR_ENV)
            dotenv = str(Path(data_dir) / ".env") if data_dir else ".env"
        self.env = EnvFile(dotenv)
        self.reload()

    def reload(self) -> None:
        e = self._read

        self.host: str = e("HOST") or "0.0.0.0"
        self.port: int = self._read_int("PORT", DEFAULT_PORT)
        self.api_secret: str = e("RELAY_API_SECRET")
        self.max_request_mb: int = self._read_int("MAX_REQUEST_MB", DEFAULT_MAX_REQUEST_MB)

        self.ffmpeg_path: str = e("FFMPEG_PATH") or "ffmpeg"
        self.transcode_dir: Path = Path(e("TRANSCODE_DIR") or tempfile.gettempdir())
        self.video_max_width: int = self._read_int("VIDEO_MAX_WIDTH", DEFAULT_VIDEO_MAX_WIDTH)

        self.session_factory: str = e("SESSION_FACTORY")
        self.relay_url: str = (e("RELAY_URL") or f"http://localhost:{self.port}").rstrip("/")

    @property
    def data_dir(self) -> Path:
        return Path(os.getenv(self._DATA_DIR_ENV, str(Path.home() / ".chanrelay")))

    @property
    def staging_dir(self) -> Path:
        return self.data_dir / "cache" / "temp_media"

    @property
    def session_dir(self) -> Path:
        return self.data_dir / "session"

    @property
    def max_request_bytes(self) -> int:
        return self.max_request_mb * 1024 * 1024

    def _read(self, key: str) -> str:
        return self.env.read(key) or os.getenv(key, "")

    def _read_int(self, key: str, default: int) -> int:
        raw = self._read(key)
        if not raw:
            return default
        try:
            value = int(raw)
        except ValueError:
            logger.warning("Ignoring non-integer %s=%r; using %d", key, raw, default)
            return default
        if value <= 0:
            logger.warning("Ignoring non-positive %s=%d; using %d", key, value, default)
            return default
        return value

    def ensure_dirs(self) -> None:
        for d in (self.data_dir, self.staging_dir, self.session_dir):
            d.mkdir(parents=True, exist_ok=True)


cfg = Settings()


def _reset_cfg() -> None:
    global cfg
    cfg = Settings()


register_singleton(_reset_cfg)
