"""Tests for the Settings module."""

from __future__ import annotations

from pathlib import Path

from chanrelay.runtime.config import settings as settings_module
from chanrelay.runtime.config.settings import Settings
from chanrelay.runtime.util.env_file import EnvFile
from chanrelay.runtime.util.singletons import reset_all_singletons


class TestSettings:
    def test_defaults(self, data_dir: Path) -> None:
        s = Settings()
        assert s.host == "0.0.0.0"
        assert s.port == 3000
        assert s.max_request_mb == 50
        assert s.max_request_bytes == 50 * 1024 * 1024
        assert s.ffmpeg_path == "ffmpeg"
        assert s.video_max_width == 1280
        assert s.api_secret == ""
        assert s.session_factory == ""
        assert s.relay_url == "http://localhost:3000"

    def test_derived_paths(self, data_dir: Path) -> None:
        s = Settings()
        assert s.data_dir == data_dir
        assert s.staging_dir == data_dir / "cache" / "temp_media"
        assert s.session_dir == data_dir / "session"

    def test_env_overrides(self, data_dir: Path, monkeypatch) -> None:
        monkeypatch.setenv("PORT", "8080")
        monkeypatch.setenv("RELAY_URL", "http://relay.internal:9000/")
        s = Settings()
        assert s.port == 8080
        assert s.relay_url == "http://relay.internal:9000"

    def test_relay_url_follows_port(self, data_dir: Path, monkeypatch) -> None:
        monkeypatch.setenv("PORT", "4001")
        assert Settings().relay_url == "http://localhost:4001"

    def test_bad_integers_fall_back(self, data_dir: Path, monkeypatch) -> None:
        monkeypatch.setenv("PORT", "abc")
        monkeypatch.setenv("MAX_REQUEST_MB", "0")
        s = Settings()
        assert s.port == 3000
        assert s.max_request_mb == 50

    def test_env_file_wins_over_environment(self, data_dir: Path, monkeypatch) -> None:
        monkeypatch.setenv("HOST", "127.0.0.1")
        (data_dir.parent / ".env").write_text('HOST="10.0.0.5"\n', encoding="utf-8")
        assert Settings().host == "10.0.0.5"

    def test_reload_picks_up_file_changes(self, data_dir: Path) -> None:
        s = Settings()
        assert s.ffmpeg_path == "ffmpeg"
        (data_dir.parent / ".env").write_text("FFMPEG_PATH=/usr/local/bin/ffmpeg\n", encoding="utf-8")
        s.reload()
        assert s.ffmpeg_path == "/usr/local/bin/ffmpeg"

    def test_ensure_dirs(self, data_dir: Path) -> None:
        s = Settings()
        s.ensure_dirs()
        assert s.staging_dir.is_dir()
        assert s.session_dir.is_dir()

    def test_cfg_reset(self, data_dir: Path, monkeypatch) -> None:
        monkeypatch.setenv("PORT", "5055")
        reset_all_singletons()
        assert settings_module.cfg.port == 5055


class TestEnvFile:
    def test_read_formats(self, tmp_path: Path) -> None:
        path = tmp_path / ".env"
        path.write_text(
            "# comment\n"
            "export PORT=4000\n"
            'HOST="127.0.0.1"\n'
            "RELAY_API_SECRET='abc'\n"
            "garbage line\n",
            encoding="utf-8",
        )
        env = EnvFile(path)
        assert env.read_all() == {"PORT": "4000", "HOST": "127.0.0.1", "RELAY_API_SECRET": "abc"}
        assert env.read("MISSING") == ""
