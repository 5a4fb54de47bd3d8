"""Tests for settings and upload limit loading."""

from __future__ import annotations

from pathlib import Path

from streamvibe.config.settings import Settings, UploadLimits, _load_upload_limits


def test_packaged_upload_limits(settings: Settings):
    limits = settings.upload_limits

    assert limits.title_max_length == 100
    assert limits.description_max_length == 1000
    assert limits.max_bytes_for("video") is None
    assert limits.max_bytes_for("image") == 5 * 1024 * 1024
    assert limits.max_bytes_for("audio") is None


def test_missing_limits_file_uses_defaults(tmp_path: Path):
    assert _load_upload_limits(tmp_path / "absent.yaml") == UploadLimits()


def test_custom_limits_file(tmp_path: Path):
    path = tmp_path / "limits.yaml"
    path.write_text("title_max_length: 50\nmedia:\n  video:\n    max_bytes: 1024\n", encoding="utf-8")

    limits = _load_upload_limits(path)

    assert limits.title_max_length == 50
    assert limits.description_max_length == 1000
    assert limits.max_bytes_for("video") == 1024


def test_settings_defaults(settings: Settings):
    assert settings.video_bucket == "videos"
    assert settings.thumbnail_bucket == "thumbnails"
    assert settings.object_key_strategy == "unique"
    assert settings.controls_hide_delay_seconds == 3.0


def test_settings_read_environment(monkeypatch):
    monkeypatch.setenv("DATABASE_URL", "postgresql://a:b@db:5432/app")
    monkeypatch.setenv("OBJECT_KEY_STRATEGY", "timestamp")
    monkeypatch.setenv("STREAMVIBE_USER_ID", "u9")

    settings = Settings()

    assert settings.object_key_strategy == "timestamp"
    assert settings.user_id == "u9"
