import json
import logging

from study_planner.generate_openapi import generate_openapi
from study_planner.settings import get_settings


class TestSettings:
    def test_defaults(self, monkeypatch):
        for name in ("REMOTE_BACKEND", "LOCAL_CACHE_BACKEND", "REMOTE_URL", "PLANNER_TIMEZONE", "LOG_LEVEL"):
            monkeypatch.delenv(name, raising=False)
        settings = get_settings()
        assert settings.remote_backend == "memory"
        assert settings.cache_backend == "memory"
        assert settings.timezone == "UTC"
        assert settings.cors_allow_origins == ["*"]
        assert settings.enable_basic_auth is False
        assert settings.log_level == logging.INFO

    def test_postgrest_without_url_runs_offline(self, monkeypatch):
        monkeypatch.setenv("REMOTE_BACKEND", "postgrest")
        monkeypatch.delenv("REMOTE_URL", raising=False)
        assert get_settings().remote_backend == "offline"

    def test_access_token_defaults_to_api_key(self, monkeypatch):
        monkeypatch.setenv("REMOTE_API_KEY", "anon")
        monkeypatch.delenv("REMOTE_ACCESS_TOKEN", raising=False)
        monkeypatch.setenv("REMOTE_URL", "https://project.example.co/")
        settings = get_settings()
        assert settings.remote_access_token == "anon"
        assert settings.remote_url == "https://project.example.co"

    def test_bad_values_fall_back(self, monkeypatch):
        monkeypatch.setenv("REMOTE_TIMEOUT", "soon")
        monkeypatch.setenv("LOG_LEVEL", "chatty")
        monkeypatch.setenv("CORS_ALLOW_ORIGINS", "http://a.test, http://b.test,")
        settings = get_settings()
        assert settings.remote_timeout == 20.0
        assert settings.log_level == logging.INFO
        assert settings.cors_allow_origins == ["http://a.test", "http://b.test"]


class TestOpenAPI:
    def test_schema_written_with_tags(self, tmp_path):
        path = generate_openapi(str(tmp_path))
        with open(path, encoding="utf-8") as f:
            schema = json.load(f)
        assert {t["name"] for t in schema["tags"]} >= {"todos", "folders", "views", "session"}
        assert "/api/v1/views/calendar" in schema["paths"]
