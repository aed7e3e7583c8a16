import importlib.util
import logging
from pathlib import Path

import sitehub.main
from sitehub.config import Settings


def test_list_settings_accept_comma_separated_env(monkeypatch):
    monkeypatch.setenv("PUBLISH_FILES", "index.html, about.html")
    monkeypatch.setenv("CORS_ORIGINS", "https://editor.example.com")
    cfg = Settings(_env_file=None)
    assert cfg.publish_files == ["index.html", "about.html"]
    assert cfg.cors_origins == ["https://editor.example.com"]


def test_list_settings_accept_json_env(monkeypatch):
    monkeypatch.setenv("PUBLISH_FILES", '["index.html", "style.css"]')
    assert Settings(_env_file=None).publish_files == ["index.html", "style.css"]


def test_defaults():
    cfg = Settings(_env_file=None)
    assert "index.html" in cfg.publish_files
    assert cfg.publish_keep == 5


def test_importing_app_leaves_logging_alone(monkeypatch):
    calls = []
    monkeypatch.setattr(logging, "basicConfig", lambda *a, **kw: calls.append(kw))
    spec = importlib.util.spec_from_file_location("sitehub_main_copy", Path(sitehub.main.__file__))
    spec.loader.exec_module(importlib.util.module_from_spec(spec))

    assert calls == []
