import pytest
from fastapi.testclient import TestClient

from sitehub.config import Settings, get_settings
from sitehub.main import app


@pytest.fixture
def site_settings(tmp_path) -> Settings:
    template_dir = tmp_path / "site"
    template_dir.mkdir()
    return Settings(
        _env_file=None,
        template_dir=str(template_dir),
        publish_dir=str(tmp_path / "publish"),
        database_path=str(tmp_path / "pages.db"),
        page_store="sqlite",
        smtp_host="smtp.example.com",
        mail_from="site@example.com",
        publish_recipient="owner@example.com",
    )


@pytest.fixture
def client(site_settings):
    app.dependency_overrides[get_settings] = lambda: site_settings
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
