"""
Test Configuration
==================

Pytest configuration with fixtures for all test types.
Provides isolated settings, storage, templates and a recording renderer.
"""

import os
import tempfile
from pathlib import Path
from typing import Generator

import pytest

# Configure the environment before htmlshot configures logging on import
os.environ.setdefault("HTMLSHOT_ENVIRONMENT", "testing")
os.environ.setdefault("HTMLSHOT_LOG_LEVEL", "DEBUG")
os.environ.setdefault("HTMLSHOT_STORAGE_PATH", tempfile.mkdtemp(prefix="htmlshot_test_"))

from htmlshot.config.settings import Settings, reload_settings  # noqa: E402
from htmlshot.core.rendering.content import TemplateRenderer  # noqa: E402
from htmlshot.core.rendering.renderer import set_renderer  # noqa: E402
from htmlshot.core.storage.manager import StorageManager, close_storage_manager  # noqa: E402

from tests.utils.mocks import RecordingRenderer  # noqa: E402


@pytest.fixture
def test_settings(tmp_path: Path) -> Settings:
    """Settings rooted in a per-test temporary directory."""
    return Settings(
        environment="testing",
        app_locale="pt_BR",
        storage_path=tmp_path / "storage",
        template_path=tmp_path / "templates",
        chrome_path="/usr/bin/chromium",
        download_prefix="file",
    )


@pytest.fixture
def template_dir(test_settings: Settings) -> Path:
    """Template directory with a few templates."""
    path = test_settings.template_path
    (path / "reports").mkdir(parents=True)
    (path / "greeting.html").write_text("<p>Hello {{ name }}</p>", encoding="utf-8")
    (path / "reports" / "invoice.html").write_text(
        "<h1>Invoice {{ number }}</h1>", encoding="utf-8"
    )
    (path / "broken.html").write_text("{{ missing.attribute }}", encoding="utf-8")
    return path


@pytest.fixture
def templates(template_dir: Path) -> TemplateRenderer:
    return TemplateRenderer(template_dir)


@pytest.fixture
def storage(test_settings: Settings) -> StorageManager:
    return StorageManager(test_settings.disks, test_settings.default_disk)


@pytest.fixture
def renderer() -> RecordingRenderer:
    return RecordingRenderer()


@pytest.fixture
def global_renderer(renderer: RecordingRenderer) -> Generator[RecordingRenderer, None, None]:
    """Install the recording renderer as the process-wide renderer."""
    set_renderer(renderer)
    yield renderer
    set_renderer(None)


@pytest.fixture
def global_settings(
    test_settings: Settings, monkeypatch: pytest.MonkeyPatch
) -> Generator[Settings, None, None]:
    """Point the process-wide settings and storage at the per-test settings."""
    monkeypatch.setenv("HTMLSHOT_STORAGE_PATH", str(test_settings.storage_path))
    monkeypatch.setenv("HTMLSHOT_TEMPLATE_PATH", str(test_settings.template_path))
    monkeypatch.setenv("HTMLSHOT_APP_LOCALE", test_settings.app_locale)
    settings = reload_settings()
    close_storage_manager()
    yield settings
    close_storage_manager()
    monkeypatch.undo()
    reload_settings()
