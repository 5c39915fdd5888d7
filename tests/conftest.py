from __future__ import annotations

from pathlib import Path
from typing import Callable

import pytest

from dsblog.config import AppConfig


@pytest.fixture
def cfg() -> AppConfig:
    """Default config with console logging off to keep test output quiet."""
    config = AppConfig()
    config.logging.console = False
    return config


@pytest.fixture
def content_dir(tmp_path: Path) -> Path:
    path = tmp_path / "content"
    path.mkdir()
    return path


@pytest.fixture
def write_post(content_dir: Path) -> Callable[[str, str], Path]:
    """Write a post file under the content directory and return its path."""

    def _write(name: str, text: str) -> Path:
        path = content_dir / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
        return path

    return _write
