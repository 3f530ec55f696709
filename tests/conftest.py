"""Shared fixtures: a throwaway site tree and apps serving it."""

from pathlib import Path

import pytest

from wren.app import App, create_app
from wren.config import ServerConfig

INDEX_HTML = b"<!DOCTYPE html><h1>Home</h1>"
STYLE_CSS = b"body { color: red; }"
APP_JS = b"console.log('hello');"
DATA_BIN = b"\x00\x01\x02\x03"


@pytest.fixture
def site_dir(tmp_path: Path) -> Path:
    """Create a site root with an entry document and an assets tree."""
    site = tmp_path / "site"
    (site / "public").mkdir(parents=True)
    (site / "public" / "index.html").write_bytes(INDEX_HTML)

    assets = site / "src"
    (assets / "css").mkdir(parents=True)
    (assets / "style.css").write_bytes(STYLE_CSS)
    (assets / "app.js").write_bytes(APP_JS)
    (assets / "data.bin").write_bytes(DATA_BIN)
    (assets / "README").write_text("no extension")
    (assets / "css" / "main.css").write_text("h1 { font-size: 2em; }")

    # Outside the assets root
    (tmp_path / "secret.txt").write_text("top secret")
    return site


@pytest.fixture
def config(site_dir: Path) -> ServerConfig:
    return ServerConfig(site_root=site_dir)


@pytest.fixture
def app(config: ServerConfig) -> App:
    return create_app(config)
