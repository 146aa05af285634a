"""Shared fixtures: temporary package indexes and a wired-up test client."""

import sqlite3
from pathlib import Path
from typing import Iterable, Optional, Tuple

import pytest
from fastapi.testclient import TestClient

from pkgsearch.core.config import Settings
from pkgsearch.core.dependencies import get_index_provider, get_settings
from pkgsearch.data.index_provider import IndexProvider
from pkgsearch.main import app
from pkgsearch.storage.index_handle import IndexHandle

SAMPLE_PACKAGES = [
    ("mycurl", "2.0"),
    ("curly-lib", "1.0"),
    ("curl", "8.0"),
    ("curl", "7.80"),
    ("wget", "1.21"),
]


def build_index(path: Path, rows: Iterable[Tuple[Optional[str], Optional[str]]]) -> Path:
    """Write a packages(name, version) SQLite database to ``path``."""
    conn = sqlite3.connect(str(path))
    try:
        conn.execute("CREATE TABLE packages (name TEXT, version TEXT)")
        conn.executemany("INSERT INTO packages (name, version) VALUES (?, ?)", list(rows))
        conn.commit()
    finally:
        conn.close()
    return path


@pytest.fixture
def index_path(tmp_path):
    return build_index(tmp_path / "index.sqlite", SAMPLE_PACKAGES)


@pytest.fixture
def index_handle(index_path):
    handle = IndexHandle.open(index_path, lock_timeout=1.0)
    yield handle
    handle.close()


@pytest.fixture
def local_settings(index_path):
    """Settings that serve a pre-provisioned local snapshot (no bucket)."""
    return Settings(index_path=index_path, lock_timeout_seconds=1.0)


@pytest.fixture
def make_client():
    """Build a TestClient whose routes use the given provider and settings."""
    providers = []

    def _make(provider: IndexProvider) -> TestClient:
        providers.append(provider)
        app.dependency_overrides[get_index_provider] = lambda: provider
        app.dependency_overrides[get_settings] = lambda: provider.settings
        return TestClient(app)

    yield _make

    app.dependency_overrides.clear()
    for provider in providers:
        provider.close()


@pytest.fixture
def client(make_client, local_settings):
    return make_client(IndexProvider(local_settings))
