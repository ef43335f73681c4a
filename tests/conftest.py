"""
Pytest configuration and shared fixtures for bundleutils tests.

This module provides reusable fixtures and test utilities used across
the test suite.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Callable

import pytest

from bundleutils.io import clear_module_cache
from bundleutils.logging import SilentLogger, set_global_logger
from bundleutils.paths import set_root_path

PROJECT_ROOT = Path(__file__).parent.parent


@pytest.fixture(autouse=True)
def project_root():
    """
    Point the project root at the repository root for every test.

    Mocks are then reachable as "tests/mocks/...". The root, module cache
    and global logger are reset afterwards.
    """
    set_root_path(PROJECT_ROOT)
    yield PROJECT_ROOT
    set_root_path(None)
    clear_module_cache()
    set_global_logger(SilentLogger())


@pytest.fixture
def mocks_dir() -> Path:
    """Provide path to the mock configuration directory."""
    return Path(__file__).parent / "mocks"


@pytest.fixture
def tmp_root(tmp_path: Path) -> Path:
    """Use a temporary directory as the project root."""
    set_root_path(tmp_path)
    return tmp_path


@pytest.fixture
def create_manifest(tmp_root: Path):
    """
    Factory fixture for writing a package.json into the temporary root.

    Usage:
        create_manifest({"dependencies": {"express": "4.0.0"}})
    """
    import json

    def _create(data: Any, filename: str = "package.json") -> Path:
        path = tmp_root / filename
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(data), encoding="utf-8")
        return path

    return _create


class FakeCompiler:
    """Minimal build host that records handlers and fires them on demand."""

    def __init__(self) -> None:
        self.callbacks: dict[str, Callable[..., Any]] = {}

    def register(self, event: str, handler: Callable[..., Any]) -> None:
        self.callbacks[event] = handler

    def trigger(self, event: str, *args: Any) -> None:
        self.callbacks[event](*args)


@pytest.fixture
def compiler() -> FakeCompiler:
    """Provide a fresh fake build host."""
    return FakeCompiler()
