"""
Pytest configuration and shared fixtures for govm tests.
"""

import logging

import pytest

# Import test fixtures to make them available to all tests
# ruff: noqa: F401
from tests.fixtures.installations import (
    catalog,
    install_root,
    installed_versions,
    layout,
    legacy_install,
    scratch_dir,
)
from govm.core.platform import clear_platform_cache


def pytest_addoption(parser):
    """Add custom command line options."""
    parser.addoption(
        "--integration",
        action="store_true",
        default=False,
        help="run integration tests that require network access",
    )


def pytest_collection_modifyitems(config, items):
    """Skip integration tests unless --integration flag is provided."""
    if not config.getoption("--integration"):
        skip_integration = pytest.mark.skip(reason="need --integration option to run")
        for item in items:
            if "integration" in item.keywords:
                item.add_marker(skip_integration)


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers",
        "integration: marks tests as integration tests (requires --integration)",
    )
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )


# ============================================================================
# Shared Test Fixtures
# ============================================================================


@pytest.fixture
def isolated_home(tmp_path, monkeypatch):
    """Create isolated home directory and clear govm environment variables."""
    fake_home = tmp_path / "home"
    fake_home.mkdir()

    monkeypatch.setenv("HOME", str(fake_home))
    for name in ("GOVM_CONFIG", "GOVM_INSTALL_ROOT", "GOVM_SILENT", "GOPATH"):
        monkeypatch.delenv(name, raising=False)

    return fake_home


@pytest.fixture
def empty_path(tmp_path, monkeypatch):
    """PATH pointing at an empty directory, hiding any host Go toolchain."""
    path_dir = tmp_path / "empty-bin"
    path_dir.mkdir()
    monkeypatch.setenv("PATH", str(path_dir))
    return path_dir


@pytest.fixture(autouse=True)
def _reset_platform_cache():
    clear_platform_cache()
    yield
    clear_platform_cache()


@pytest.fixture(autouse=True)
def _restore_logging():
    """Drop the stream handler CLI.run() installs on the root logger."""
    level = logging.root.level
    yield
    for handler in logging.root.handlers[:]:
        if type(handler) is logging.StreamHandler:
            logging.root.removeHandler(handler)
    logging.root.setLevel(level)
