"""
Pytest configuration and shared fixtures for godotsetup tests.
"""

import stat
import zipfile
import pytest
import tempfile
from pathlib import Path
from typing import Dict, Generator


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


# ============================================================================
# Shared Test Fixtures
# ============================================================================


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create temporary directory for test."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def isolated_home(temp_dir: Path, monkeypatch) -> Path:
    """Create isolated home directory for tests."""
    fake_home = temp_dir / "home"
    fake_home.mkdir()

    monkeypatch.setenv("HOME", str(fake_home))
    monkeypatch.setenv("USERPROFILE", str(fake_home))

    return fake_home


@pytest.fixture
def make_zip():
    """
    Factory building zip archives from a {member: content} mapping.

    Members whose name ends with '*' are stored with the execute bit set
    (the '*' is stripped). Members ending with '/' are directories.
    """

    def _make_zip(path: Path, members: Dict[str, str]) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        with zipfile.ZipFile(path, "w") as zf:
            for name, content in members.items():
                mode = 0o644
                if name.endswith("*"):
                    name = name[:-1]
                    mode = 0o755
                info = zipfile.ZipInfo(name)
                if name.endswith("/"):
                    info.external_attr = (stat.S_IFDIR | 0o755) << 16
                else:
                    info.external_attr = (stat.S_IFREG | mode) << 16
                zf.writestr(info, content)
        return path

    return _make_zip

