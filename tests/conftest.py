"""
Test Configuration
==================

Pytest configuration with fixtures shared by all test types.
Provides test settings, a certificate bundle and scratch fixture directories.
"""

import shutil
from pathlib import Path

import pytest
from pydantic_settings import SettingsConfigDict

from tls_smoke.config.settings import DEFAULT_FIXTURES_DIR, Settings
from tls_smoke.core.tls.certificates import create_cert
from tls_smoke.models.schemas import CertificateBundle


# Test settings override
class TestSettings(Settings):
    """Test-specific settings."""

    __test__ = False

    environment: str = "testing"
    server_host: str = "127.0.0.1"
    server_port: int = 0  # Ephemeral port per server
    run_headful: bool = False
    shutdown_timeout: int = 2
    log_level: str = "DEBUG"

    model_config = SettingsConfigDict(env_file=".env.test", env_prefix="TLS_SMOKE_TEST_")


@pytest.fixture
def test_settings() -> TestSettings:
    """Test settings fixture."""
    return TestSettings()


@pytest.fixture(scope="session")
def cert_bundle() -> CertificateBundle:
    """One certificate for the whole session; RSA generation is slow."""
    return create_cert()


@pytest.fixture
def fixtures_dir(tmp_path: Path) -> Path:
    """Writable copy of the packaged site fixtures."""
    target = tmp_path / "fixtures"
    shutil.copytree(DEFAULT_FIXTURES_DIR, target)
    return target


@pytest.fixture
def broken_fixtures_dir(fixtures_dir: Path) -> Path:
    """Site fixtures whose page renders the wrong heading."""
    index = fixtures_dir / "index.html"
    index.write_text(index.read_text().replace("<h1>It works</h1>", "<h1>Broken</h1>"))
    return fixtures_dir
