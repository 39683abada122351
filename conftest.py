"""Pytest configuration and fixtures for azprovision tests.

CRITICAL: Protects production configuration from test modifications.
"""

import os
import shutil
from pathlib import Path

import pytest


@pytest.fixture(scope="session", autouse=True)
def protect_production_config():
    """Protect ~/.azprovision/config.toml from being modified by tests.

    This fixture:
    1. Backs up the real config.toml before any tests run
    2. Restores it after all tests complete
    """
    config_path = Path.home() / ".azprovision" / "config.toml"
    backup_path = Path.home() / ".azprovision" / ".config.toml.pytest-backup"

    config_existed = config_path.exists()
    if config_existed:
        shutil.copy2(config_path, backup_path)
        print(f"\n[PYTEST] Protected config.toml - backup at {backup_path}")

    yield

    if config_existed and backup_path.exists():
        shutil.copy2(backup_path, config_path)
        backup_path.unlink()
        print("\n[PYTEST] Restored config.toml from backup")
    elif backup_path.exists():
        backup_path.unlink()


@pytest.fixture(scope="session", autouse=True)
def prevent_real_azure_operations():
    """Mark test mode so nothing accidentally provisions real resources.

    Tests that need real Azure should explicitly check for RUN_E2E_TESTS=true.
    """
    os.environ["AZPROVISION_TEST_MODE"] = "true"

    if os.environ.get("RUN_E2E_TESTS") == "true":
        print("\n" + "=" * 70)
        print("WARNING: RUN_E2E_TESTS=true - E2E tests will use REAL Azure resources!")
        print("=" * 70 + "\n")

    yield

    if "AZPROVISION_TEST_MODE" in os.environ:
        del os.environ["AZPROVISION_TEST_MODE"]


@pytest.fixture
def isolated_config(tmp_path, monkeypatch):
    """Point ConfigManager at a config directory under tmp_path.

    Example:
        def test_something(isolated_config):
            config_path = isolated_config / "config.toml"
            # Safe to modify - it's in tmp_path
    """
    from azprovision.config_manager import ConfigManager

    config_dir = tmp_path / ".azprovision"
    monkeypatch.setattr(ConfigManager, "DEFAULT_CONFIG_DIR", config_dir)
    monkeypatch.setattr(ConfigManager, "DEFAULT_CONFIG_FILE", config_dir / "config.toml")
    return config_dir


@pytest.fixture
def clean_environment(monkeypatch):
    """Remove every environment variable the provisioner reads."""
    for var in (
        "AZPROVISION_SUBSCRIPTION_ID",
        "AZURE_SUBSCRIPTION_ID",
        "AZPROVISION_LOCATION",
        "AZPROVISION_AUTH_METHOD",
        "AZPROVISION_POLL_INTERVAL",
        "AZPROVISION_TIMEOUT",
        "AZURE_TENANT_ID",
        "AZURE_CLIENT_ID",
        "AZURE_CLIENT_SECRET",
        "AZPROVISION_SP_CLIENT_SECRET",
        "AZPROVISION_ADMIN_PASSWORD",
    ):
        monkeypatch.delenv(var, raising=False)
