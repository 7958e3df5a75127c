"""
Root conftest.py for shared test fixtures and configuration.
This file provides common fixtures used across the test suite.
"""

import pytest
from pathlib import Path
import os
import sys

# Add project root to Python path for consistent imports
PROJECT_ROOT = Path(__file__).parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from Tests.fixtures.router_mocks import FakeRouter


# ========== Test Environment Isolation ==========

@pytest.fixture(autouse=True)
def isolate_config(monkeypatch, tmp_path):
    """Points the config file at a temporary location and clears the config cache.

    Keeps tests from reading or creating ~/.config/clash_dash/config.toml.
    """
    from clash_dash import config

    config_path = tmp_path / "config" / "config.toml"
    monkeypatch.setattr(config, "DEFAULT_CONFIG_PATH", config_path)
    monkeypatch.setattr(config, "BASE_DATA_DIR", tmp_path / "data")
    monkeypatch.setattr(config, "_CONFIG_CACHE", None)
    monkeypatch.delenv("CLASH_DASH_OPENWRT_PASSWORD", raising=False)
    yield config_path


@pytest.fixture
def clean_environment():
    """Provide a clean environment and restore it after test."""
    original_env = os.environ.copy()
    yield os.environ
    os.environ.clear()
    os.environ.update(original_env)


# ========== Router Fixtures ==========

@pytest.fixture
def server_target():
    from clash_dash.luci_api.schemas import ServerTarget
    return ServerTarget(host="192.168.1.1", port="80", username="root", password="secret")


@pytest.fixture
def fake_router():
    """In-memory router answering the LuCI auth and exec endpoints."""
    return FakeRouter(
        dump=(
            "@config_subscribe[0].name='Work'\n"
            "@config_subscribe[0].address='https://example.com/work'\n"
            "@config_subscribe[0].enabled='1'\n"
            "@config_subscribe[0].keyword='HK' 'JP'\n"
            "@config_subscribe[1].name='Home'\n"
            "@config_subscribe[1].address='https://example.com/home'\n"
            "@config_subscribe[1].enabled='0'\n"
        ),
        templates="ACL4SSR_Online\nACL4SSR_Online_Full\n\n",
    )


@pytest.fixture
def rpc_client(server_target, fake_router):
    from clash_dash.luci_api.client import LuCIRPCClient
    return LuCIRPCClient(server_target, timeout=5.0, package="openclash", transport=fake_router.transport())


# ========== Pytest Configuration ==========

def pytest_configure(config):
    """Register custom test markers."""
    config.addinivalue_line("markers", "unit: Unit tests that don't require external resources")
    config.addinivalue_line("markers", "integration: Integration tests against a mocked router")
