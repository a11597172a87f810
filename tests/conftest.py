import json
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from studio_tests.auth_state import SessionStateStore
from studio_tests.config import Credentials, StudioTestConfig
from tests.fakes import FakeClient, FakeDriver

BASE_URL = "https://studio.example.test/"


@pytest.fixture
def studio_config(tmp_path):
    """Config pointing every artifact at the test's tmp dir."""
    return StudioTestConfig(
        credentials=Credentials(username="admin@example.test", password="s3cret!", tenant="Tenant Test 1"),
        base_url=BASE_URL,
        app_url="https://app.example.test/",
        auth_state_path=tmp_path / "auth.json",
        screenshot_dir=tmp_path / "screenshots",
        timeout_ms=1000,
        instance_delay=5.0,
    )


@pytest.fixture
def driver(studio_config):
    driver = FakeDriver(post_login_url=studio_config.url("projects"))
    driver.tenant_selector = studio_config.tenant_selector
    return driver


@pytest.fixture
def client(driver):
    return FakeClient(driver)


@pytest.fixture
def store(studio_config):
    return SessionStateStore(studio_config.auth_state_path)


@pytest.fixture
def saved_state(store, driver):
    """A previously saved session on disk."""
    store.write(driver.storage_state)
    return store


@pytest.fixture
def config_file(tmp_path):
    def _write(content):
        path = tmp_path / "CoreFunctionalTestsConfig.json"
        if isinstance(content, str):
            path.write_text(content, encoding="utf-8")
        else:
            path.write_text(json.dumps(content), encoding="utf-8")
        return path

    return _write
