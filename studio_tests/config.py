"""Configuration for the Integration Studio UI suite.

Credentials come from a JSON file shaped like::

    {"AdminUser": {"Username": "...", "Password": "...", "TenantName": "..."}}

located at config/CoreFunctionalTestsConfig.json (override with
STUDIO_CONFIG_FILE). Everything else has a default that an environment
variable can override.

The resulting StudioTestConfig is built once at process start and handed to
every component that needs it; nothing reads configuration from module state.
"""
from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping, Optional
from urllib.parse import urljoin

from studio_tests.errors import ConfigLoadError

logger = logging.getLogger(__name__)

REPO_ROOT = Path(__file__).resolve().parents[1]
DEFAULT_CONFIG_FILE = REPO_ROOT / "config" / "CoreFunctionalTestsConfig.json"

DEFAULT_BASE_URL = "https://verify.integrationstudio.dev-connect.aveva.com/"
DEFAULT_APP_URL = "https://internal.integrationstudio.capdev-connect.aveva.com/"
DEFAULT_AUTH_STATE = "auth.json"
DEFAULT_TIMEOUT_MS = 30000
DEFAULT_INSTANCE_DELAY = 5.0
DEFAULT_INSTANCE_SUFFIX = "55"

_TRUTHY = {"true", "1", "yes"}


@dataclass(frozen=True)
class Credentials:
    """Admin user credentials, read-only for the process lifetime."""

    username: str
    password: str
    tenant: str

    def __repr__(self) -> str:
        return (
            f"Credentials(username={self.username!r}, password='{'*' * len(self.password)}', "
            f"tenant={self.tenant!r})"
        )


@dataclass
class StudioTestConfig:
    """Everything a test or worker run needs to reach the application."""

    credentials: Credentials
    base_url: str = DEFAULT_BASE_URL
    app_url: str = DEFAULT_APP_URL
    post_login_url_pattern: str = "**/projects"
    expected_title: Optional[str] = "Integration Studio"
    auth_state_path: Path = field(default_factory=lambda: Path(DEFAULT_AUTH_STATE))
    screenshot_dir: Path = field(default_factory=Path)
    headless: bool = True
    browser_type: str = "chromium"
    timeout_ms: int = DEFAULT_TIMEOUT_MS
    instance_delay: float = DEFAULT_INSTANCE_DELAY
    instance_suffix: str = DEFAULT_INSTANCE_SUFFIX
    cleanup_auth_state: bool = False

    @property
    def tenant_selector(self) -> str:
        return f"[data-test='button_{self.credentials.tenant}']"

    def url(self, path: str) -> str:
        """Return an absolute URL for the provided path."""
        return urljoin(self.base_url.rstrip("/") + "/", path.lstrip("/"))

    def app(self, path: str = "") -> str:
        """Return an absolute Integration Studio URL for the provided path."""
        return urljoin(self.app_url.rstrip("/") + "/", path.lstrip("/"))


def get_config_path(environ: Optional[Mapping[str, str]] = None) -> Path:
    environ = os.environ if environ is None else environ
    explicit = environ.get("STUDIO_CONFIG_FILE")
    return Path(explicit) if explicit else DEFAULT_CONFIG_FILE


def load_credentials(path: Path) -> Credentials:
    """Read the AdminUser block from the JSON config file.

    Raises:
        ConfigLoadError: if the file is missing, is not valid JSON, or lacks
            any of Username/Password/TenantName.
    """
    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError as exc:
        raise ConfigLoadError(f"Config file not found: {path}") from exc
    except (OSError, json.JSONDecodeError) as exc:
        raise ConfigLoadError(f"Failed to read config JSON {path}: {exc}") from exc

    admin = data.get("AdminUser") if isinstance(data, dict) else None
    if not isinstance(admin, dict):
        raise ConfigLoadError(f"'AdminUser' block missing from {path}")

    values = {}
    for key in ("Username", "Password", "TenantName"):
        value = admin.get(key)
        if not isinstance(value, str) or not value:
            raise ConfigLoadError(f"AdminUser.{key} missing or empty in {path}")
        values[key] = value

    return Credentials(
        username=values["Username"],
        password=values["Password"],
        tenant=values["TenantName"],
    )


def _int_env(environ: Mapping[str, str], key: str, default: int) -> int:
    raw = environ.get(key)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise ConfigLoadError(f"{key} must be an integer, got {raw!r}") from exc


def _float_env(environ: Mapping[str, str], key: str, default: float) -> float:
    raw = environ.get(key)
    if raw is None or raw == "":
        return default
    try:
        value = float(raw)
    except ValueError as exc:
        raise ConfigLoadError(f"{key} must be a number, got {raw!r}") from exc
    if value < 0:
        raise ConfigLoadError(f"{key} must not be negative, got {raw!r}")
    return value


def _bool_env(environ: Mapping[str, str], key: str, default: bool) -> bool:
    raw = environ.get(key)
    if raw is None or raw == "":
        return default
    return raw.strip().lower() in _TRUTHY


def load_config(
    path: Optional[Path] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> StudioTestConfig:
    """Build the process-wide configuration object.

    Args:
        path: Explicit config file, or None to use STUDIO_CONFIG_FILE / default
        environ: Environment mapping (defaults to os.environ)

    Returns:
        StudioTestConfig with credentials and environment overrides applied
    """
    environ = os.environ if environ is None else environ
    config_path = Path(path) if path is not None else get_config_path(environ)
    credentials = load_credentials(config_path)

    browser_type = environ.get("PLAYWRIGHT_BROWSER", "chromium").lower()
    if browser_type not in ("chromium", "firefox", "webkit"):
        raise ConfigLoadError(
            f"Invalid PLAYWRIGHT_BROWSER: {browser_type}\n"
            f"Must be 'chromium', 'firefox' or 'webkit'"
        )

    config = StudioTestConfig(
        credentials=credentials,
        base_url=environ.get("STUDIO_BASE_URL") or DEFAULT_BASE_URL,
        app_url=environ.get("STUDIO_APP_URL") or DEFAULT_APP_URL,
        auth_state_path=Path(environ.get("STUDIO_AUTH_STATE") or DEFAULT_AUTH_STATE),
        screenshot_dir=Path(environ.get("SCREENSHOT_DIR") or "."),
        headless=_bool_env(environ, "PLAYWRIGHT_HEADLESS", True),
        browser_type=browser_type,
        timeout_ms=_int_env(environ, "STUDIO_TIMEOUT_MS", DEFAULT_TIMEOUT_MS),
        instance_delay=_float_env(environ, "STUDIO_INSTANCE_DELAY", DEFAULT_INSTANCE_DELAY),
        instance_suffix=environ.get("STUDIO_INSTANCE_SUFFIX") or DEFAULT_INSTANCE_SUFFIX,
        cleanup_auth_state=_bool_env(environ, "STUDIO_CLEANUP_AUTH_STATE", False),
    )

    logger.info(
        f"[CONFIG] Loaded {config_path.name} "
        f"(user={credentials.username}, tenant={credentials.tenant}, base_url={config.base_url})"
    )
    return config
