"""
Authentication state store for persistent sessions across tests.

Holds a single Playwright storage state (cookies, localStorage) on disk so
test runs and the provisioning worker can skip the interactive login.
Presence of the file is the only signal consulted; there is no expiry
tracking. Stale state is handled by deleting the file and logging in again.

Two processes must not share one path at the same time.
"""
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, Union

logger = logging.getLogger(__name__)


class SessionStateStore:
    """Read/write/delete the serialized browser session at a fixed path."""

    def __init__(self, path: Union[str, Path]) -> None:
        self.path = Path(path)

    def __repr__(self) -> str:
        return f"SessionStateStore(path={str(self.path)!r})"

    def exists(self) -> bool:
        return self.path.is_file()

    def read(self) -> Dict[str, Any]:
        """Return the stored storage state.

        Raises:
            FileNotFoundError: if no state has been written yet
        """
        with open(self.path, encoding="utf-8") as f:
            return json.load(f)

    def write(self, payload: Dict[str, Any]) -> Path:
        """Persist a storage state, replacing any previous entry.

        Args:
            payload: Result of BrowserContext.storage_state()

        Returns:
            Path to the saved state file
        """
        self.path.parent.mkdir(parents=True, exist_ok=True)

        # Write atomically (write to temp, then rename)
        temp_file = self.path.with_suffix(self.path.suffix + ".tmp")
        with open(temp_file, "w", encoding="utf-8") as f:
            json.dump(payload, f, indent=2)
        temp_file.replace(self.path)

        cookies = len(payload.get("cookies", []))
        logger.info(f"✓ Saved auth state to: {self.path} ({cookies} cookies)")
        return self.path

    def delete(self) -> None:
        """Delete the saved state. No-op when nothing is stored."""
        try:
            self.path.unlink()
        except FileNotFoundError:
            return
        logger.info(f"✓ Cleared auth state: {self.path}")
