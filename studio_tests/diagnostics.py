"""Best-effort diagnostic capture for failed runs."""
from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path
from typing import Optional, Union

from playwright.async_api import Page

logger = logging.getLogger(__name__)


def screenshot_path(directory: Union[str, Path], prefix: str, now: Optional[datetime] = None) -> Path:
    """Return ``<directory>/<prefix>-YYYYmmdd-HHMMSS.png``."""
    stamp = (now or datetime.now()).strftime("%Y%m%d-%H%M%S")
    return Path(directory) / f"{prefix}-{stamp}.png"


async def capture_screenshot(
    page: Optional[Page],
    prefix: str,
    directory: Union[str, Path] = ".",
) -> Optional[Path]:
    """Attempt a full-page screenshot of ``page``.

    Returns the written path, or None when there was no page or the capture
    failed. A failed capture is logged and discarded so it never masks the
    error that triggered it.
    """
    if page is None:
        return None

    path = screenshot_path(directory, prefix)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        await page.screenshot(path=str(path), full_page=True)
    except Exception as exc:
        logger.warning(f"Could not capture diagnostic screenshot {path.name}: {exc}")
        return None

    logger.info(f"Error screenshot saved: {path}")
    return path
