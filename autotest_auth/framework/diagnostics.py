"""
Debug checkpoints: screenshots saved to disk and attached to the Allure report.

Checkpoints are only taken when ``debug.enabled`` is set; a failing
screenshot is logged and never fails the authentication itself.
"""

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import Optional

import allure
from loguru import logger
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Page

from ..config_loader import AuthConfig


PRE_NAVIGATION = "pre-navigation"
POST_FIELD_RESOLUTION = "post-field-resolution"
POST_FILL = "post-fill"


async def capture_checkpoint(
    page: Page,
    name: str,
    config: AuthConfig,
    log=None,
) -> Optional[Path]:
    """
    Take a debug screenshot named ``name`` when debugging is enabled.

    Returns:
        Path to the saved screenshot, or None when skipped or failed
    """
    if not config.debug:
        return None

    log = log or logger.bind(component="Diagnostics")
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    filepath = Path(config.screenshot_dir) / f"debug-{name}_{timestamp}.png"

    try:
        filepath.parent.mkdir(parents=True, exist_ok=True)
        await page.screenshot(path=str(filepath), full_page=True)
        with open(filepath, "rb") as f:
            allure.attach(f.read(), name=f"debug-{name}", attachment_type=allure.attachment_type.PNG)
    except (PlaywrightError, OSError) as e:
        log.warning(f"⚠️ Debug screenshot '{name}' failed: {e}")
        return None

    log.debug(f"📸 Screenshot saved: {filepath}")
    return filepath


__all__ = [
    "capture_checkpoint",
    "PRE_NAVIGATION",
    "POST_FIELD_RESOLUTION",
    "POST_FILL",
]
