"""
Storefront Backend — Branding Settings Service
================================================

What:  Reads and persists the single branding settings document.
How:   The document lives at <data_root>/branding-settings.json. Saving
       replaces the file wholesale with the request body (no merge with the
       previous content, no concurrency check); reading returns the stored
       JSON or DEFAULT_BRANDING when nothing has been saved yet.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional

import aiofiles
import aiofiles.os

from storefront.config import settings
from storefront.exceptions import FileStorageError, ValidationError
from storefront.services.error_boundary import error_boundary

logger = logging.getLogger(__name__)

DEFAULT_BRANDING: Dict[str, Any] = {
    "businessName": "Business Platform",
    "tagline": "Your business tagline",
    "logo": "",
    "favicon": "",
    "primaryColor": "#0ea5e9",
    "secondaryColor": "#64748b",
    "accentColor": "#f59e0b",
    "fontHeading": "Inter",
    "fontBody": "Inter",
}


class BrandingService:
    """
    Args:
        settings_path: Override the settings file location (used in tests).
    """

    def __init__(self, settings_path: Optional[str] = None):
        self._settings_path = Path(settings_path) if settings_path else None

    @property
    def settings_path(self) -> Path:
        return self._settings_path or settings.branding_settings_path

    @error_boundary("Failed to read settings", error_cls=FileStorageError)
    async def get_settings(self) -> Dict[str, Any]:
        try:
            async with aiofiles.open(self.settings_path, "r", encoding="utf-8") as f:
                return json.loads(await f.read())
        except FileNotFoundError:
            return dict(DEFAULT_BRANDING)

    @error_boundary("Failed to save settings", error_cls=FileStorageError)
    async def save_settings(self, branding: Dict[str, Any]) -> Dict[str, Any]:
        """
        Validate and overwrite the branding document.

        Raises:
            ValidationError:  businessName missing or falsy; nothing is written
            FileStorageError: directory creation or write failed
        """
        if not branding.get("businessName"):
            raise ValidationError(message="Business name is required", field="businessName")

        path = self.settings_path
        await aiofiles.os.makedirs(path.parent, exist_ok=True)
        async with aiofiles.open(path, "w", encoding="utf-8") as f:
            await f.write(json.dumps(branding, indent=2, ensure_ascii=False))

        logger.info("Branding settings saved (%d keys)", len(branding))
        return branding


# ── Singleton Instance ────────────────────────────────────────────────────
branding_service = BrandingService()


def get_branding_service() -> BrandingService:
    return branding_service
