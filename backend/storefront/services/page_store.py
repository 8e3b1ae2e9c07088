"""
Storefront Backend — File-Backed Page Store
=============================================

What:  CRUD for static page documents, one JSON file per slug.
How:   Documents live at <data_root>/pages/<slug>.json as pretty-printed UTF-8
       JSON. All disk access goes through aiofiles so the event loop is never
       blocked on file I/O.

Directory Structure:
    data/
    └── pages/
        ├── about.json
        ├── contact.json
        └── summer-sale.json

Slug Rules:
    A slug becomes a filename, so it is checked against ^[A-Za-z0-9-]+$ before
    any path is composed. "../etc/passwd", "a/b" and "a.b" are all rejected
    with a 400 and never reach the file system.

Error Mapping:
    FileNotFoundError         → NotFoundError (404)
    any other OSError / JSON  → FileStorageError (500), generic message only
    Concurrent writers are not coordinated; the last write wins.
"""

import functools
import json
import logging
import re
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

import aiofiles
import aiofiles.os

from storefront.clock import epoch_millis, utc_timestamp
from storefront.config import settings
from storefront.exceptions import FileStorageError, NotFoundError, ValidationError
from storefront.services.error_boundary import error_boundary

logger = logging.getLogger(__name__)

SLUG_PATTERN = re.compile(r"[A-Za-z0-9-]+")


def _parse_timestamp(value: Any) -> Optional[float]:
    if not isinstance(value, str):
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00")).timestamp()
    except ValueError:
        return None


def _compare_pages(a: Dict[str, Any], b: Dict[str, Any]) -> int:
    """
    Listing order: by `order` ascending when both pages have one, otherwise
    newest `createdAt` first. Unparseable timestamps compare equal.
    """
    order_a, order_b = a.get("order"), b.get("order")
    if isinstance(order_a, (int, float)) and isinstance(order_b, (int, float)):
        return (order_a > order_b) - (order_a < order_b)

    created_a, created_b = _parse_timestamp(a.get("createdAt")), _parse_timestamp(b.get("createdAt"))
    if created_a is None or created_b is None:
        return 0
    return (created_b > created_a) - (created_b < created_a)


class PageStore:
    """
    Reads, writes and deletes page documents keyed by slug.

    Args:
        pages_dir: Override the storage directory (used in tests).
                   Defaults to settings.pages_dir.
    """

    def __init__(self, pages_dir: Optional[str] = None):
        self._pages_dir = Path(pages_dir) if pages_dir else None

    @property
    def pages_dir(self) -> Path:
        return self._pages_dir or settings.pages_dir

    # ── Slug handling ─────────────────────────────────────────────────────

    def validate_slug(self, slug: Any) -> str:
        """
        Raises:
            ValidationError: blank slug, or characters outside [A-Za-z0-9-]
        """
        if slug is None or slug == "":
            raise ValidationError(message="Slug is required", field="slug")
        if not isinstance(slug, str) or not SLUG_PATTERN.fullmatch(slug):
            raise ValidationError(
                message="Invalid slug. Use letters, numbers and hyphens only",
                field="slug",
                context={"slug": str(slug)},
            )
        return slug

    def path_for(self, slug: str) -> Path:
        return self.pages_dir / f"{slug}.json"

    # ── Raw file helpers ──────────────────────────────────────────────────

    async def _read_document(self, path: Path) -> Dict[str, Any]:
        async with aiofiles.open(path, "r", encoding="utf-8") as f:
            content = await f.read()
        return json.loads(content)

    async def _write_document(self, path: Path, document: Dict[str, Any], exclusive: bool = False) -> None:
        """
        Write a document, creating the pages directory if needed.

        exclusive=True opens with mode "x", so an existing file raises
        FileExistsError instead of being overwritten.
        """
        await aiofiles.os.makedirs(path.parent, exist_ok=True)
        async with aiofiles.open(path, "x" if exclusive else "w", encoding="utf-8") as f:
            await f.write(json.dumps(document, indent=2, ensure_ascii=False))

    # ── Operations ────────────────────────────────────────────────────────

    @error_boundary("Failed to fetch pages", error_cls=FileStorageError, expose_detail=False)
    async def list_pages(self) -> List[Dict[str, Any]]:
        """All stored documents in listing order; a missing directory yields []."""
        if not await aiofiles.os.path.isdir(self.pages_dir):
            return []

        pages = []
        for name in sorted(await aiofiles.os.listdir(self.pages_dir)):
            if not name.endswith(".json"):
                continue
            document = await self._read_document(self.pages_dir / name)
            if not isinstance(document, dict):
                logger.warning("Skipping page file %s: not a JSON object", name)
                continue
            pages.append(document)

        pages.sort(key=functools.cmp_to_key(_compare_pages))
        return pages

    @error_boundary("Failed to fetch page", error_cls=FileStorageError, expose_detail=False)
    async def get_page(self, slug: Any) -> Dict[str, Any]:
        """
        Fetch one document exactly as stored.

        Raises:
            ValidationError:  bad slug (400)
            NotFoundError:    no file for this slug (404)
            FileStorageError: unreadable file or invalid JSON (500)
        """
        slug = self.validate_slug(slug)
        try:
            return await self._read_document(self.path_for(slug))
        except FileNotFoundError:
            raise NotFoundError(resource="Page", resource_id=slug)

    @error_boundary("Failed to create page", error_cls=FileStorageError, expose_detail=False)
    async def create_page(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        """
        Create a new page document from the request body.

        Required: slug, title. Defaults: description "", isPublished False,
        sections [], order 0. id, createdAt and updatedAt are generated.

        Raises:
            ValidationError: missing slug/title, bad slug, or slug already taken
        """
        slug, title = payload.get("slug"), payload.get("title")
        if not slug or not title:
            raise ValidationError(message="Slug and title are required")
        slug = self.validate_slug(slug)

        now = utc_timestamp()
        document = {
            "id": f"page-{epoch_millis()}",
            "slug": slug,
            "title": title,
            "description": payload.get("description") or "",
            "isPublished": payload.get("isPublished") or False,
            "sections": payload.get("sections") or [],
            "order": payload.get("order") or 0,
            "createdAt": now,
            "updatedAt": now,
        }

        try:
            await self._write_document(self.path_for(slug), document, exclusive=True)
        except FileExistsError:
            raise ValidationError(message="Page with this slug already exists", field="slug")

        logger.info("Page created: %s", slug)
        return document

    @error_boundary("Failed to update page", error_cls=FileStorageError, expose_detail=False)
    async def update_page(self, slug: Any, updates: Dict[str, Any]) -> Dict[str, Any]:
        """
        Shallow-merge `updates` over the stored document and stamp updatedAt.

        When updates carry a different slug the document moves to the new
        file; the old one is removed only after the new one is written.

        Raises:
            ValidationError: bad slug, or the new slug is already taken
            NotFoundError:   no document for `slug`
        """
        slug = self.validate_slug(slug)
        current_path = self.path_for(slug)
        try:
            existing = await self._read_document(current_path)
        except FileNotFoundError:
            raise NotFoundError(resource="Page", resource_id=slug)

        updated = {**existing, **updates, "updatedAt": utc_timestamp()}

        new_slug = updates.get("slug")
        if new_slug and new_slug != slug:
            new_slug = self.validate_slug(new_slug)
            try:
                await self._write_document(self.path_for(new_slug), updated, exclusive=True)
            except FileExistsError:
                raise ValidationError(message="Page with this slug already exists", field="slug")
            await aiofiles.os.remove(current_path)
            logger.info("Page renamed: %s -> %s", slug, new_slug)
        else:
            await self._write_document(current_path, updated)
            logger.info("Page updated: %s", slug)

        return updated

    @error_boundary("Failed to delete page", error_cls=FileStorageError, expose_detail=False)
    async def delete_page(self, slug: Any) -> None:
        """
        Raises:
            ValidationError: bad slug (400)
            NotFoundError:   nothing stored under this slug (404)
        """
        slug = self.validate_slug(slug)
        try:
            await aiofiles.os.remove(self.path_for(slug))
        except FileNotFoundError:
            raise NotFoundError(resource="Page", resource_id=slug)
        logger.info("Page deleted: %s", slug)


# ── Singleton Instance ────────────────────────────────────────────────────
page_store = PageStore()


def get_page_store() -> PageStore:
    return page_store
