"""
Storefront Backend — Page Route Handlers
==========================================

What:  CRUD endpoints for the file-backed page documents.
How:   Bodies are accepted as free-form JSON objects; PageStore enforces the
       slug rules and the required fields.
"""

from typing import Any, Dict, List

from fastapi import APIRouter, Body, Depends, status

from storefront.schemas.common import ErrorResponse, MessageResponse
from storefront.services.page_store import PageStore, get_page_store

router = APIRouter(prefix="/pages", tags=["Pages"])

SLUG_RESPONSES = {
    400: {"description": "Invalid slug", "model": ErrorResponse},
    404: {"description": "Page not found", "model": ErrorResponse},
    500: {"description": "Storage failure", "model": ErrorResponse},
}


@router.get("", response_model=List[Dict[str, Any]], summary="List pages")
async def list_pages(store: PageStore = Depends(get_page_store)) -> List[Dict[str, Any]]:
    """Pages ordered by `order`, falling back to newest first."""
    return await store.list_pages()


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    response_model=Dict[str, Any],
    responses={400: {"description": "Missing fields, bad or taken slug", "model": ErrorResponse}},
    summary="Create a page",
)
async def create_page(
    payload: Dict[str, Any] = Body(...),
    store: PageStore = Depends(get_page_store),
) -> Dict[str, Any]:
    return await store.create_page(payload)


@router.get("/{slug}", response_model=Dict[str, Any], responses=SLUG_RESPONSES, summary="Get a page")
async def get_page(slug: str, store: PageStore = Depends(get_page_store)) -> Dict[str, Any]:
    return await store.get_page(slug)


@router.put("/{slug}", response_model=Dict[str, Any], responses=SLUG_RESPONSES, summary="Update a page")
async def update_page(
    slug: str,
    updates: Dict[str, Any] = Body(...),
    store: PageStore = Depends(get_page_store),
) -> Dict[str, Any]:
    """Shallow merge; a changed `slug` moves the document to its new name."""
    return await store.update_page(slug, updates)


@router.delete("/{slug}", response_model=MessageResponse, responses=SLUG_RESPONSES, summary="Delete a page")
async def delete_page(slug: str, store: PageStore = Depends(get_page_store)) -> MessageResponse:
    await store.delete_page(slug)
    return MessageResponse(message="Page deleted successfully")
