"""
Storefront Backend — Settings Route Handlers
==============================================

What:  Read and replace the branding settings document.
How:   No authentication is applied here; deployments are expected to put the
       admin surface behind their own gateway.
"""

from typing import Any, Dict

from fastapi import APIRouter, Body, Depends

from storefront.schemas.common import BrandingSaveResponse, ErrorResponse
from storefront.services.branding_service import BrandingService, get_branding_service

router = APIRouter(prefix="/settings", tags=["Settings"])


@router.get("/branding", response_model=Dict[str, Any], summary="Get branding settings")
async def get_branding(service: BrandingService = Depends(get_branding_service)) -> Dict[str, Any]:
    """Stored settings, or the built-in defaults when none were saved."""
    return await service.get_settings()


@router.put(
    "/branding",
    response_model=BrandingSaveResponse,
    responses={
        400: {"description": "businessName missing", "model": ErrorResponse},
        500: {"description": "Failed to save settings", "model": ErrorResponse},
    },
    summary="Replace branding settings",
)
async def save_branding(
    branding: Dict[str, Any] = Body(...),
    service: BrandingService = Depends(get_branding_service),
) -> BrandingSaveResponse:
    saved = await service.save_settings(branding)
    return BrandingSaveResponse(success=True, settings=saved)
