"""
Image provider API endpoints.

Routes: GET /providers, GET /providers/{provider}/account

Dependencies: storyboard.application.services.image_service, storyboard.models
System role: Provider status HTTP API
"""

from fastapi import APIRouter, Depends

from storyboard.api.deps import get_image_service
from storyboard.api.routers.router_utils import handle_storyboard_errors
from storyboard.application.services.image_service import ImageService
from storyboard.models.provider import (
    ProviderAccountResponse,
    ProviderInfoResponse,
    ProvidersResponse,
)

router = APIRouter(prefix="/providers", tags=["providers"])


@router.get("", response_model=ProvidersResponse)
async def list_providers(
    image_service: ImageService = Depends(get_image_service),
) -> ProvidersResponse:
    """List every image provider with its availability."""
    providers = {
        key: ProviderInfoResponse(
            name=info.name,
            available=info.available,
            description=info.description,
        )
        for key, info in image_service.provider_info().items()
    }
    return ProvidersResponse(
        providers=providers,
        available=image_service.available_providers(),
    )


@router.get("/{provider}/account", response_model=ProviderAccountResponse)
@handle_storyboard_errors
async def get_provider_account(
    provider: str,
    image_service: ImageService = Depends(get_image_service),
) -> ProviderAccountResponse:
    """
    Get account details (e.g. remaining NanoBanana credits).

    Raises:
        HTTPException(400): Unknown or unconfigured provider
        HTTPException(502): Provider account endpoint failed
    """
    account = await image_service.get_account_info(provider)
    return ProviderAccountResponse(provider=provider, account=account)
