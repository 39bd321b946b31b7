from fastapi import APIRouter, Depends, Response

from domain_switcher.core.dependencies import get_asset_service
from domain_switcher.services.asset_service import AssetService

router = APIRouter()


@router.get("/{path:path}", tags=["Assets"])
async def serve_asset(path: str, asset_service: AssetService = Depends(get_asset_service)):
    asset = await asset_service.serve("/" + path)
    headers = {"X-Served-From": "cache" if asset.from_cache else "network"}
    return Response(content=asset.body, status_code=asset.status_code, media_type=asset.media_type, headers=headers)
