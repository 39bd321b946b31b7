from fastapi import APIRouter

from domain_switcher.models.api import HealthResponse

router = APIRouter()


@router.api_route("/health", methods=["GET", "HEAD"], response_model=HealthResponse, tags=["Health"])
async def health_check():
    return HealthResponse(status="ok", message="Service is healthy")
