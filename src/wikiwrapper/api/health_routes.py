from fastapi import APIRouter

from .models import HealthResponse
from ..config import settings

router = APIRouter(tags=["health"])

@router.get("/health", response_model=HealthResponse)
def health():
    return HealthResponse(status="ok", wiki_api=str(settings.wiki_api_url))
