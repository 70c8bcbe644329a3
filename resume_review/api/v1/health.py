from fastapi import APIRouter

from resume_review.core.config import settings
from resume_review.core.profiles import load_profiles

router = APIRouter()

@router.get("/health", summary="Health Check", description="Check the health status of the application.")
async def health_check():
    return {
        "status": "healthy",
        "provider": settings.ai_provider,
        "profiles": sorted(load_profiles()),
    }
