from fastapi import APIRouter

from resume_tailor.api.deps import get_resume_generator, get_record_store

router = APIRouter()

@router.get("/health", summary="Health Check", description="Check the health status of the application.")
async def health_check():
    return {
        "status": "healthy",
        "record_store": get_record_store() is not None,
        "ai_mode": "demo" if get_resume_generator().is_demo else "live",
    }
