"""Admin API endpoints."""

from fastapi import APIRouter

router = APIRouter(tags=["admin"])


@router.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "service": "backend"}
