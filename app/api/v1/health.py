from fastapi import APIRouter, Request

router = APIRouter()


@router.get("/health", summary="Health Check", description="Check the health status of the application.")
async def health_check(request: Request):
    registry = getattr(request.app.state, "sessions", None)
    return {
        "status": "healthy",
        "remote_store": bool(registry and registry.remote_enabled),
    }
