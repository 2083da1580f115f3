from fastapi import APIRouter

router = APIRouter(tags=["health"])


@router.get("/health")
async def health() -> dict[str, bool]:
    """Liveness probe. The service holds no external connections, so it is ready once it runs."""
    return {"ok": True}
