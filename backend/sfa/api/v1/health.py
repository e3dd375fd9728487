from fastapi import APIRouter

router = APIRouter()


@router.get("/health", summary="Liveness check")
def health():
    return {"status": "ok"}
