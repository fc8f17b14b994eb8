from fastapi import APIRouter

router = APIRouter(prefix="/api")  # group of routes


@router.get("/health")  # tiny health check
def health():
    return {"status": "ok", "message": "FinanceFlow API is running"}
