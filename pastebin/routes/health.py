"""
Health check route.
"""
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from pastebin.database import PasteStore
from pastebin.dependencies import get_store
from pastebin.models import HealthCheck

router = APIRouter()


@router.get("/healthz", response_model=HealthCheck)
def health_check(store: PasteStore = Depends(get_store)):
    """
    Health check endpoint.
    Returns 200 with ok=true if the storage backend answers, 500 with ok=false otherwise.
    """
    if store.is_healthy():
        return HealthCheck(ok=True)
    return JSONResponse(status_code=500, content={"ok": False})
