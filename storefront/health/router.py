from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from storefront.health import service as health_service
from storefront.utils.rate_limit import rate_limit_health_info

router = APIRouter(prefix="/health", tags=["Health"])

@router.get("")
def health_root():
    return {"ok": True}

@router.get("/dependencies")
def health_dependencies(request: Request):
    return JSONResponse({
        "supabase": health_service.health_supabase_info(),
        "payments": health_service.health_payments_info(),
        "rate_limit": rate_limit_health_info(request),
    })
