# module storefront.utils.csrf
from fastapi import FastAPI, Request
from fastapi.responses import Response, JSONResponse
import secrets
from storefront.config import COOKIE_SECURE
from storefront.utils.security import COOKIE_NAME

CSRF_COOKIE_NAME = "csrf_token"
CSRF_HEADER_NAME = "X-CSRF-Token"
CSRF_EXEMPT_PREFIXES = ("/health",)

def attach_csrf_cookie_if_missing(response: Response, request: Request, token: str) -> None:
    """
    Pose le cookie CSRF si absent (lisible par le front pour le renvoyer en en-tête).
    """
    if not request.cookies.get(CSRF_COOKIE_NAME):
        response.set_cookie(
            key=CSRF_COOKIE_NAME,
            value=token,
            httponly=False,
            secure=COOKIE_SECURE,
            samesite="Lax",
            max_age=60 * 60,
            path="/",
        )

def register_csrf_middleware(app: FastAPI) -> None:
    """
    Double-submit cookie: sur les requêtes mutatives portant le cookie de session,
    l'en-tête X-CSRF-Token doit égaler le cookie csrf_token.
    Les clients API en Bearer (sans cookie de session) ne sont pas concernés.
    """
    @app.middleware("http")
    async def csrf_protection(request: Request, call_next):
        method = request.method.upper()
        path = request.url.path.rstrip("/") or "/"
        has_session = bool(request.cookies.get(COOKIE_NAME))
        is_state_changing = method in ("POST", "PUT", "PATCH", "DELETE")
        is_exempt = path.startswith(CSRF_EXEMPT_PREFIXES)

        token = request.cookies.get(CSRF_COOKIE_NAME) or secrets.token_urlsafe(32)

        if is_state_changing and has_session and not is_exempt:
            cookie_token = request.cookies.get(CSRF_COOKIE_NAME, "")
            provided = request.headers.get(CSRF_HEADER_NAME, "")
            if not cookie_token or not provided or not secrets.compare_digest(provided, cookie_token):
                return JSONResponse(status_code=403, content={"detail": "CSRF verification failed"})

        response = await call_next(request)
        attach_csrf_cookie_if_missing(response, request, token)
        return response
