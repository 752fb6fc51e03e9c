from fastapi import Request, FastAPI
from fastapi.responses import RedirectResponse
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.trustedhost import TrustedHostMiddleware
from starlette.status import HTTP_303_SEE_OTHER
from backend.config import COOKIE_SECURE, CORS_ORIGINS, ALLOWED_HOSTS, PROTECTED_PATHS
from backend.utils.security import has_session

"""
Middlewares transverses de l'application.
- register_basic_middlewares: CORS et TrustedHost.
- register_security_middleware: en-têtes de sécurité.
- register_protected_pages_middleware: pages de commande réservées aux utilisateurs connectés.
Notes:
- Le webhook Stripe (/api/v1/webhooks/stripe) n'est soumis à aucune de ces restrictions d'authentification.
"""
def register_basic_middlewares(app: FastAPI) -> None:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(
        TrustedHostMiddleware,
        allowed_hosts=ALLOWED_HOSTS + ["*"] if "*" in CORS_ORIGINS else ALLOWED_HOSTS,
    )

def register_security_middleware(app: FastAPI) -> None:
    @app.middleware("http")
    async def security_headers(request: Request, call_next):
        response = await call_next(request)
        response.headers.setdefault("X-Frame-Options", "DENY")
        response.headers.setdefault("X-Content-Type-Options", "nosniff")
        response.headers.setdefault("Referrer-Policy", "no-referrer")
        if COOKIE_SECURE:
            response.headers.setdefault("Strict-Transport-Security", "max-age=63072000; includeSubDomains; preload")
        return response

def is_protected_path(path: str) -> bool:
    """Pages du front uniquement: les routes /api/* gèrent l'authentification elles-mêmes."""
    path = path.rstrip("/") or "/"
    if path == "/api" or path.startswith("/api/"):
        return False
    return any(path == p or path.startswith(p + "/") for p in PROTECTED_PATHS)

def register_protected_pages_middleware(app: FastAPI) -> None:
    """
    Pages du front (retours Stripe /checkout et /checkout/success, /orders et /orders/<id>),
    servies sous la même URL publique que l'API: sans session, redirection vers l'accueil.
    Les API utilisent require_user (401 JSON).
    """
    @app.middleware("http")
    async def protect_pages(request: Request, call_next):
        if is_protected_path(request.url.path) and not has_session(request):
            return RedirectResponse(url="/", status_code=HTTP_303_SEE_OTHER)
        return await call_next(request)
