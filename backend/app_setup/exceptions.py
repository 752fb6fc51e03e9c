"""
Gestionnaires d'exceptions.
- 401 sur une page HTML (hors /api/*): redirection vers l'accueil.
- Sinon réponse JSON {"detail": ...} pour les clients API.
"""
from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse, RedirectResponse
from starlette.status import HTTP_303_SEE_OTHER

def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(HTTPException)
    async def redirect_html_on_auth_errors(request: Request, exc: HTTPException):
        if exc.status_code == 401:
            accept = (request.headers.get("accept") or "").lower()
            is_api = request.url.path.startswith("/api/")
            if "text/html" in accept and not is_api:
                return RedirectResponse(url="/", status_code=HTTP_303_SEE_OTHER)
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail}, headers=getattr(exc, "headers", None))
