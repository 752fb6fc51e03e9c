"""
Lancement local de la boutique: python -m backend

- PORT (8000), UVICORN_RELOAD ("1"/"true"/"yes"), LOG_LEVEL ("info")
- Les journaux applicatifs (backend.*, dont [webhook] et [fallback]) suivent LOG_LEVEL.
"""
import logging
import os

import uvicorn

if __name__ == "__main__":
    log_level = os.environ.get("LOG_LEVEL", "info").lower()
    logging.basicConfig(
        level=log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    uvicorn.run(
        "backend.asgi:app",
        host="0.0.0.0",
        port=int(os.environ.get("PORT", 8000)),
        reload=os.environ.get("UVICORN_RELOAD", "").lower() in ("1", "true", "yes"),
        log_level=log_level,
    )
