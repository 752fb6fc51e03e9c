"""
Registre central des routers (API v1, webhooks, health).
"""
from fastapi import FastAPI
from backend.catalog import views as catalog_views
from backend.payments import views as payments_views
from backend.orders import views as orders_views
from backend.health.router import router as health_router

def register_routers(app: FastAPI) -> None:
    # API v1
    app.include_router(catalog_views.router)
    app.include_router(payments_views.router)
    app.include_router(orders_views.router)
    # Webhooks (sans authentification, signature Stripe)
    app.include_router(orders_views.webhook_router)
    # Health & monitoring
    app.include_router(health_router)
