# module backend.orders.views

"""Endpoints des commandes.
- /api/v1/webhooks/stripe (POST): reçoit les événements Stripe signés et crée la commande.
- /api/v1/webhooks/stripe (GET): vérification que l'endpoint est actif.
- /api/v1/orders: historique des commandes de l'utilisateur connecté.
Codes webhook:
- 400: signature absente/invalide (aucun traitement)
- 500: erreur rejouable (Stripe relivrera l'événement)
- 200 {"received": true}: traité, ignoré, ou erreur d'authentification du store (non rejouable)
"""
from datetime import datetime, timezone
from typing import Any, Dict
import logging

import stripe
from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import JSONResponse

from backend.infra.errors import is_auth_error
from backend.orders import service as orders_service
from backend.payments import stripe_client
from backend.utils.security import require_user

logger = logging.getLogger(__name__)
webhook_router = APIRouter(prefix="/api/v1/webhooks", tags=["Webhooks"])
router = APIRouter(prefix="/api/v1/orders", tags=["Commandes API"])


@webhook_router.post("/stripe", include_in_schema=False)
async def stripe_webhook(request: Request):
    """Webhook Stripe: la signature est vérifiée avant toute lecture/écriture en base."""
    payload = await request.body()
    signature = request.headers.get("stripe-signature")
    if not signature:
        logger.error("[webhook] en-tête stripe-signature manquant")
        return JSONResponse(status_code=400, content={"error": "En-tête stripe-signature manquant"})

    try:
        event = stripe_client.construct_event(payload, signature)
    except (stripe.SignatureVerificationError, ValueError) as e:
        logger.error("[webhook] vérification de signature échouée: %s", e)
        return JSONResponse(status_code=400, content={"error": f"Webhook invalide: {e}"})

    logger.info("[webhook] événement vérifié type=%s id=%s", event.get("type"), event.get("id"))
    try:
        orders_service.handle_webhook_event(event)
    except Exception as e:
        if is_auth_error(e):
            # Un nouvel essai ne corrigera pas une clé invalide: on acquitte
            logger.error("[webhook] authentification Supabase refusée (%s), vérifier SUPABASE_SERVICE_KEY", e)
            return {"received": True}
        logger.exception("[webhook] erreur de traitement event=%s", event.get("id"))
        return JSONResponse(status_code=500, content={"error": "Erreur de traitement du webhook"})
    return {"received": True}


@webhook_router.get("/stripe", include_in_schema=False)
def stripe_webhook_health():
    return {
        "status": "ok",
        "message": "Endpoint webhook Stripe actif",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


@router.get("")
def list_orders(user: Dict[str, Any] = Depends(require_user)) -> Dict[str, Any]:
    """Commandes de l'utilisateur connecté, plus récentes d'abord."""
    return {"orders": orders_service.list_user_orders(user.get("id"))}


@router.get("/{order_id}")
def get_order(order_id: str, user: Dict[str, Any] = Depends(require_user)) -> Dict[str, Any]:
    """Détail d'une commande; 404 si elle n'appartient pas à l'utilisateur."""
    order = orders_service.get_user_order(order_id, user.get("id"))
    if not order:
        raise HTTPException(status_code=404, detail="Commande introuvable")
    return order
