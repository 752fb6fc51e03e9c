import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends

from backend.utils.security import optional_user
from backend.utils.rate_limit import optional_rate_limit
from backend.payments import service as payments_service
from backend.payments.cart import CheckoutRequest

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/checkout", tags=["Checkout API"])

# module backend.payments.views
@router.post("/session", dependencies=[Depends(optional_rate_limit(times=10, seconds=60))])
async def create_checkout_session(body: CheckoutRequest, user: Optional[Dict[str, Any]] = Depends(optional_user)):
    """
    Crée une session Checkout Stripe pour le panier courant.
    - Entrée JSON: { "items": [ { "product_id": "...", "name": "...", "price": 10, "quantity": 2 }, ... ] }
    - Le prix et le stock sont relus dans le catalogue; le prix client est ignoré
    - Retour (toujours 200): {"success": true, "url": "..."} ou {"success": false, "error": "..."}
    """
    return payments_service.create_checkout_session(user, body.items)


@router.get("/session")
async def get_checkout_session(session_id: str, user: Optional[Dict[str, Any]] = Depends(optional_user)):
    """
    Détail de la session pour la page de succès (et rattrapage de la commande si besoin).
    - Retour: {"success": true, "session": {...}} ou {"success": false, "error": "..."}
    """
    return payments_service.get_checkout_session(session_id, user)
