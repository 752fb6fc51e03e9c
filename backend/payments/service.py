"""
Cas d'usage 'payments': orchestre catalogue, panier, client Stripe, métadonnées.

Les deux fonctions publiques retournent un résultat structuré
({"success": True, ...} / {"success": False, "error": "..."}): les erreurs de
validation ne franchissent jamais la frontière sous forme d'exception.
"""
from typing import Any, Dict, List, Optional
import logging

from backend import config
from backend.catalog import repository as catalog_repo
from backend.customers.service import resolve_customer
from backend.orders import service as orders_service
from . import cart as cart_logic
from . import metadata as meta
from . import stripe_client

logger = logging.getLogger(__name__)

SIGN_IN_REQUIRED = "Veuillez vous connecter pour passer commande"
EMPTY_CART = "Votre panier est vide"
GENERIC_ERROR = "Une erreur est survenue. Veuillez réessayer."
SESSION_NOT_FOUND = "Session introuvable"
SESSION_UNAVAILABLE = "Impossible de récupérer les détails de la commande"


def _fail(error: str) -> Dict[str, Any]:
    return {"success": False, "error": error}


def checkout_urls(base_url: Optional[str] = None) -> Dict[str, str]:
    base = (base_url or config.get_base_url()).rstrip("/")
    return {
        "success_url": f"{base}{config.CHECKOUT_SUCCESS_PATH}?session_id={{CHECKOUT_SESSION_ID}}",
        "cancel_url": f"{base}{config.CHECKOUT_CANCEL_PATH}",
    }


def create_checkout_session(user: Optional[Dict[str, Any]], items: List[cart_logic.CartItem]) -> Dict[str, Any]:
    """
    Prépare la session Stripe à partir de l'utilisateur et du panier.
    Étapes:
      1) utilisateur authentifié
      2) panier non vide
      3) chaque ligne revalidée contre le catalogue (existence, stock, prix serveur); erreurs cumulées
      4) line_items au prix du catalogue
      5) résolution du client (Stripe + fiche customers)
      6) métadonnées de rapprochement (user, email, fiche client, produits/quantités alignés)
      7) session Stripe avec liste blanche de pays de livraison
    Aucun effet sur les commandes ni le stock.
    """
    if not user or not user.get("id"):
        return _fail(SIGN_IN_REQUIRED)
    if not items:
        return _fail(EMPTY_CART)

    try:
        products = catalog_repo.get_products_map(item.product_id for item in items)
        validated, errors = cart_logic.validate_cart(items, products)
        if errors:
            return _fail(cart_logic.join_errors(errors))

        line_items = cart_logic.to_line_items(validated)

        email = user.get("email") or ""
        name = user.get("name") or email
        customer = resolve_customer(email, name, user["id"])

        metadata = meta.encode_metadata(
            user_id=user["id"],
            email=email,
            customer_id=customer.customer_id,
            product_ids=[str(v.product.get("id")) for v in validated],
            quantities=[v.quantity for v in validated],
        )

        session = stripe_client.create_session(
            line_items=line_items,
            customer=customer.stripe_customer_id,
            allowed_countries=config.SHIPPING_COUNTRIES,
            metadata=metadata,
            **checkout_urls(),
        )
        logger.info("payments.checkout session=%s user_id=%s lines=%d", session.get("id"), user["id"], len(line_items))
        return {"success": True, "url": session.get("url")}
    except Exception:
        logger.exception("Erreur create_checkout_session user_id=%s", user.get("id"))
        return _fail(GENERIC_ERROR)


def summarize_session(session: Dict[str, Any]) -> Dict[str, Any]:
    """Champs affichés sur la page de succès (montants en centimes, comme Stripe)."""
    details = session.get("customer_details") or {}
    line_items = (session.get("line_items") or {}).get("data") or []
    return {
        "id": session.get("id"),
        "customer_email": details.get("email"),
        "customer_name": details.get("name"),
        "amount_total": session.get("amount_total"),
        "payment_status": session.get("payment_status"),
        "shipping_address": details.get("address"),
        "line_items": [
            {"name": li.get("description"), "quantity": li.get("quantity"), "amount": li.get("amount_total")}
            for li in line_items
        ],
    }


def get_checkout_session(session_id: str, user: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """
    Page de succès: lit la session Stripe et rattrape la commande si le webhook n'est pas passé.
    - La session doit appartenir à l'utilisateur courant (sinon « introuvable »)
    - Paiement confirmé: rapprochement inline, best-effort (erreurs journalisées, jamais remontées)
    """
    if not user or not user.get("id"):
        return _fail("Non authentifié")
    if not session_id:
        return _fail(SESSION_NOT_FOUND)

    try:
        session = stripe_client.get_session(session_id, expand=["line_items"])
    except Exception:
        logger.exception("Erreur get_checkout_session session=%s", session_id)
        return _fail(SESSION_UNAVAILABLE)

    if (session.get("metadata") or {}).get("user_id") != user["id"]:
        logger.warning("[fallback] session %s demandée par un autre utilisateur (%s)", session_id, user["id"])
        return _fail(SESSION_NOT_FOUND)

    if session.get("payment_status") == "paid":
        try:
            result = orders_service.reconcile_session(session, source="fallback")
            logger.info("[fallback] session=%s rapprochement=%s", session_id, result.status.value)
        except Exception:
            logger.exception("[fallback] échec du rapprochement session=%s", session_id)

    return {"success": True, "session": summarize_session(session)}
