"""
Adaptateur Stripe: centralise les appels et la configuration Stripe.
Les objets Stripe sont convertis en dict à la frontière (to_plain) pour que le
reste du code (et les tests) manipule des structures simples.
"""
import stripe
from typing import Any, Dict, List, Optional
from backend import config

# module backend.payments.stripe_client
def require_stripe():
    """
    Prépare et retourne le module stripe prêt à l'emploi.
    - Configure stripe.api_key via STRIPE_SECRET_KEY.
    - La présence de la clé est vérifiée au démarrage (config.require_settings).
    """
    if config.STRIPE_SECRET_KEY:
        stripe.api_key = config.STRIPE_SECRET_KEY
    return stripe

def to_plain(obj: Any) -> Dict[str, Any]:
    """Convertit récursivement un objet Stripe en dict (dict inchangé, None -> {})."""
    if obj is None:
        return {}
    if isinstance(obj, dict) and not isinstance(obj, stripe.StripeObject):
        return obj
    to_dict = getattr(obj, "to_dict_recursive", None) or getattr(obj, "to_dict", None)
    if callable(to_dict):
        return to_dict()
    return dict(obj)

def create_session(
    *,
    line_items: List[Dict[str, Any]],
    success_url: str,
    cancel_url: str,
    metadata: Dict[str, str],
    customer: Optional[str] = None,
    allowed_countries: Optional[List[str]] = None,
) -> Dict[str, Any]:
    """
    Crée une session Stripe Checkout (mode paiement, carte).
    - customer: identifiant du client Stripe résolu
    - allowed_countries: liste blanche des pays de livraison
    Retour: dict session (ex: {"id": "cs_test_...", "url": "https://..."})
    """
    require_stripe()
    params: Dict[str, Any] = {
        "mode": "payment",
        "payment_method_types": ["card"],
        "line_items": line_items,
        "success_url": success_url,
        "cancel_url": cancel_url,
        "metadata": metadata,
    }
    if customer:
        params["customer"] = customer
    if allowed_countries:
        params["shipping_address_collection"] = {"allowed_countries": list(allowed_countries)}
    session = stripe.checkout.Session.create(**params)
    return to_plain(session)

def get_session(session_id: str, expand: Optional[List[str]] = None) -> Dict[str, Any]:
    """
    Récupère une session Stripe Checkout par son identifiant.
    Retour: dict session incluant "id", "payment_status", "payment_intent", "metadata", etc.
    """
    require_stripe()
    if expand:
        session = stripe.checkout.Session.retrieve(session_id, expand=expand)
    else:
        session = stripe.checkout.Session.retrieve(session_id)
    return to_plain(session)

def list_line_items(session_id: str, limit: int = 100) -> List[Dict[str, Any]]:
    """Lignes réellement payées d'une session (montants en centimes, ordre de création)."""
    require_stripe()
    res = stripe.checkout.Session.list_line_items(session_id, limit=limit)
    return list(to_plain(res).get("data") or [])

def list_customers(*, email: str, limit: int = 1) -> List[Dict[str, Any]]:
    require_stripe()
    res = stripe.Customer.list(email=email, limit=limit)
    return list(to_plain(res).get("data") or [])

def create_customer(*, email: str, name: str, metadata: Dict[str, str]) -> Dict[str, Any]:
    require_stripe()
    customer = stripe.Customer.create(email=email, name=name, metadata=metadata)
    return to_plain(customer)

def construct_event(payload: bytes, sig_header: str) -> Dict[str, Any]:
    """
    Valide la signature d'un événement webhook (STRIPE_WEBHOOK_SECRET) et le retourne en dict.
    Lève stripe.SignatureVerificationError (ou ValueError si le payload est illisible).
    """
    require_stripe()
    event = stripe.Webhook.construct_event(payload, sig_header, config.STRIPE_WEBHOOK_SECRET)
    return to_plain(event)
