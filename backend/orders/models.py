# module backend.orders.models
"""Construction d'une commande à partir d'une session Stripe Checkout (logique pure)."""
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence, Tuple
import secrets
import string
import time

_BASE36 = string.digits + string.ascii_uppercase


class ReconcileStatus(str, Enum):
    CREATED = "created"
    EXISTS = "exists"
    SKIPPED = "skipped"


@dataclass
class ReconcileResult:
    status: ReconcileStatus
    order: Optional[Dict[str, Any]] = None
    reason: str = ""


def _base36(n: int) -> str:
    if n == 0:
        return "0"
    out = []
    while n:
        n, r = divmod(n, 36)
        out.append(_BASE36[r])
    return "".join(reversed(out))


def generate_order_number(now_ms: Optional[int] = None) -> str:
    """
    Numéro lisible: ORD-<horodatage base36>-<4 caractères aléatoires>.
    Libellé d'affichage uniquement; l'identité d'une commande est stripe_payment_id.
    """
    ts = now_ms if now_ms is not None else int(time.time() * 1000)
    suffix = "".join(secrets.choice(_BASE36) for _ in range(4))
    return f"ORD-{_base36(ts)}-{suffix}"


def payment_intent_id(session: Dict[str, Any]) -> str:
    """payment_intent peut être un identifiant ou un objet étendu."""
    pi = (session or {}).get("payment_intent")
    if isinstance(pi, dict):
        pi = pi.get("id")
    return str(pi or "")


def from_minor_units(amount: Any) -> float:
    try:
        return int(amount or 0) / 100
    except (TypeError, ValueError):
        return 0.0


def extract_address(session: Dict[str, Any]) -> Optional[Dict[str, str]]:
    """
    Adresse de livraison depuis customer_details (repli: shipping_details).
    Tous les champs sont optionnels et valent "" par défaut; None si aucune adresse.
    """
    details = session.get("customer_details") or {}
    address = details.get("address")
    name = details.get("name")
    if not address:
        shipping = session.get("shipping_details") or (session.get("collected_information") or {}).get("shipping_details") or {}
        address = shipping.get("address")
        name = name or shipping.get("name")
    if not address:
        return None
    return {
        "name": name or "",
        "line1": address.get("line1") or "",
        "line2": address.get("line2") or "",
        "city": address.get("city") or "",
        "postcode": address.get("postal_code") or "",
        "country": address.get("country") or "",
    }


def build_order_items(pairs: Sequence[Tuple[str, int]], line_items: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """
    Associe chaque (produit, quantité) à la ligne Stripe de même rang.
    price_at_purchase = montant payé pour la ligne (indépendant du prix catalogue actuel).
    """
    items = []
    for index, (product_id, quantity) in enumerate(pairs):
        paid = line_items[index].get("amount_total") if index < len(line_items) else None
        items.append({
            "key": f"item-{index}",
            "product_id": product_id,
            "quantity": quantity,
            "price_at_purchase": from_minor_units(paid),
        })
    return items


def build_order(
    session: Dict[str, Any],
    *,
    user_id: str,
    email: str,
    customer_id: str,
    pairs: Sequence[Tuple[str, int]],
    line_items: List[Dict[str, Any]],
) -> Dict[str, Any]:
    details = session.get("customer_details") or {}
    return {
        "order_number": generate_order_number(),
        "customer_id": customer_id or None,
        "auth_user_id": user_id,
        "email": email or details.get("email") or "",
        "items": build_order_items(pairs, line_items),
        "total": from_minor_units(session.get("amount_total")),
        "status": "paid",
        "stripe_payment_id": payment_intent_id(session),
        "address": extract_address(session),
        "created_at": datetime.now(timezone.utc).isoformat(),
    }
