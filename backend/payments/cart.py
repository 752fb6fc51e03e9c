"""
Logique panier pure (pas de Stripe, pas de DB).
Le panier envoyé par le client n'est jamais cru sur parole: seuls l'identifiant
produit et la quantité sont utilisés, le prix et le stock viennent du catalogue.
"""
from typing import Any, Dict, List, NamedTuple, Optional, Tuple
from pydantic import BaseModel, Field
from backend import config

# module backend.payments.cart
class CartItem(BaseModel):
    product_id: str = Field(..., min_length=1)
    name: str = ""
    price: float = 0
    quantity: int = Field(..., ge=1)
    image: Optional[str] = None

class CheckoutRequest(BaseModel):
    items: List[CartItem] = []

class ValidatedItem(NamedTuple):
    product: Dict[str, Any]
    quantity: int

def price_from_product(product: Dict[str, Any]) -> float:
    """
    Prix unitaire du catalogue (float).
    - Autorise product.get("price") à être str|float|int.
    - Retourne 0.0 si parsing impossible.
    """
    try:
        return float(product.get("price") or 0)
    except (TypeError, ValueError):
        return 0.0

def _stock(product: Dict[str, Any]) -> int:
    try:
        return int(product.get("stock") or 0)
    except (TypeError, ValueError):
        return 0

def validate_cart(items: List[CartItem], products_by_id: Dict[str, Dict[str, Any]]) -> Tuple[List[ValidatedItem], List[str]]:
    """
    Confronte chaque ligne du panier au catalogue.
    - Toutes les lignes sont examinées: les erreurs sont cumulées (pas d'arrêt à la première).
    - Retour: (lignes validées, messages d'erreur)
    """
    validated: List[ValidatedItem] = []
    errors: List[str] = []
    for item in items:
        product = products_by_id.get(item.product_id)
        if not product:
            errors.append(f"Le produit « {item.name or item.product_id} » n'est plus disponible")
            continue
        name = product.get("name") or item.name
        stock = _stock(product)
        if stock <= 0:
            errors.append(f"« {name} » est en rupture de stock")
            continue
        if item.quantity > stock:
            errors.append(f"Seulement {stock} « {name} » disponible(s)")
            continue
        validated.append(ValidatedItem(product, item.quantity))
    return validated, errors

def join_errors(errors: List[str]) -> str:
    return ". ".join(errors)

def to_minor_units(amount: float) -> int:
    """Montant -> centimes (arrondi)."""
    return int(round(amount * 100))

def to_line_items(validated: List[ValidatedItem]) -> List[Dict[str, Any]]:
    """
    Construit les line_items Stripe avec le prix vérifié côté serveur.
    - unit_amount en centimes, nom et image issus du catalogue
    - product_data.metadata.product_id pour relier la ligne au produit
    """
    line_items: List[Dict[str, Any]] = []
    for product, quantity in validated:
        image = product.get("image_url")
        line_items.append({
            "quantity": quantity,
            "price_data": {
                "currency": config.STRIPE_CURRENCY,
                "unit_amount": to_minor_units(price_from_product(product)),
                "product_data": {
                    "name": product.get("name") or "Produit",
                    "images": [image] if image else [],
                    "metadata": {"product_id": str(product.get("id"))},
                },
            },
        })
    return line_items
