"""
Sérialisation/désérialisation des métadonnées Stripe de la session Checkout.

Les métadonnées sont le seul canal par lequel le webhook retrouve l'intention
de commande. Stripe n'accepte que des chaînes: product_ids et quantities sont
des listes jointes par des virgules, alignées par position.
"""
from typing import Any, Dict, List, Sequence, Tuple

REQUIRED_KEYS = ("user_id", "product_ids", "quantities")
SEPARATOR = ","

# module backend.payments.metadata
class MetadataError(ValueError):
    """Métadonnées de session illisibles (listes désalignées, quantité non entière)."""

def encode_metadata(
    *,
    user_id: str,
    email: str,
    customer_id: str,
    product_ids: Sequence[str],
    quantities: Sequence[int],
) -> Dict[str, str]:
    """
    Construit le dict de métadonnées.
    - product_ids ne doivent pas contenir de virgule (encodage positionnel)
    """
    if len(product_ids) != len(quantities):
        raise ValueError("product_ids et quantities doivent avoir la même longueur")
    for pid in product_ids:
        if SEPARATOR in str(pid):
            raise ValueError(f"Identifiant produit invalide (virgule): {pid!r}")
    return {
        "user_id": user_id,
        "user_email": email or "",
        "customer_id": customer_id or "",
        "product_ids": SEPARATOR.join(str(p) for p in product_ids),
        "quantities": SEPARATOR.join(str(int(q)) for q in quantities),
    }

def has_required_metadata(metadata: Dict[str, Any]) -> bool:
    meta = metadata or {}
    return all(meta.get(k) for k in REQUIRED_KEYS)

def missing_keys(metadata: Dict[str, Any]) -> List[str]:
    meta = metadata or {}
    return [k for k in REQUIRED_KEYS if not meta.get(k)]

def decode_items(product_ids: str, quantities: str) -> List[Tuple[str, int]]:
    """
    "p1,p2" / "2,3" -> [("p1", 2), ("p2", 3)]
    Lève MetadataError si les listes sont désalignées ou si une quantité n'est pas un entier.
    """
    ids = [p.strip() for p in (product_ids or "").split(SEPARATOR)]
    raw_qty = [q.strip() for q in (quantities or "").split(SEPARATOR)]
    if len(ids) != len(raw_qty):
        raise MetadataError(f"{len(ids)} produits pour {len(raw_qty)} quantités")
    try:
        qty = [int(q) for q in raw_qty]
    except ValueError as e:
        raise MetadataError(f"Quantité invalide: {quantities!r}") from e
    return list(zip(ids, qty))

def decode_metadata(metadata: Dict[str, Any]) -> Tuple[str, str, str, List[Tuple[str, int]]]:
    """Extrait (user_id, email, customer_id, [(product_id, quantity), ...])."""
    meta = metadata or {}
    pairs = decode_items(meta.get("product_ids") or "", meta.get("quantities") or "")
    return (
        str(meta.get("user_id") or ""),
        str(meta.get("user_email") or ""),
        str(meta.get("customer_id") or ""),
        pairs,
    )
