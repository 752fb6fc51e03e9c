"""
Accès aux données pour la table 'orders' et le décrément de stock.
- orders.stripe_payment_id est UNIQUE: clé d'idempotence d'une commande.
- Le décrément de stock passe par la fonction SQL decrement_stock(items jsonb),
  exécutée dans une seule transaction Postgres (tout ou rien pour une commande).
Les erreurs d'écriture sont converties en StoreError typées et propagées.
"""
from typing import Any, Dict, List, Optional, Sequence, Tuple
import logging
import backend.infra.supabase_client as supabase_client
from backend.infra.errors import classify_store_error

logger = logging.getLogger(__name__)

ORDER_COLUMNS = "id, order_number, customer_id, auth_user_id, email, items, total, status, stripe_payment_id, address, created_at"


def get_order_by_payment_id(stripe_payment_id: str) -> Optional[Dict[str, Any]]:
    """
    Garde d'idempotence: commande existante pour ce paiement, sinon None.
    Une erreur de lecture est propagée (impossible de conclure à l'absence).
    """
    try:
        res = (
            supabase_client.get_reader_supabase()
            .table("orders")
            .select(ORDER_COLUMNS)
            .eq("stripe_payment_id", stripe_payment_id)
            .limit(1)
            .execute()
        )
    except Exception as e:
        raise classify_store_error(e) from e
    rows = res.data or []
    return rows[0] if rows else None


def create_order(doc: Dict[str, Any]) -> Dict[str, Any]:
    """Insère la commande; DuplicateKeyError si stripe_payment_id existe déjà."""
    try:
        res = (
            supabase_client.get_service_supabase()
            .table("orders")
            .insert(doc)
            .execute()
        )
    except Exception as e:
        raise classify_store_error(e) from e
    rows = res.data or []
    return rows[0] if rows else dict(doc)


def decrement_stock(items: Sequence[Tuple[str, int]]) -> List[Dict[str, Any]]:
    """
    Décrémente le stock de chaque produit de la commande en une transaction.
    Retourne les lignes renvoyées par la fonction SQL (produits passés sous zéro, bornés à 0).
    """
    payload = [{"product_id": pid, "quantity": int(qty)} for pid, qty in items]
    if not payload:
        return []
    try:
        res = supabase_client.get_service_supabase().rpc("decrement_stock", {"items": payload}).execute()
    except Exception as e:
        raise classify_store_error(e) from e
    return res.data or []


def list_orders_for_user(auth_user_id: str, limit: int = 50) -> List[Dict[str, Any]]:
    if not auth_user_id:
        return []
    try:
        res = (
            supabase_client.get_reader_supabase()
            .table("orders")
            .select(ORDER_COLUMNS)
            .eq("auth_user_id", auth_user_id)
            .order("created_at", desc=True)
            .limit(limit)
            .execute()
        )
        return res.data or []
    except Exception:
        logger.exception("orders.repository.list_orders_for_user failed user_id=%s", auth_user_id)
        return []


def get_order_for_user(order_id: str, auth_user_id: str) -> Optional[Dict[str, Any]]:
    try:
        res = (
            supabase_client.get_reader_supabase()
            .table("orders")
            .select(ORDER_COLUMNS)
            .eq("id", order_id)
            .eq("auth_user_id", auth_user_id)
            .limit(1)
            .execute()
        )
        rows = res.data or []
        return rows[0] if rows else None
    except Exception:
        logger.exception("orders.repository.get_order_for_user failed order_id=%s", order_id)
        return None
