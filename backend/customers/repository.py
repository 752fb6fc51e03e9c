"""
Accès aux données pour la table 'customers'.
- Lecture par email via le client service-role (RLS sans politique de lecture anon),
  repli sur le client anon si la clé est absente.
- Écritures via service-role: les erreurs sont converties en StoreError typées
  (classify_store_error) et propagées à l'appelant, qui décide de la dégradation.
"""
from datetime import datetime, timezone
from typing import Any, Dict, Optional
import logging
import backend.infra.supabase_client as supabase_client
from backend.infra.errors import classify_store_error

logger = logging.getLogger(__name__)


def get_customer_by_email(email: str) -> Optional[Dict[str, Any]]:
    if not email:
        return None
    try:
        res = (
            supabase_client.get_reader_supabase()
            .table("customers")
            .select("id, email, name, auth_user_id, stripe_customer_id, created_at")
            .eq("email", email)
            .limit(1)
            .execute()
        )
        rows = res.data or []
        return rows[0] if rows else None
    except Exception:
        logger.exception("customers.repository.get_customer_by_email failed email=%s", email)
        return None


def create_customer(*, email: str, name: str, auth_user_id: str, stripe_customer_id: str) -> Dict[str, Any]:
    """Crée la fiche client; lève StoreError (ou sous-classe) en cas d'échec."""
    try:
        res = (
            supabase_client.get_service_supabase()
            .table("customers")
            .insert({
                "email": email,
                "name": name,
                "auth_user_id": auth_user_id,
                "stripe_customer_id": stripe_customer_id,
                "created_at": datetime.now(timezone.utc).isoformat(),
            })
            .execute()
        )
        rows = res.data or []
        return rows[0] if rows else {}
    except Exception as e:
        raise classify_store_error(e) from e


def set_stripe_customer(customer_id: str, *, stripe_customer_id: str, auth_user_id: str, name: str) -> None:
    """Rattache l'identifiant Stripe (et l'utilisateur) à une fiche existante."""
    try:
        (
            supabase_client.get_service_supabase()
            .table("customers")
            .update({
                "stripe_customer_id": stripe_customer_id,
                "auth_user_id": auth_user_id,
                "name": name,
            })
            .eq("id", customer_id)
            .execute()
        )
    except Exception as e:
        raise classify_store_error(e) from e
