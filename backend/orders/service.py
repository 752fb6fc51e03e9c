"""Couche service des commandes: rapprochement paiement -> commande.

Deux points d'entrée convergent vers reconcile_session():
- le webhook Stripe (asynchrone, fait foi, rejoué par Stripe en cas d'erreur 5xx)
- la page de succès (synchrone, best-effort, si le webhook n'est pas encore passé)

Garanties:
- Idempotence: une seule commande par stripe_payment_id (lecture préalable +
  contrainte UNIQUE en base si deux écrivains passent la lecture en même temps).
- Aucune commande partielle: sans clé d'écriture on n'écrit rien.
- Le stock n'est décrémenté que par l'écrivain qui a effectivement créé la commande.
"""
from typing import Any, Dict, Optional
import logging

from backend.infra import supabase_client
from backend.infra.errors import DuplicateKeyError
from backend.orders import repository
from backend.orders.models import ReconcileResult, ReconcileStatus, build_order, payment_intent_id
from backend.payments import stripe_client
from backend.payments import metadata as meta

logger = logging.getLogger(__name__)

CHECKOUT_COMPLETED = "checkout.session.completed"


def reconcile_session(session: Dict[str, Any], source: str = "webhook") -> ReconcileResult:
    """
    Transforme une session Stripe payée en commande + décrément de stock.
    - Retourne EXISTS (commande inchangée) si le paiement a déjà été traité
    - Retourne SKIPPED (journalisé, non fatal) si métadonnées ou clé d'écriture manquantes
    - Lève StoreError (ou sous-classe) si une écriture échoue
    """
    tag = f"[{source}]"
    session_id = session.get("id") or ""
    stripe_payment_id = payment_intent_id(session)
    if not stripe_payment_id:
        logger.error("%s session=%s sans payment_intent, commande non créée", tag, session_id)
        return ReconcileResult(ReconcileStatus.SKIPPED, reason="missing_payment_intent")

    existing = repository.get_order_by_payment_id(stripe_payment_id)
    if existing:
        logger.info("%s paiement %s déjà traité (commande %s)", tag, stripe_payment_id, existing.get("id"))
        return ReconcileResult(ReconcileStatus.EXISTS, order=existing)

    metadata = session.get("metadata") or {}
    if not meta.has_required_metadata(metadata):
        logger.error("%s métadonnées manquantes session=%s keys=%s", tag, session_id, meta.missing_keys(metadata))
        return ReconcileResult(ReconcileStatus.SKIPPED, reason="missing_metadata")

    try:
        user_id, email, customer_id, pairs = meta.decode_metadata(metadata)
    except meta.MetadataError as e:
        logger.error("%s métadonnées illisibles session=%s: %s", tag, session_id, e)
        return ReconcileResult(ReconcileStatus.SKIPPED, reason="invalid_metadata")

    if not supabase_client.has_write_credential():
        logger.error("%s SUPABASE_SERVICE_KEY absent: commande non créée pour le paiement %s", tag, stripe_payment_id)
        return ReconcileResult(ReconcileStatus.SKIPPED, reason="missing_write_credential")

    line_items = stripe_client.list_line_items(session_id)
    doc = build_order(
        session,
        user_id=user_id,
        email=email,
        customer_id=customer_id,
        pairs=pairs,
        line_items=line_items,
    )

    try:
        order = repository.create_order(doc)
    except DuplicateKeyError:
        # Un autre écrivain (webhook/page de succès) a gagné entre la lecture et l'insertion
        order = repository.get_order_by_payment_id(stripe_payment_id)
        logger.info("%s commande créée en parallèle pour le paiement %s", tag, stripe_payment_id)
        return ReconcileResult(ReconcileStatus.EXISTS, order=order)

    logger.info(
        "%s commande créée id=%s number=%s user_id=%s email=%s",
        tag, order.get("id"), doc["order_number"], user_id, doc["email"],
    )

    oversold = repository.decrement_stock(pairs)
    if oversold:
        logger.warning("%s stock insuffisant (borné à 0) pour %s", tag, oversold)
    logger.info("%s stock mis à jour pour %d produit(s)", tag, len(pairs))
    return ReconcileResult(ReconcileStatus.CREATED, order=order)


def handle_webhook_event(event: Dict[str, Any]) -> Optional[ReconcileResult]:
    """
    Événement webhook déjà vérifié (signature).
    - checkout.session.completed: rapprochement
    - autres types: ignorés (None)
    Les erreurs de rapprochement sont propagées à la vue, qui décide du code HTTP.
    """
    event_type = (event or {}).get("type")
    if event_type != CHECKOUT_COMPLETED:
        logger.info("[webhook] type d'événement non géré: %s", event_type)
        return None
    session = ((event.get("data") or {}).get("object")) or {}
    logger.info("[webhook] checkout.session.completed session=%s", session.get("id"))
    return reconcile_session(session, source="webhook")


def list_user_orders(user_id: str):
    return repository.list_orders_for_user(user_id)


def get_user_order(order_id: str, user_id: str) -> Optional[Dict[str, Any]]:
    return repository.get_order_for_user(order_id, user_id)
