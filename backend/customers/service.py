"""Résolution du client: utilisateur authentifié -> client Stripe + fiche 'customers'.

La synchronisation vers Supabase n'est jamais bloquante pour le paiement:
sans clé d'écriture (ou si l'écriture échoue) on retourne l'identifiant Stripe
avec un customer_id vide; la commande sera tout de même créée par le
rapprochement (webhook ou page de succès).
"""
from typing import NamedTuple
import logging

from backend.customers import repository
from backend.infra import supabase_client
from backend.infra.errors import StoreError, StoreAuthError
from backend.payments import stripe_client

logger = logging.getLogger(__name__)


class ResolvedCustomer(NamedTuple):
    stripe_customer_id: str
    customer_id: str


def _find_or_create_stripe_customer(email: str, name: str, auth_user_id: str) -> str:
    existing = stripe_client.list_customers(email=email, limit=1)
    if existing:
        return str(existing[0].get("id"))
    created = stripe_client.create_customer(email=email, name=name, metadata={"user_id": auth_user_id})
    return str(created.get("id"))


def resolve_customer(email: str, name: str, auth_user_id: str) -> ResolvedCustomer:
    """
    1) Fiche Supabase trouvée par email avec stripe_customer_id: retour immédiat (aucun appel Stripe)
    2) Sinon client Stripe réutilisé (recherche par email) ou créé
    3) Fiche Supabase mise à jour (si elle existe) ou créée
    4) Échec d'écriture ou clé absente: on retourne quand même l'identifiant Stripe
    """
    existing = repository.get_customer_by_email(email)
    if existing and existing.get("stripe_customer_id"):
        return ResolvedCustomer(str(existing["stripe_customer_id"]), str(existing.get("id") or ""))

    stripe_customer_id = _find_or_create_stripe_customer(email, name, auth_user_id)
    existing_id = str((existing or {}).get("id") or "")

    if not supabase_client.has_write_credential():
        logger.error("customers.resolve: SUPABASE_SERVICE_KEY absent, fiche client non synchronisée email=%s", email)
        return ResolvedCustomer(stripe_customer_id, "")

    try:
        if existing_id:
            repository.set_stripe_customer(
                existing_id,
                stripe_customer_id=stripe_customer_id,
                auth_user_id=auth_user_id,
                name=name,
            )
            return ResolvedCustomer(stripe_customer_id, existing_id)
        row = repository.create_customer(
            email=email,
            name=name,
            auth_user_id=auth_user_id,
            stripe_customer_id=stripe_customer_id,
        )
        return ResolvedCustomer(stripe_customer_id, str(row.get("id") or ""))
    except StoreAuthError as e:
        logger.error("customers.resolve: authentification Supabase refusée (%s), vérifier SUPABASE_SERVICE_KEY", e)
    except StoreError:
        logger.exception("customers.resolve: écriture de la fiche client impossible email=%s", email)
    return ResolvedCustomer(stripe_customer_id, existing_id)
