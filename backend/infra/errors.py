"""
Erreurs typées de la couche de stockage (Supabase).

Les repositories convertissent les exceptions brutes de postgrest/httpx en:
- StoreAuthError: la base refuse l'écriture (clé invalide, RLS, JWT expiré). Non rejouable.
- MissingWriteCredential: aucune clé d'écriture configurée. Non rejouable.
- StoreError: toute autre erreur (réseau, timeout, 5xx). Rejouable.
"""
from typing import Optional
from postgrest.exceptions import APIError

# Codes PostgREST / Postgres signalant un problème d'authentification ou de droits
AUTH_ERROR_CODES = {"401", "403", "PGRST301", "PGRST302", "42501"}
# Messages connus pour les erreurs non typées (ex: httpx, gateway Supabase)
AUTH_ERROR_MARKERS = ("unauthorized", "invalid api key", "jwt", "permission denied")

UNIQUE_VIOLATION = "23505"


class StoreError(Exception):
    """Erreur générique du store (rejouable)."""

    def __init__(self, message: str, code: Optional[str] = None):
        super().__init__(message)
        self.code = code


class StoreAuthError(StoreError):
    """Le store refuse l'opération pour une raison d'authentification."""


class MissingWriteCredential(StoreError):
    """La clé service-role n'est pas configurée: aucune écriture possible."""


class DuplicateKeyError(StoreError):
    """Contrainte d'unicité violée (ex: orders.stripe_payment_id)."""


def _error_code(exc: BaseException) -> Optional[str]:
    code = getattr(exc, "code", None)
    if code is None:
        return None
    return str(code)


def classify_store_error(exc: BaseException) -> StoreError:
    """
    Transforme une exception brute en StoreError typée.
    - APIError: décision sur le code (PostgREST/Postgres)
    - Autres: repli sur le message (moins fiable, dernier recours)
    """
    if isinstance(exc, StoreError):
        return exc
    message = str(getattr(exc, "message", None) or exc)
    code = _error_code(exc)
    if isinstance(exc, APIError):
        if code == UNIQUE_VIOLATION:
            return DuplicateKeyError(message, code=code)
        if code in AUTH_ERROR_CODES:
            return StoreAuthError(message, code=code)
        return StoreError(message, code=code)
    lowered = message.lower()
    if code in AUTH_ERROR_CODES or any(marker in lowered for marker in AUTH_ERROR_MARKERS):
        return StoreAuthError(message, code=code)
    return StoreError(message, code=code)


def is_auth_error(exc: BaseException) -> bool:
    """Vrai pour les erreurs qu'un nouvel essai ne peut pas corriger (mauvaise clé/absence de clé)."""
    return isinstance(classify_store_error(exc), (StoreAuthError, MissingWriteCredential))
