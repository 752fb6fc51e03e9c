from typing import Dict, Any, Optional
from .repository import get_user_from_access_token as _repo_get_user_from_token


def display_name(email: Optional[str], metadata: Optional[Dict[str, Any]]) -> str:
    """
    Nom affiché (et transmis à Stripe):
    - full_name, sinon "prénom nom" issus des metadata
    - à défaut l'email
    """
    meta = metadata or {}
    full = str(meta.get("full_name") or meta.get("name") or "").strip()
    if not full:
        full = f"{meta.get('first_name') or ''} {meta.get('last_name') or ''}".strip()
    return full or (email or "")


def get_user_from_token(access_token: str) -> Dict[str, Any]:
    """Normalise l'utilisateur issu de supabase.auth.get_user(access_token):
    - Retourne {id, email, name, metadata, token}
    """
    raw = _repo_get_user_from_token(access_token)
    email = raw.get("email") or ""
    metadata = raw.get("user_metadata") or {}
    return {
        "id": raw.get("id"),
        "email": email,
        "name": display_name(email, metadata),
        "metadata": metadata,
        "token": access_token,
    }
