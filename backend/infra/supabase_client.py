from typing import Optional
from supabase import create_client, Client
from backend import config

_supabase: Optional[Client] = None
_service_supabase: Optional[Client] = None

def get_supabase() -> Client:
    """Client 'anon' partagé: lectures du catalogue et des commandes."""
    global _supabase
    if _supabase is None:
        _supabase = create_client(config.SUPABASE_URL, config.SUPABASE_ANON)
    return _supabase

def has_write_credential() -> bool:
    """Vrai si la clé service-role (écritures) est configurée."""
    return bool(config.SUPABASE_SERVICE_KEY)

def get_service_supabase() -> Client:
    """
    Client service-role (bypass RLS) pour les écritures: clients, commandes, stock.
    Lève MissingWriteCredential si SUPABASE_SERVICE_KEY est absent.
    """
    global _service_supabase
    if not has_write_credential():
        from backend.infra.errors import MissingWriteCredential
        raise MissingWriteCredential("SUPABASE_SERVICE_KEY manquant pour get_service_supabase()")
    if _service_supabase is None:
        _service_supabase = create_client(config.SUPABASE_URL, config.SUPABASE_SERVICE_KEY)
    return _service_supabase

def get_reader_supabase() -> Client:
    """
    Lectures des tables protégées par RLS sans politique anon (customers, orders):
    service-role si la clé est configurée, sinon client anon (lignes visibles selon RLS).
    """
    if has_write_credential():
        return get_service_supabase()
    return get_supabase()
