from typing import Any, Dict
from urllib.parse import urlparse

from backend import config
from backend.infra import supabase_client

TABLES = ["products", "customers", "orders", "site_settings"]

def _check_table(client, name: str) -> Dict[str, Any]:
    try:
        res = client.table(name).select("id").limit(1).execute()
        return {"ok": True, "rows": len(res.data or [])}
    except Exception as e:
        return {"ok": False, "error": str(e)}

def health_supabase_info() -> Dict[str, Any]:
    """État de la connexion Supabase (lecture d'une ligne par table) et présence de la clé d'écriture."""
    parsed = urlparse(config.SUPABASE_URL) if config.SUPABASE_URL else None
    info: Dict[str, Any] = {
        "hostname": parsed.hostname if parsed else None,
        "write_credential": supabase_client.has_write_credential(),
        "connect_ok": False,
        "error": None,
        "tables": {},
    }
    try:
        client = supabase_client.get_supabase()
        for t in TABLES:
            info["tables"][t] = _check_table(client, t)
        info["connect_ok"] = True
    except Exception as e:
        info["error"] = str(e)
    return info
