"""
Accès aux données (Supabase) pour le catalogue: produits, catégories, réglages du site.
Lectures uniquement, via le client anon. Les erreurs de navigation sont journalisées et
transformées en valeurs neutres ([], None); la lecture des produits d'un panier propage les siennes.
"""
from typing import Any, Dict, Iterable, List, Optional
import logging
import backend.infra.supabase_client as supabase_client
from backend.infra.errors import classify_store_error

logger = logging.getLogger(__name__)

PRODUCT_COLUMNS = "id, name, slug, description, price, stock, image_url, featured, category_id, categories(title, slug)"


def fetch_products_by_ids(ids: Iterable[str]) -> List[Dict[str, Any]]:
    """
    Produits par identifiants (prix et stock à jour, utilisés pour valider un panier).
    - Retourne [] si ids vide.
    - Lève StoreError si la lecture échoue.
    """
    ids = [str(i) for i in ids if i]
    if not ids:
        return []
    try:
        res = (
            supabase_client.get_supabase()
            .table("products")
            .select("id, name, price, stock, image_url")
            .in_("id", ids)
            .execute()
        )
        return res.data or []
    except Exception as e:
        logger.exception("catalog.repository.fetch_products_by_ids failed ids=%s", ids)
        raise classify_store_error(e) from e


def get_products_map(ids: Iterable[str]) -> Dict[str, Dict[str, Any]]:
    """Retourne un dict {id: produit} à partir d'une liste d'IDs."""
    return {str(p.get("id")): p for p in fetch_products_by_ids(ids)}


def get_category_by_slug(slug: str) -> Optional[Dict[str, Any]]:
    try:
        res = (
            supabase_client.get_supabase()
            .table("categories")
            .select("id, title, slug")
            .eq("slug", slug)
            .limit(1)
            .execute()
        )
        rows = res.data or []
        return rows[0] if rows else None
    except Exception:
        logger.exception("catalog.repository.get_category_by_slug failed slug=%s", slug)
        return None


def list_products(category_id: Optional[str] = None, search: Optional[str] = None, limit: int = 50) -> List[Dict[str, Any]]:
    """
    Liste des produits pour la navigation publique.
    - Filtre optionnel par catégorie et recherche (ilike) sur le nom
    - Tri: mis en avant d'abord, puis par nom
    """
    try:
        query = supabase_client.get_supabase().table("products").select(PRODUCT_COLUMNS)
        if category_id:
            query = query.eq("category_id", category_id)
        if search:
            query = query.ilike("name", f"%{search}%")
        res = (
            query
            .order("featured", desc=True)
            .order("name", desc=False)
            .limit(limit)
            .execute()
        )
        return res.data or []
    except Exception:
        logger.exception("catalog.repository.list_products failed category_id=%s search=%s", category_id, search)
        return []


def get_product_by_slug(slug: str) -> Optional[Dict[str, Any]]:
    try:
        res = (
            supabase_client.get_supabase()
            .table("products")
            .select(PRODUCT_COLUMNS)
            .eq("slug", slug)
            .limit(1)
            .execute()
        )
        rows = res.data or []
        return rows[0] if rows else None
    except Exception:
        logger.exception("catalog.repository.get_product_by_slug failed slug=%s", slug)
        return None


def list_categories() -> List[Dict[str, Any]]:
    try:
        res = (
            supabase_client.get_supabase()
            .table("categories")
            .select("id, title, slug")
            .order("title", desc=False)
            .execute()
        )
        return res.data or []
    except Exception:
        logger.exception("catalog.repository.list_categories failed")
        return []


def get_site_settings() -> Optional[Dict[str, Any]]:
    """Première ligne de site_settings (document unique)."""
    try:
        res = (
            supabase_client.get_supabase()
            .table("site_settings")
            .select("id, store_name, tagline")
            .limit(1)
            .execute()
        )
        rows = res.data or []
        return rows[0] if rows else None
    except Exception:
        logger.exception("catalog.repository.get_site_settings failed")
        return None
