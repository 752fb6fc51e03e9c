"""Endpoints publics du catalogue (navigation produits, catégories, réglages du site).
Aucune authentification: lecture seule via le client anon.
"""
from typing import Any, Dict, Optional

from fastapi import APIRouter, HTTPException, Query

from backend.catalog import repository

router = APIRouter(prefix="/api/v1", tags=["Catalogue"])

DEFAULT_STORE_NAME = "Boutique"


def _normalize_product(p: Dict[str, Any]) -> Dict[str, Any]:
    category = p.get("categories") or {}
    stock = int(p.get("stock") or 0)
    return {
        "id": str(p.get("id") or ""),
        "name": p.get("name") or "",
        "slug": p.get("slug") or "",
        "description": p.get("description") or "",
        "price": float(p.get("price") or 0),
        "stock": stock,
        "in_stock": stock > 0,
        "image": p.get("image_url"),
        "featured": bool(p.get("featured")),
        "category": {"title": category.get("title"), "slug": category.get("slug")} if category else None,
    }


@router.get("/products")
def list_products(
    category: Optional[str] = None,
    q: Optional[str] = None,
    limit: int = Query(50, ge=1, le=200),
) -> Dict[str, Any]:
    """
    Liste les produits.
    - category: slug de catégorie (inconnu -> liste vide)
    - q: recherche sur le nom
    """
    category_id = None
    if category:
        cat = repository.get_category_by_slug(category)
        if not cat:
            return {"products": []}
        category_id = str(cat.get("id"))
    products = repository.list_products(category_id=category_id, search=(q or "").strip() or None, limit=limit)
    return {"products": [_normalize_product(p) for p in products]}


@router.get("/products/{slug}")
def get_product(slug: str) -> Dict[str, Any]:
    product = repository.get_product_by_slug(slug)
    if not product:
        raise HTTPException(status_code=404, detail="Produit introuvable")
    return _normalize_product(product)


@router.get("/categories")
def list_categories() -> Dict[str, Any]:
    return {"categories": repository.list_categories()}


@router.get("/site-settings")
def site_settings() -> Dict[str, Any]:
    row = repository.get_site_settings() or {}
    return {
        "id": row.get("id"),
        "store_name": row.get("store_name") or DEFAULT_STORE_NAME,
        "tagline": row.get("tagline") or "",
    }
