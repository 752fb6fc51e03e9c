def test_list_products_normalized(client, monkeypatch):
    monkeypatch.setattr(
        "backend.catalog.repository.list_products",
        lambda category_id=None, search=None, limit=50: [
            {"id": 1, "name": "Mug", "slug": "mug", "price": "12.5", "stock": 0, "categories": {"title": "Cuisine", "slug": "cuisine"}},
        ],
    )
    r = client.get("/api/v1/products")
    assert r.status_code == 200
    [product] = r.json()["products"]
    assert product["id"] == "1"
    assert product["price"] == 12.5
    assert product["in_stock"] is False
    assert product["category"]["slug"] == "cuisine"


def test_list_products_unknown_category(client, monkeypatch):
    monkeypatch.setattr("backend.catalog.repository.get_category_by_slug", lambda slug: None)
    r = client.get("/api/v1/products", params={"category": "nope"})
    assert r.json() == {"products": []}


def test_product_not_found(client, monkeypatch):
    monkeypatch.setattr("backend.catalog.repository.get_product_by_slug", lambda slug: None)
    r = client.get("/api/v1/products/inconnu")
    assert r.status_code == 404


def test_site_settings_default(client, monkeypatch):
    monkeypatch.setattr("backend.catalog.repository.get_site_settings", lambda: None)
    r = client.get("/api/v1/site-settings")
    assert r.status_code == 200
    assert r.json()["store_name"] == "Boutique"
