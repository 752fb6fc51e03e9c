import pytest
from pydantic import ValidationError

from backend.payments.cart import CartItem, validate_cart, to_line_items, join_errors, to_minor_units


def _products():
    return {
        "p1": {"id": "p1", "name": "Mug", "price": 12, "stock": 5, "image_url": "https://img.test/mug.png"},
        "p2": {"id": "p2", "name": "Tote", "price": "7.30", "stock": 0},
        "p3": {"id": "p3", "name": "Cap", "price": 20, "stock": 1},
    }


def test_validate_cart_ok_uses_catalog_product():
    items = [CartItem(product_id="p1", name="Mug", price=10, quantity=2)]
    validated, errors = validate_cart(items, _products())
    assert errors == []
    assert len(validated) == 1
    assert validated[0].product["price"] == 12
    assert validated[0].quantity == 2


def test_validate_cart_collects_all_errors():
    items = [
        CartItem(product_id="gone", name="Ancien produit", price=1, quantity=1),  # introuvable
        CartItem(product_id="p2", name="Tote", price=7, quantity=1),              # rupture
        CartItem(product_id="p3", name="Cap", price=20, quantity=3),              # stock insuffisant
        CartItem(product_id="p1", name="Mug", price=12, quantity=1),              # valide
    ]
    validated, errors = validate_cart(items, _products())
    assert len(errors) == 3
    assert "Ancien produit" in errors[0]
    assert "Tote" in errors[1] and "rupture" in errors[1]
    assert "Seulement 1" in errors[2] and "Cap" in errors[2]
    assert [v.product["id"] for v in validated] == ["p1"]
    assert join_errors(errors).count(". ") == 2


def test_cart_item_rejects_zero_quantity():
    with pytest.raises(ValidationError):
        CartItem(product_id="p1", quantity=0)


def test_to_line_items_uses_server_price_in_minor_units():
    products = _products()
    validated, _ = validate_cart([CartItem(product_id="p1", name="Mug", price=0.01, quantity=2)], products)
    line_items = to_line_items(validated)
    assert line_items == [{
        "quantity": 2,
        "price_data": {
            "currency": "eur",
            "unit_amount": 1200,
            "product_data": {
                "name": "Mug",
                "images": ["https://img.test/mug.png"],
                "metadata": {"product_id": "p1"},
            },
        },
    }]


def test_to_minor_units_rounds():
    assert to_minor_units(7.3) == 730
    assert to_minor_units(19.999) == 2000
