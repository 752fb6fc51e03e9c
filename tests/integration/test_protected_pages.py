import pytest


@pytest.mark.parametrize("path", ["/checkout", "/checkout/success", "/orders", "/orders/order-1"])
def test_protected_pages_redirect_without_session(client, path):
    r = client.get(path, follow_redirects=False)
    assert r.status_code == 303
    assert r.headers["location"] == "/"


def test_webhook_not_gated(client):
    r = client.get("/api/v1/webhooks/stripe", follow_redirects=False)
    assert r.status_code == 200


def test_health(client):
    r = client.get("/health")
    assert r.status_code == 200


def test_api_routes_never_redirected(client, anonymous):
    r = client.get("/api/v1/orders", follow_redirects=False)
    assert r.status_code == 401
    assert r.json()["detail"] == "Non authentifié"


def test_is_protected_path_scoped_to_pages():
    from backend.app_setup.middlewares import is_protected_path
    assert is_protected_path("/checkout/success/")
    assert is_protected_path("/orders/order-1")
    assert not is_protected_path("/api/v1/checkout/session")
    assert not is_protected_path("/checkoutx")
