"""Doubles en mémoire du store Supabase et de l'API Stripe pour les tests."""
from typing import Any, Dict, List, Optional
import copy
import itertools

from backend.infra.errors import DuplicateKeyError


class FakeStore:
    """Remplace les repositories (catalogue, clients, commandes) par des dicts en mémoire."""

    def __init__(self, write_credential: bool = True):
        self.products: Dict[str, Dict[str, Any]] = {}
        self.customers: Dict[str, Dict[str, Any]] = {}
        self.orders: Dict[str, Dict[str, Any]] = {}
        self.write_credential = write_credential
        self.calls: List[str] = []
        self.decrements: List[List[tuple]] = []
        self._ids = itertools.count(1)

    # --- données ---
    def add_product(self, product_id: str, name: str, price: float, stock: int, image_url: Optional[str] = None):
        self.products[product_id] = {"id": product_id, "name": name, "price": price, "stock": stock, "image_url": image_url}
        return self.products[product_id]

    def add_customer(self, email: str, **fields):
        cid = f"cust-{next(self._ids)}"
        self.customers[cid] = {"id": cid, "email": email, **fields}
        return self.customers[cid]

    # --- catalogue ---
    def get_products_map(self, ids):
        self.calls.append("get_products_map")
        return {pid: copy.deepcopy(self.products[pid]) for pid in ids if pid in self.products}

    # --- clients ---
    def get_customer_by_email(self, email):
        self.calls.append("get_customer_by_email")
        return next((dict(c) for c in self.customers.values() if c.get("email") == email), None)

    def create_customer(self, *, email, name, auth_user_id, stripe_customer_id):
        self.calls.append("create_customer")
        return self.add_customer(email, name=name, auth_user_id=auth_user_id, stripe_customer_id=stripe_customer_id)

    def set_stripe_customer(self, customer_id, *, stripe_customer_id, auth_user_id, name):
        self.calls.append("set_stripe_customer")
        self.customers[customer_id].update(stripe_customer_id=stripe_customer_id, auth_user_id=auth_user_id, name=name)

    # --- commandes ---
    def get_order_by_payment_id(self, stripe_payment_id):
        self.calls.append("get_order_by_payment_id")
        return next((dict(o) for o in self.orders.values() if o["stripe_payment_id"] == stripe_payment_id), None)

    def create_order(self, doc):
        self.calls.append("create_order")
        if any(o["stripe_payment_id"] == doc["stripe_payment_id"] for o in self.orders.values()):
            raise DuplicateKeyError("duplicate key value violates unique constraint", code="23505")
        oid = f"order-{next(self._ids)}"
        self.orders[oid] = {"id": oid, **copy.deepcopy(doc)}
        return dict(self.orders[oid])

    def decrement_stock(self, items):
        self.calls.append("decrement_stock")
        items = list(items)
        self.decrements.append(items)
        oversold = []
        for pid, qty in items:
            product = self.products.get(pid)
            if product is None:
                continue
            if product["stock"] < qty:
                oversold.append({"product_id": pid, "requested": qty, "previous_stock": product["stock"]})
            product["stock"] = max(product["stock"] - qty, 0)
        return oversold

    def has_write_credential(self):
        return self.write_credential

    def install(self, monkeypatch):
        monkeypatch.setattr("backend.catalog.repository.get_products_map", self.get_products_map)
        monkeypatch.setattr("backend.customers.repository.get_customer_by_email", self.get_customer_by_email)
        monkeypatch.setattr("backend.customers.repository.create_customer", self.create_customer)
        monkeypatch.setattr("backend.customers.repository.set_stripe_customer", self.set_stripe_customer)
        monkeypatch.setattr("backend.orders.repository.get_order_by_payment_id", self.get_order_by_payment_id)
        monkeypatch.setattr("backend.orders.repository.create_order", self.create_order)
        monkeypatch.setattr("backend.orders.repository.decrement_stock", self.decrement_stock)
        monkeypatch.setattr("backend.infra.supabase_client.has_write_credential", self.has_write_credential)


class FakeStripe:
    """Remplace les fonctions de backend.payments.stripe_client."""

    def __init__(self):
        self.created_sessions: List[Dict[str, Any]] = []
        self.sessions: Dict[str, Dict[str, Any]] = {}
        self.line_items: Dict[str, List[Dict[str, Any]]] = {}
        self.customers: List[Dict[str, Any]] = []
        self.calls: List[str] = []

    def create_session(self, **params):
        self.calls.append("create_session")
        sid = f"cs_test_{len(self.created_sessions) + 1}"
        self.created_sessions.append(params)
        return {"id": sid, "url": f"https://checkout.stripe.test/{sid}"}

    def get_session(self, session_id, expand=None):
        self.calls.append("get_session")
        if session_id not in self.sessions:
            raise LookupError(f"No such checkout.session: {session_id}")
        return copy.deepcopy(self.sessions[session_id])

    def list_line_items(self, session_id, limit=100):
        self.calls.append("list_line_items")
        return list(self.line_items.get(session_id, []))

    def list_customers(self, *, email, limit=1):
        self.calls.append("list_customers")
        return [c for c in self.customers if c["email"] == email][:limit]

    def create_customer(self, *, email, name, metadata):
        self.calls.append("create_customer")
        customer = {"id": f"cus_{len(self.customers) + 1}", "email": email, "name": name, "metadata": metadata}
        self.customers.append(customer)
        return customer

    def install(self, monkeypatch):
        for name in ("create_session", "get_session", "list_line_items", "list_customers", "create_customer"):
            monkeypatch.setattr(f"backend.payments.stripe_client.{name}", getattr(self, name))
