"""
Module 'payments' (feature-first): point d'entrée public.
Réunit logique panier, métadonnées Stripe et client Stripe.
Les cas d'usage (service) s'importent explicitement: backend.payments.service.
"""

from .cart import CartItem, CheckoutRequest, validate_cart, to_line_items, price_from_product
from .metadata import encode_metadata, decode_metadata, decode_items, has_required_metadata, MetadataError
from .stripe_client import require_stripe, create_session, get_session, list_line_items, construct_event

__all__ = [
    # cart
    "CartItem",
    "CheckoutRequest",
    "validate_cart",
    "to_line_items",
    "price_from_product",
    # metadata
    "encode_metadata",
    "decode_metadata",
    "decode_items",
    "has_required_metadata",
    "MetadataError",
    # stripe
    "require_stripe",
    "create_session",
    "get_session",
    "list_line_items",
    "construct_event",
]
