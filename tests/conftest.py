import os

os.environ.setdefault("SUPABASE_URL", "https://example.supabase.co")
os.environ.setdefault("SUPABASE_SERVICE_ROLE_KEY", "service-role-key")
os.environ["TAX_RATE"] = "0.13"
os.environ["FLAT_SHIPPING_FEE"] = "5.00"
os.environ["STORE_CURRENCY"] = "USD"
os.environ.setdefault("MANUAL_TRANSFER_EMAIL", "payments@candit.com")
os.environ["STRIPE_SECRET_KEY"] = ""
os.environ["PAYPAL_CLIENT_ID"] = ""
os.environ["PAYPAL_CLIENT_SECRET"] = ""

import pytest

from fake_supabase import FakeSupabase
from repositories import (
    cart_repository,
    orders_repository,
    products_repository,
    profiles_repository,
    storage_repository,
)

REPOSITORY_MODULES = (
    cart_repository,
    orders_repository,
    products_repository,
    profiles_repository,
    storage_repository,
)


@pytest.fixture
def fake_db(monkeypatch):
    db = FakeSupabase()
    for module in REPOSITORY_MODULES:
        monkeypatch.setattr(module, "get_supabase", lambda: db)
    return db


@pytest.fixture
def stocked_cart(fake_db):
    fake_db.seed(
        "products",
        [
            {
                "id": "p-1",
                "name": "Sony Headphones",
                "price": 10.00,
                "category": "Technology",
                "stock": 5,
                "rating": 4.5,
                "is_free_shipping": True,
            },
            {
                "id": "p-2",
                "name": "Catan",
                "price": 9.99,
                "category": "Board Games",
                "stock": 1,
                "rating": 4.8,
                "is_free_shipping": False,
            },
        ],
    )
    fake_db.seed(
        "cart_items",
        [
            {"id": "c-1", "user_id": "user-1", "product_id": "p-1", "quantity": 2},
            {"id": "c-2", "user_id": "user-1", "product_id": "p-2", "quantity": 1},
            {"id": "c-9", "user_id": "user-2", "product_id": "p-1", "quantity": 1},
        ],
    )
    return fake_db
