import os
from dataclasses import dataclass, field
from decimal import Decimal
from pathlib import Path
from typing import List

from dotenv import load_dotenv

load_dotenv(Path(__file__).resolve().parent / ".env")


def _require_env(name: str) -> str:
    value = os.getenv(name)
    if not value:
        raise RuntimeError(f"Missing required environment variable: {name}")
    return value


def _get_list(name: str, fallback: str = "") -> List[str]:
    raw_value = os.getenv(name, fallback)
    if not raw_value:
        return []
    return [item.strip() for item in raw_value.split(",") if item.strip()]


@dataclass(frozen=True)
class Settings:
    supabase_url: str = _require_env("SUPABASE_URL")
    supabase_service_role_key: str = _require_env("SUPABASE_SERVICE_ROLE_KEY")
    stripe_secret_key: str = os.getenv("STRIPE_SECRET_KEY", "")
    paypal_client_id: str = os.getenv("PAYPAL_CLIENT_ID", "")
    paypal_client_secret: str = os.getenv("PAYPAL_CLIENT_SECRET", "")
    paypal_api_base: str = os.getenv(
        "PAYPAL_API_BASE", "https://api-m.sandbox.paypal.com"
    )
    currency: str = os.getenv("STORE_CURRENCY", "USD").upper()
    tax_rate: Decimal = Decimal(os.getenv("TAX_RATE", "0.13"))
    flat_shipping_fee: Decimal = Decimal(os.getenv("FLAT_SHIPPING_FEE", "5.00"))
    manual_transfer_email: str = os.getenv(
        "MANUAL_TRANSFER_EMAIL", "payments@candit.com"
    )
    product_images_bucket: str = os.getenv("PRODUCT_IMAGES_BUCKET", "product-images")
    featured_products_limit: int = int(os.getenv("FEATURED_PRODUCTS_LIMIT", "8"))
    allowed_origins: List[str] = field(
        default_factory=lambda: _get_list("ALLOWED_ORIGINS", "*")
    )


settings = Settings()
