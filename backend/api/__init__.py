from .admin import router as admin_router
from .cart import router as cart_router
from .catalog import router as catalog_router
from .checkout import router as checkout_router
from .orders import router as orders_router
from .profile import router as profile_router

__all__ = [
    "admin_router",
    "cart_router",
    "catalog_router",
    "checkout_router",
    "orders_router",
    "profile_router",
]
