import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api import (
    admin_router,
    cart_router,
    catalog_router,
    checkout_router,
    orders_router,
    profile_router,
)
from api.errors import storefront_error_handler
from config import settings
from errors import StorefrontError

logger = logging.getLogger("storefront")

app = FastAPI(title="Storefront API")

if settings.allowed_origins == ["*"]:
    allow_origins = ["*"]
else:
    allow_origins = settings.allowed_origins

app.add_middleware(
    CORSMiddleware,
    allow_origins=allow_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_exception_handler(StorefrontError, storefront_error_handler)

app.include_router(catalog_router)
app.include_router(cart_router)
app.include_router(checkout_router)
app.include_router(orders_router)
app.include_router(profile_router)
app.include_router(admin_router)


@app.on_event("startup")
async def _on_startup() -> None:
    if allow_origins == ["*"]:
        logger.warning(
            "CORS is set to allow all origins with credentials; set ALLOWED_ORIGINS to explicit values for production."
        )


@app.get("/api/health")
async def health():
    return {"status": "ok", "currency": settings.currency}
