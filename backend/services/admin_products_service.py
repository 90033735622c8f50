import asyncio
import logging
import secrets
import time
from pathlib import PurePath
from typing import List

from errors import NotFoundError, ValidationError
from repositories import products_repository, storage_repository
from schemas import ImageUploadResponse, Product, ProductCreate, ProductUpdate

logger = logging.getLogger("storefront")

IMAGE_FOLDER = "product_images"
ALLOWED_IMAGE_EXTENSIONS = {"png", "jpg", "jpeg", "gif", "webp", "svg"}


def image_path_for(filename: str) -> str:
    extension = PurePath(filename or "").suffix.lstrip(".").lower()
    if extension not in ALLOWED_IMAGE_EXTENSIONS:
        raise ValidationError("Unsupported image type")
    name = f"{int(time.time() * 1000)}-{secrets.token_hex(6)}.{extension}"
    return f"{IMAGE_FOLDER}/{name}"


async def list_products() -> List[Product]:
    rows = await asyncio.to_thread(products_repository.fetch_products)
    return [Product(**row) for row in rows]


async def create_product(payload: ProductCreate) -> Product:
    row = await asyncio.to_thread(products_repository.insert_product, payload.model_dump())
    logger.info("Product %s created", row.get("id"))
    return Product(**row)


async def update_product(product_id: str, payload: ProductUpdate) -> Product:
    changes = payload.model_dump(exclude_unset=True)
    if not changes:
        raise ValidationError("Nothing to update")
    row = await asyncio.to_thread(products_repository.update_product, product_id, changes)
    if not row:
        raise NotFoundError("Product not found")
    return Product(**row)


def _remove_image(image_url: str) -> None:
    path = storage_repository.path_from_public_url(image_url)
    if not path:
        return
    try:
        storage_repository.remove_object(path)
    except Exception as exc:
        logger.warning("Failed to delete image %s from storage: %s", path, exc)


def _delete_product(product_id: str) -> bool:
    product = products_repository.fetch_product(product_id)
    if not product:
        return False
    if product.get("image_url"):
        _remove_image(product["image_url"])
    return products_repository.delete_product(product_id)


async def delete_product(product_id: str) -> None:
    deleted = await asyncio.to_thread(_delete_product, product_id)
    if not deleted:
        raise NotFoundError("Product not found")
    logger.info("Product %s deleted", product_id)


async def upload_image(
    filename: str, content: bytes, content_type: str | None = None
) -> ImageUploadResponse:
    if not content:
        raise ValidationError("Image file is empty")
    path = image_path_for(filename)
    public_url = await asyncio.to_thread(
        storage_repository.upload_object, path, content, content_type
    )
    return ImageUploadResponse(path=path, public_url=public_url)
