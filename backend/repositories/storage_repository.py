from typing import Optional

from config import settings
from supabase_client import get_supabase


def _bucket():
    return get_supabase().storage.from_(settings.product_images_bucket)


def upload_object(path: str, content: bytes, content_type: Optional[str] = None) -> str:
    options = {"cache-control": "3600", "upsert": "false"}
    if content_type:
        options["content-type"] = content_type
    _bucket().upload(path=path, file=content, file_options=options)
    return _bucket().get_public_url(path)


def remove_object(path: str) -> None:
    _bucket().remove([path])


def path_from_public_url(url: str) -> Optional[str]:
    segments = url.split("?", 1)[0].split("/")
    bucket = settings.product_images_bucket
    if bucket not in segments:
        return None
    index = segments.index(bucket)
    remainder = segments[index + 1 :]
    if not remainder:
        return None
    return "/".join(remainder)
