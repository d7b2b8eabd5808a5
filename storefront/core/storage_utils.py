# storefront/core/storage_utils.py
import logging
import uuid

from storefront.core.config import get_settings
from storefront.core.supabase_client import storage_client

settings = get_settings()
logger = logging.getLogger(__name__)

BUCKET = settings.STORAGE_BUCKET


def upload_to_storage(path: str, file_bytes: bytes, content_type: str) -> str:
    """
    Upload raw bytes to Supabase Storage and return a public URL.

    If a file already exists at this path, it will be overwritten
    thanks to the 'upsert' option.

    Args:
        path: Full object path inside the bucket.
              Example: "products/<uuid>.png"
        file_bytes: File content in bytes.
        content_type: MIME type stored with the object.

    Returns:
        Public URL to the uploaded file.

    Raises:
        Any exception raised by Supabase client if upload fails.
    """
    bucket = storage_client().storage.from_(BUCKET)
    bucket.upload(
        path,
        file_bytes,
        {"content-type": content_type, "upsert": "true"},
    )
    return bucket.get_public_url(path)


def delete_from_storage(path: str) -> None:
    """
    Delete a file from Supabase Storage by its object path.
    """
    storage_client().storage.from_(BUCKET).remove([path])


def extract_path_from_public_url(url: str) -> str | None:
    """
    Given a public URL, extract the object path relative to the bucket.

    Example:
        https://<proj>.supabase.co/storage/v1/object/public/assets/products/p.png
        -> 'products/p.png'
    """
    marker = f"/storage/v1/object/public/{BUCKET}/"
    idx = url.find(marker)
    if idx == -1:
        return None
    path = url[idx + len(marker) :]
    # get_public_url may append an empty query string
    return path.split("?", 1)[0] or None


def delete_public_url(url: str) -> None:
    """
    Best-effort delete of a file by its public URL.
    No-op if the URL does not belong to this bucket.
    """
    path = extract_path_from_public_url(url)
    if not path:
        return
    try:
        delete_from_storage(path)
    except Exception as e:
        logger.warning("Could not delete storage object %s: %s", path, e)


def generate_filename(ext: str) -> str:
    """
    Generate a random filename using UUID4.

    Args:
        ext: File extension without dot (e.g. "png", "jpg")
    """
    return f"{uuid.uuid4()}.{ext}"
