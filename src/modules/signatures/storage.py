import io
import logging
from datetime import timedelta
from typing import List

from minio import Minio
from minio.deleteobjects import DeleteObject

from config import MINIO_ENDPOINT, MINIO_ACCESS_KEY, MINIO_SECRET_KEY, MINIO_BUCKET, MINIO_SECURE

logger = logging.getLogger(__name__)

_client = Minio(
    MINIO_ENDPOINT,
    access_key=MINIO_ACCESS_KEY,
    secret_key=MINIO_SECRET_KEY,
    secure=MINIO_SECURE
)

def ensure_bucket():
    if not _client.bucket_exists(MINIO_BUCKET):
        _client.make_bucket(MINIO_BUCKET)

def put_bytes(key: str, data: bytes, content_type: str = "application/octet-stream"):
    ensure_bucket()
    _client.put_object(MINIO_BUCKET, key, io.BytesIO(data), length=len(data), content_type=content_type)

def get_bytes(key: str) -> bytes:
    resp = _client.get_object(MINIO_BUCKET, key)
    try:
        return resp.read()
    finally:
        resp.close()
        resp.release_conn()

def presigned_url(key: str, expires: timedelta = timedelta(hours=1)) -> str:
    return _client.presigned_get_object(MINIO_BUCKET, key, expires=expires)

def delete_objects(paths: List[str]) -> List[str]:
    """
    Removes the given keys from the bucket and returns one message per key
    that could not be removed. Never raises for storage failures.
    """
    if not paths:
        return []
    errors = []
    try:
        for err in _client.remove_objects(MINIO_BUCKET, [DeleteObject(p) for p in paths]):
            errors.append(f"{err.name}: {err.message}")
    except Exception as e:
        errors.append(str(e))
    for message in errors:
        logger.warning("Storage delete failed: %s", message)
    return errors
