# core/blob_store.py

"""
Blob boundary over S3. Only called after the decision engine allows.
"""

import re
from dataclasses import dataclass
from typing import Optional, Tuple

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from core.config import settings
from core.errors import NotFoundError, StoreUnavailable
from core.logging_config import logger


MISSING_KEY_CODES = {"NoSuchKey", "404", "NotFound"}


@dataclass
class Blob:
    body: bytes
    content_type: str
    length: int


def safe_filename(filename: str) -> str:
    return re.sub(r"[^A-Za-z0-9._-]", "_", filename)


def media_key(object_id: int, folder: str, filename: str) -> str:
    return f"objects/{object_id}/{folder}/{filename}"


def tree_key(object_id: int, model_id: int) -> str:
    return f"objects/{object_id}/models/{model_id}/tree.json"


def download_key(filename: str) -> str:
    return f"downloads/{filename}"


def portfolio_image_key(folder: str, filename: str) -> str:
    return f"portfolio/{folder}/{filename}"


def get_s3() -> Tuple[object, str]:
    """
    Get S3 client and bucket name.
    Raises StoreUnavailable if AWS credentials are missing.
    """
    key = settings.AWS_ACCESS_KEY_ID
    secret = settings.AWS_SECRET_ACCESS_KEY
    bucket = settings.AWS_BUCKET_NAME

    if not all([key, secret, bucket]):
        raise StoreUnavailable("S3 client", "missing AWS credentials")

    client = boto3.client(
        "s3",
        aws_access_key_id=key,
        aws_secret_access_key=secret,
        region_name=settings.AWS_REGION,
    )

    return client, bucket


def get_blob(key: str, default_content_type: str = "application/octet-stream") -> Blob:
    s3, bucket = get_s3()

    try:
        obj = s3.get_object(Bucket=bucket, Key=key)
        body = obj["Body"].read()
    except ClientError as e:
        code = e.response.get("Error", {}).get("Code", "")
        if code in MISSING_KEY_CODES:
            raise NotFoundError("File")
        logger.error(f"S3 read failed for {key}: {e}")
        raise StoreUnavailable("S3 read", str(e)) from e
    except BotoCoreError as e:
        logger.error(f"S3 read failed for {key}: {e}")
        raise StoreUnavailable("S3 read", str(e)) from e

    content_type = obj.get("ContentType") or default_content_type
    return Blob(body=body, content_type=content_type, length=len(body))


def put_blob(key: str, data: bytes, content_type: Optional[str] = None) -> None:
    s3, bucket = get_s3()

    extra = {"ContentType": content_type} if content_type else {}
    try:
        s3.put_object(Bucket=bucket, Key=key, Body=data, **extra)
    except (ClientError, BotoCoreError) as e:
        logger.error(f"S3 upload failed for {key}: {e}")
        raise StoreUnavailable("S3 upload", str(e)) from e


def delete_blob(key: str) -> None:
    s3, bucket = get_s3()

    try:
        s3.delete_object(Bucket=bucket, Key=key)
    except (ClientError, BotoCoreError) as e:
        logger.warning(f"S3 delete failed for {key}: {e}")
