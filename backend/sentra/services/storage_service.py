# Overview: S3-compatible object storage (DigitalOcean Spaces): pre-signed uploads and best-effort ACL repair.

"""
Storage Service

Upload is a two-step protocol:
1. POST {fileName, fileType} -> {uploadUrl, fileName, publicUrl}
2. the caller PUTs the raw bytes straight to uploadUrl

The stored key never reuses the caller's file name; only its extension is
kept ("<ms timestamp>-<random>.<ext>").

ACL repair sets public-read on one object or on every object in the
bucket. A failure on one object is counted and the batch carries on.
"""

from __future__ import annotations

import logging
import secrets
import string

import boto3
import httpx
from botocore.exceptions import BotoCoreError, ClientError
from flask import current_app

from ..validation import SentraError, ValidationError
from sentra.time_utils import now_ms

logger = logging.getLogger(__name__)

LIST_PAGE_SIZE = 1000
PUBLIC_READ = "public-read"
CACHE_CONTROL = "public, max-age=31536000"

_KEY_ALPHABET = string.ascii_lowercase + string.digits


class StorageNotConfiguredError(SentraError):
    """Raised when the DO_SPACES_* settings are incomplete."""


class StorageError(SentraError):
    """Raised when the object store rejects a request."""


def _settings() -> dict:
    cfg = current_app.config
    settings = {
        "endpoint": cfg.get("SPACES_ENDPOINT"),
        "region": cfg.get("SPACES_REGION"),
        "key": cfg.get("SPACES_KEY"),
        "secret": cfg.get("SPACES_SECRET"),
        "bucket": cfg.get("SPACES_BUCKET"),
    }
    missing = [name for name, value in settings.items() if not value]
    if missing:
        raise StorageNotConfiguredError("DigitalOcean Spaces configuration missing")
    return settings


def _client(settings: dict):
    endpoint = settings["endpoint"]
    if not endpoint.startswith("https://") and not endpoint.startswith("http://"):
        endpoint = f"https://{endpoint}"
    return boto3.client(
        "s3",
        endpoint_url=endpoint,
        region_name=settings["region"],
        aws_access_key_id=settings["key"],
        aws_secret_access_key=settings["secret"],
    )


def public_url(settings: dict, key: str) -> str:
    base = current_app.config.get("SPACES_PUBLIC_BASE_URL")
    if base:
        return f"{base.rstrip('/')}/{key}"
    return f"https://{settings['bucket']}.{settings['region']}.digitaloceanspaces.com/{key}"


def unique_key(file_name: str) -> str:
    """"report.final.pdf" -> "1736500000000-k3j9x0q2m1abc.pdf"."""
    random_part = "".join(secrets.choice(_KEY_ALPHABET) for _ in range(13))
    extension = file_name.rsplit(".", 1)[-1] if "." in file_name else "bin"
    return f"{now_ms()}-{random_part}.{extension}"


def generate_upload_url(file_name: str, file_type: str) -> dict:
    if not file_name or not file_type:
        raise ValidationError("fileName and fileType are required")

    settings = _settings()
    key = unique_key(file_name)
    client = _client(settings)
    try:
        upload_url = client.generate_presigned_url(
            "put_object",
            Params={
                "Bucket": settings["bucket"],
                "Key": key,
                "ContentType": file_type,
                "ACL": PUBLIC_READ,
                "CacheControl": CACHE_CONTROL,
            },
            ExpiresIn=current_app.config.get("UPLOAD_URL_EXPIRES_SECONDS", 3600),
        )
    except (BotoCoreError, ClientError) as e:
        raise StorageError(f"Failed to generate upload URL: {e}") from e

    logger.info("Issued upload URL for %s (%s)", key, file_type)
    return {
        "uploadUrl": upload_url,
        "fileName": key,
        "publicUrl": public_url(settings, key),
    }


def fix_file_acl(file_name: str) -> dict:
    if not file_name:
        raise ValidationError("fileName is required")

    settings = _settings()
    client = _client(settings)
    try:
        client.put_object_acl(Bucket=settings["bucket"], Key=file_name, ACL=PUBLIC_READ)
    except (BotoCoreError, ClientError) as e:
        raise StorageError(f"Failed to fix file ACL: {e}") from e

    logger.info("ACL fixed for %s", file_name)
    return {
        "success": True,
        "message": "File ACL fixed successfully",
        "fileUrl": public_url(settings, file_name),
        "fileName": file_name,
    }


def iter_object_keys(client, bucket: str):
    """Yield every non-folder key in the bucket, 1000 keys per list call."""
    paginator = client.get_paginator("list_objects_v2")
    for page in paginator.paginate(Bucket=bucket, PaginationConfig={"PageSize": LIST_PAGE_SIZE}):
        for obj in page.get("Contents") or []:
            key = obj.get("Key")
            if not key or key.endswith("/"):
                continue
            yield key


def list_object_keys() -> list[str]:
    settings = _settings()
    client = _client(settings)
    try:
        return list(iter_object_keys(client, settings["bucket"]))
    except (BotoCoreError, ClientError) as e:
        raise StorageError(f"Failed to list bucket objects: {e}") from e


def fix_all_files() -> dict:
    """Set public-read on every object; per-object failures are counted, never raised."""
    settings = _settings()
    client = _client(settings)

    fixed = 0
    failed = 0
    total = 0
    try:
        for key in iter_object_keys(client, settings["bucket"]):
            total += 1
            try:
                client.put_object_acl(Bucket=settings["bucket"], Key=key, ACL=PUBLIC_READ)
                fixed += 1
                if fixed % 10 == 0:
                    logger.info("Fixed %s files...", fixed)
            except (BotoCoreError, ClientError) as e:
                failed += 1
                logger.warning("Failed to fix ACL for %s: %s", key, e)
    except (BotoCoreError, ClientError) as e:
        raise StorageError(f"Failed to list bucket objects: {e}") from e

    logger.info("ACL fix completed: fixed=%s failed=%s total=%s", fixed, failed, total)
    return {
        "success": True,
        "message": "ACL fix completed successfully" if total else "No files to fix ACL for",
        "fixedCount": fixed,
        "failedCount": failed,
        "totalFiles": total,
    }


def setup_public_access(check_key: str = "acl-check/public-read.txt") -> dict:
    """
    Upload a check object with public-read, check it is publicly readable,
    re-apply the ACL once if it is not, then remove the check object.
    """
    settings = _settings()
    client = _client(settings)
    url = public_url(settings, check_key)

    try:
        client.put_object(
            Bucket=settings["bucket"],
            Key=check_key,
            Body=b"ok",
            ContentType="text/plain",
            ACL=PUBLIC_READ,
        )
    except (BotoCoreError, ClientError) as e:
        raise StorageError(f"Failed to upload check object: {e}") from e

    acl_reapplied = False
    try:
        accessible = _is_public(url)
        if not accessible:
            logger.warning("Check object not publicly readable, re-applying ACL")
            client.put_object_acl(Bucket=settings["bucket"], Key=check_key, ACL=PUBLIC_READ)
            acl_reapplied = True
            accessible = _is_public(url)
    except (BotoCoreError, ClientError) as e:
        raise StorageError(f"Failed to re-apply ACL on check object: {e}") from e
    finally:
        try:
            client.delete_object(Bucket=settings["bucket"], Key=check_key)
        except (BotoCoreError, ClientError) as e:
            logger.warning("Failed to remove check object %s: %s", check_key, e)

    return {
        "success": accessible,
        "publicUrl": url,
        "aclReapplied": acl_reapplied,
    }


def _is_public(url: str) -> bool:
    try:
        response = httpx.head(url, timeout=10.0, follow_redirects=True)
    except httpx.HTTPError as e:
        logger.warning("Public access check failed for %s: %s", url, e)
        return False
    return response.status_code == 200
