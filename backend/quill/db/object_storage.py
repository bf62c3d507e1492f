"""S3-compatible object storage for uploaded images."""

import logging
from collections.abc import Sequence
from urllib.parse import quote

import aioboto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from quill.config import get_settings
from quill.db.base import StoredObject
from quill.exceptions import ObjectExists, StoreError, UploadFailed

logger = logging.getLogger(__name__)

# Error codes S3 returns when a conditional (If-None-Match) write hits an existing key
_EXISTS_CODES = {"PreconditionFailed", "ConditionalRequestConflict"}
_DELETE_BATCH = 1000


class S3ObjectStorage:
    """Async S3 client bound to one bucket."""

    def __init__(self, bucket: str | None = None):
        self.settings = get_settings()
        self.bucket = bucket or self.settings.storage_bucket
        self.session = aioboto3.Session(
            aws_access_key_id=self.settings.aws_access_key_id or None,
            aws_secret_access_key=self.settings.aws_secret_access_key or None,
            region_name=self.settings.aws_region,
        )
        # Uploads are all-or-nothing from the caller's view; no silent retries
        self.config = Config(retries={"max_attempts": 1, "mode": "standard"})

    def get_client(self):
        """Get S3 client context manager."""
        kwargs = {"config": self.config}
        if self.settings.s3_endpoint_url:
            kwargs["endpoint_url"] = self.settings.s3_endpoint_url
        return self.session.client("s3", **kwargs)

    async def create_bucket_if_not_exists(self) -> None:
        """Create the image bucket if it doesn't exist."""
        async with self.get_client() as client:
            try:
                await client.head_bucket(Bucket=self.bucket)
            except ClientError:
                await client.create_bucket(Bucket=self.bucket)
                waiter = client.get_waiter("bucket_exists")
                await waiter.wait(Bucket=self.bucket)

    async def put_object(
        self, key: str, data: bytes, *, content_type: str, overwrite: bool = False
    ) -> None:
        """Upload bytes at ``key``; refuses to replace an existing object unless ``overwrite``."""
        kwargs = {
            "Bucket": self.bucket,
            "Key": key,
            "Body": data,
            "ContentType": content_type,
            "CacheControl": "max-age=3600",
        }
        if not overwrite:
            kwargs["IfNoneMatch"] = "*"

        try:
            async with self.get_client() as client:
                await client.put_object(**kwargs)
        except ClientError as e:
            code = e.response.get("Error", {}).get("Code", "")
            if code in _EXISTS_CODES:
                raise ObjectExists(f"Object already exists: {key}") from e
            raise UploadFailed(f"Storage rejected upload of {key}: {e}") from e
        except BotoCoreError as e:
            raise UploadFailed(f"Storage unreachable while uploading {key}: {e}") from e

    async def list_objects(self, prefix: str, *, limit: int = 100) -> list[StoredObject]:
        """List objects directly under ``prefix``, newest first."""
        folder = prefix.rstrip("/") + "/"
        objects: list[StoredObject] = []
        try:
            async with self.get_client() as client:
                paginator = client.get_paginator("list_objects_v2")
                async for page in paginator.paginate(Bucket=self.bucket, Prefix=folder):
                    for item in page.get("Contents", []):
                        name = item["Key"][len(folder):]
                        if name and "/" not in name:
                            objects.append(StoredObject(name=name, created_at=item["LastModified"]))
        except (ClientError, BotoCoreError) as e:
            raise StoreError(f"Listing {folder} failed: {e}") from e

        objects.sort(key=lambda obj: obj.created_at, reverse=True)
        return objects[:limit]

    async def remove_objects(self, keys: Sequence[str]) -> None:
        """Delete objects in batches. Raises StoreError if any key fails."""
        keys = list(keys)
        if not keys:
            return

        failed: list[str] = []
        try:
            async with self.get_client() as client:
                for start in range(0, len(keys), _DELETE_BATCH):
                    batch = keys[start : start + _DELETE_BATCH]
                    response = await client.delete_objects(
                        Bucket=self.bucket,
                        Delete={"Objects": [{"Key": k} for k in batch], "Quiet": True},
                    )
                    failed.extend(err.get("Key", "?") for err in response.get("Errors", []))
        except (ClientError, BotoCoreError) as e:
            raise StoreError(f"Deleting {len(keys)} objects failed: {e}") from e

        if failed:
            raise StoreError(f"Could not delete: {', '.join(failed)}")

    def get_public_url(self, key: str) -> str:
        base = self.settings.storage_public_url
        if not base:
            base = f"https://{self.bucket}.s3.{self.settings.aws_region}.amazonaws.com"
        return f"{base.rstrip('/')}/{quote(key)}"
