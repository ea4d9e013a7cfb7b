"""
Image Host Service für CraftHub

Service for uploading product and course images to the S3-compatible image
bucket. Uploads happen one file at a time; every successful upload returns a
durable public URL that is stored on the product record.

Features:
- boto3 client against any S3-compatible endpoint (Wasabi, R2, AWS)
- Size and content-type validation before the upload starts
- Normalised object keys (prefix/uuid.ext)
- Structured ImageUploadError on failure

Author: CraftHub Development Team
Version: 1.0.0
"""

import logging
import mimetypes
import os
import uuid
from typing import Optional

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError
from django.conf import settings

from core.exceptions import ImageUploadError, ValidationFailed

logger = logging.getLogger(__name__)


class ImageHostClient:
    """
    Thin client around the image bucket.

    Configuration comes from the ``IMAGE_HOST_*`` settings; every value can
    be overridden through the constructor (tests pass a stubbed ``client``).
    """

    def __init__(
        self,
        bucket: Optional[str] = None,
        endpoint_url: Optional[str] = None,
        region: Optional[str] = None,
        public_base_url: Optional[str] = None,
        client=None,
    ) -> None:
        self.bucket = bucket or settings.IMAGE_HOST_BUCKET
        self.endpoint_url = endpoint_url or settings.IMAGE_HOST_ENDPOINT_URL
        self.region = region or settings.IMAGE_HOST_REGION
        self.public_base_url = (public_base_url or settings.IMAGE_HOST_PUBLIC_BASE_URL or "").rstrip("/")
        self.max_bytes = settings.MAX_IMAGE_UPLOAD_BYTES
        self._client = client

    def get_s3_client(self):
        """Erstellt (einmalig) den boto3 S3-Client für den Image-Bucket."""
        if self._client is None:
            self._client = boto3.client(
                "s3",
                endpoint_url=self.endpoint_url or None,
                region_name=self.region or None,
                aws_access_key_id=settings.IMAGE_HOST_ACCESS_KEY_ID or None,
                aws_secret_access_key=settings.IMAGE_HOST_SECRET_ACCESS_KEY or None,
                config=Config(s3={"addressing_style": "virtual"}),
            )
        return self._client

    def build_key(self, filename: str, prefix: str = "products") -> str:
        extension = os.path.splitext(filename or "")[1].lower() or ".jpg"
        return f"{prefix.strip('/')}/{uuid.uuid4().hex}{extension}"

    def public_url(self, key: str) -> str:
        if self.public_base_url:
            return f"{self.public_base_url}/{key}"
        if self.endpoint_url:
            return f"{self.endpoint_url.rstrip('/')}/{self.bucket}/{key}"
        return f"https://{self.bucket}.s3.amazonaws.com/{key}"

    def validate(self, upload) -> str:
        """
        Check size and type of one uploaded file.

        Returns:
            The content type to store the object with

        Raises:
            ValidationFailed: File too large or not an image
        """
        size = getattr(upload, "size", None)
        if size is not None and size > self.max_bytes:
            raise ValidationFailed(
                f"Image exceeds the {self.max_bytes // (1024 * 1024)}MB limit.",
                details={"file": getattr(upload, "name", "")},
            )
        content_type = getattr(upload, "content_type", None) or mimetypes.guess_type(
            getattr(upload, "name", "") or ""
        )[0]
        if not content_type or not content_type.startswith("image/"):
            raise ValidationFailed(
                "Only image files can be uploaded.",
                details={"file": getattr(upload, "name", "")},
            )
        return content_type

    def upload(self, upload, prefix: str = "products") -> str:
        """
        Upload a single file and return its public URL.

        Args:
            upload: Django ``UploadedFile`` (or any file-like with ``name``)
            prefix: Key prefix inside the bucket

        Returns:
            Durable public URL of the stored image

        Raises:
            ValidationFailed: Rejected before contacting the host
            ImageUploadError: Host rejected or failed the upload
        """
        content_type = self.validate(upload)
        key = self.build_key(getattr(upload, "name", ""), prefix=prefix)

        try:
            self.get_s3_client().upload_fileobj(
                upload,
                self.bucket,
                key,
                ExtraArgs={"ContentType": content_type, "ACL": "public-read"},
            )
        except (ClientError, BotoCoreError) as exc:
            logger.error("Image upload to %s/%s failed: %s", self.bucket, key, exc)
            raise ImageUploadError(details={"file": getattr(upload, "name", "")}) from exc

        url = self.public_url(key)
        logger.info("Uploaded image %s", url)
        return url
