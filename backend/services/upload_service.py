"""
Image upload service.

Images are validated locally (content type and size) and then sent in one
signed request to Cloudinary. No retries: a failed upload is reported to
the caller, who can try again.
"""

import io

import cloudinary.exceptions
import cloudinary.uploader
from loguru import logger

import models.schemas as schemas
from models.config import settings
from models.exceptions import ImageUploadException, ValidationException

UPLOAD_TIMEOUT_SECONDS = 30


class UploadService:
    """Validates and forwards complaint images to the image host."""

    @staticmethod
    def validate(content_type: str | None, size: int) -> None:
        """
        Check an upload against the allow-list and size limit.

        Raises:
            ValidationException: Empty file, wrong type or too large
        """
        if not content_type or content_type.lower() not in settings.UPLOAD_ALLOWED_TYPES:
            allowed = ", ".join(settings.UPLOAD_ALLOWED_TYPES)
            raise ValidationException(f"Invalid file type. Allowed types: {allowed}")
        if size <= 0:
            raise ValidationException("Uploaded file is empty")
        if size > settings.UPLOAD_MAX_BYTES:
            max_mb = settings.UPLOAD_MAX_BYTES / (1024 * 1024)
            raise ValidationException(f"File too large. Maximum size is {max_mb:g}MB")

    @classmethod
    def upload_image(
        cls, filename: str, content: bytes, content_type: str | None
    ) -> schemas.UploadResult:
        """
        Upload one image and return its hosted URL.

        Args:
            filename: Original file name
            content: File bytes
            content_type: Declared MIME type

        Returns:
            Hosted image details

        Raises:
            ValidationException: File rejected before any network call
            ImageUploadException: Host unconfigured, unreachable or erroring
        """
        cls.validate(content_type, len(content))

        if not settings.image_host_configured:
            raise ImageUploadException("Image host is not configured")

        try:
            body = cloudinary.uploader.upload(
                io.BytesIO(content),
                filename=filename or "upload",
                folder=settings.IMAGE_HOST_FOLDER,
                resource_type="image",
                cloud_name=settings.IMAGE_HOST_CLOUD_NAME,
                api_key=settings.IMAGE_HOST_API_KEY,
                api_secret=settings.IMAGE_HOST_API_SECRET,
                timeout=UPLOAD_TIMEOUT_SECONDS,
            )
        except cloudinary.exceptions.Error as e:
            logger.error(f"Image upload failed: {e}")
            raise ImageUploadException() from e

        if not body or "secure_url" not in body:
            logger.error("Image host response is missing secure_url")
            raise ImageUploadException()

        logger.info(f"Uploaded image {body.get('public_id')} ({len(content)} bytes)")
        return schemas.UploadResult(
            secure_url=body["secure_url"],
            public_id=body.get("public_id", ""),
            width=body.get("width"),
            height=body.get("height"),
            format=body.get("format"),
        )
