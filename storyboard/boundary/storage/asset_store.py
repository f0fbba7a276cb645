"""
Generated image persistence.

Stores image bytes produced by provider adapters and returns the public
reference that is written into chunks and job items. The local backend
writes into a directory mounted by the API under /api/images; the S3
backend uploads to a bucket and returns an s3:// URI.

Dependencies: boto3, asyncio, pathlib, uuid
System role: Asset store shared by all image provider adapters
"""

import asyncio
import logging
import re
from abc import ABC, abstractmethod
from pathlib import Path
from uuid import uuid4

from storyboard.configs.storage import StorageSettings

logger = logging.getLogger(__name__)

_UNSAFE_FILENAME_CHARS = re.compile(r"[^a-zA-Z0-9_]")


def detect_image_format(image_bytes: bytes) -> tuple[str, str]:
    """
    Detect image MIME type from magic numbers.

    Args:
        image_bytes: Raw image data (only the header is inspected)

    Returns:
        Tuple of (mime_type, extension) e.g., ("image/png", "png")
    """
    if image_bytes.startswith(b"\x89PNG"):
        return ("image/png", "png")
    elif image_bytes.startswith(b"\xff\xd8\xff"):
        return ("image/jpeg", "jpeg")
    elif image_bytes.startswith(b"GIF8"):
        return ("image/gif", "gif")
    elif image_bytes.startswith(b"RIFF") and b"WEBP" in image_bytes[:12]:
        return ("image/webp", "webp")

    logger.warning(
        f"{__name__}:detect_image_format - Could not detect format, defaulting to PNG"
    )
    return ("image/png", "png")


def build_asset_filename(prefix: str, description: str, extension: str = "png") -> str:
    """
    Build a descriptive, collision-resistant image filename.

    Uses the last two words of the description so files stay recognisable
    when browsing the upload directory.

    Args:
        prefix: Provider or image-kind prefix (e.g. "nanobanana", "symbol")
        description: Text the image was generated from
        extension: File extension without dot

    Returns:
        Filename like "image_1a2b3c4d_rocket_launch.png"
    """
    words = description.split()
    tail = "_".join(words[-2:]) if words else "content"
    tail = _UNSAFE_FILENAME_CHARS.sub("", tail).lower()[:20]
    short_id = uuid4().hex[:8]
    return f"{prefix}_{short_id}_{tail or 'chunk'}.{extension}"


class AssetStore(ABC):
    """Abstract store for generated image bytes."""

    @abstractmethod
    async def save(self, image_bytes: bytes, filename: str) -> str:
        """
        Persist image bytes.

        Args:
            image_bytes: Raw image data
            filename: Target filename (see build_asset_filename)

        Returns:
            Public reference to the stored image
        """


class LocalAssetStore(AssetStore):
    """Writes images into a directory served by the API."""

    def __init__(self, directory: str | Path, public_path: str = "/api/images") -> None:
        self.directory = Path(directory)
        self.public_path = public_path.rstrip("/")

    async def save(self, image_bytes: bytes, filename: str) -> str:
        if not image_bytes:
            raise ValueError("image_bytes cannot be empty")

        target = self.directory / filename
        await asyncio.to_thread(self._write, target, image_bytes)

        url = f"{self.public_path}/{filename}"
        logger.info(
            f"{__name__}:save - Image saved url={url}, size={len(image_bytes)} bytes"
        )
        return url

    @staticmethod
    def _write(target: Path, image_bytes: bytes) -> None:
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(image_bytes)


class S3AssetStore(AssetStore):
    """
    Uploads images to an S3 bucket.

    Stores with key structure: {prefix}/{filename} and the detected
    content type.
    """

    def __init__(self, s3_client, bucket_name: str, prefix: str = "images") -> None:
        """
        Initialize S3 asset store.

        Args:
            s3_client: Boto3 S3 client
            bucket_name: S3 bucket for image storage
            prefix: Key prefix for uploaded images

        Raises:
            ValueError: If s3_client or bucket_name not provided
        """
        if not s3_client:
            raise ValueError("s3_client is required")
        if not bucket_name:
            raise ValueError("bucket_name is required")

        self.s3_client = s3_client
        self.bucket_name = bucket_name
        self.prefix = prefix.strip("/")

        logger.debug(
            f"{__name__}:__init__ - S3AssetStore initialized bucket={bucket_name}"
        )

    async def save(self, image_bytes: bytes, filename: str) -> str:
        """
        Upload image to S3 and return its URI.

        Raises:
            ValueError: If image_bytes is empty
            botocore.exceptions.ClientError: If the upload fails
        """
        if not image_bytes:
            raise ValueError("image_bytes cannot be empty")

        mime_type, _ = detect_image_format(image_bytes[:16])
        s3_key = f"{self.prefix}/{filename}" if self.prefix else filename

        logger.debug(
            f"{__name__}:save - Uploading to S3 s3_key={s3_key}, size={len(image_bytes)} bytes"
        )

        # boto3 is sync; run the upload in a worker thread
        await asyncio.to_thread(
            self.s3_client.put_object,
            Bucket=self.bucket_name,
            Key=s3_key,
            Body=image_bytes,
            ContentType=mime_type,
        )

        logger.info(
            f"{__name__}:save - Successfully uploaded s3_key={s3_key}, mime_type={mime_type}"
        )
        return f"s3://{self.bucket_name}/{s3_key}"


def build_asset_store(settings: StorageSettings) -> AssetStore:
    """
    Create the asset store selected by configuration.

    Args:
        settings: Storage settings

    Returns:
        AssetStore: Local or S3 implementation

    Raises:
        ValueError: If the backend name is unknown
    """
    backend = settings.backend.lower()
    if backend == "local":
        return LocalAssetStore(settings.local_dir, settings.public_path)
    if backend == "s3":
        import boto3

        client = boto3.client("s3", region_name=settings.s3_region)
        return S3AssetStore(client, settings.s3_bucket, settings.s3_prefix)
    raise ValueError(f"Unknown asset storage backend: {settings.backend}")
