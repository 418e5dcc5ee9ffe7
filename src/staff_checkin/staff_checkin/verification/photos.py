from __future__ import annotations

import io
import logging
import uuid
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, Optional, Protocol

import boto3
from botocore.exceptions import BotoCoreError, ClientError
from PIL import Image, UnidentifiedImageError
from werkzeug.utils import secure_filename

from ..common.datetime_utils import epoch_millis
from ..core.constants import PHOTO_JPEG_QUALITY
from ..core.exceptions import VerificationMissing

logger = logging.getLogger(__name__)

JPEG_CONTENT_TYPE = "image/jpeg"


@dataclass(frozen=True)
class StoredPhoto:
    public_url: str
    key: str


class PhotoStorage(Protocol):
    def upload_verification_photo(
        self, image_bytes: bytes, path_hint: str, *, filename: Optional[str] = None
    ) -> Optional[StoredPhoto]:
        """Store the photo; returns None when the upload failed."""

        raise NotImplementedError


def photo_filename(staff_id: int, when: datetime) -> str:
    return f"checkin_{staff_id}_{epoch_millis(when)}.jpg"


def normalize_photo(image_bytes: bytes, *, max_side: int = 1280) -> bytes:
    """Decode an uploaded/captured image and re-encode it as JPEG.

    Anything Pillow cannot read is not a verification photo.
    """

    if not image_bytes:
        raise VerificationMissing()
    try:
        img = Image.open(io.BytesIO(image_bytes))
        img = img.convert("RGB")
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError) as e:
        raise VerificationMissing("The photo could not be read. Please retake it.") from e

    img.thumbnail((max_side, max_side))
    out = io.BytesIO()
    img.save(out, format="JPEG", quality=PHOTO_JPEG_QUALITY)
    return out.getvalue()


def _object_key(path_hint: str, filename: Optional[str]) -> str:
    parts = [secure_filename(p) for p in str(path_hint or "").split("/")]
    name = secure_filename(filename or "") or f"{uuid.uuid4().hex}.jpg"
    return "/".join([p for p in parts if p] + [name])


class LocalPhotoStorage:
    """Stores photos on disk under ``root_dir``; URLs are served by the app."""

    def __init__(self, root_dir: str | Path, *, base_url: str = "/photos"):
        self._root = Path(root_dir)
        self._base_url = base_url.rstrip("/")

    @property
    def root(self) -> Path:
        return self._root

    def upload_verification_photo(
        self, image_bytes: bytes, path_hint: str, *, filename: Optional[str] = None
    ) -> Optional[StoredPhoto]:
        key = _object_key(path_hint, filename)
        target = self._root / key
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(image_bytes)
        except OSError:
            logger.exception("Could not write verification photo to %s", target)
            return None
        return StoredPhoto(public_url=f"{self._base_url}/{key}", key=key)


class S3PhotoStorage:
    def __init__(self, bucket: str, *, client: Any = None, region: Optional[str] = None):
        self._bucket = bucket
        self._client = client or boto3.client("s3", region_name=region)

    def upload_verification_photo(
        self, image_bytes: bytes, path_hint: str, *, filename: Optional[str] = None
    ) -> Optional[StoredPhoto]:
        key = _object_key(path_hint, filename)
        try:
            self._client.upload_fileobj(
                io.BytesIO(image_bytes),
                self._bucket,
                key,
                ExtraArgs={"ContentType": JPEG_CONTENT_TYPE},
            )
        except (BotoCoreError, ClientError):
            logger.exception("S3 upload of %s to bucket %s failed", key, self._bucket)
            return None
        return StoredPhoto(public_url=f"https://{self._bucket}.s3.amazonaws.com/{key}", key=key)


def build_photo_storage(
    backend: str,
    *,
    photo_dir: str | Path = "uploads/photos",
    base_url: str = "/photos",
    bucket: Optional[str] = None,
    region: Optional[str] = None,
) -> PhotoStorage:
    backend = (backend or "local").lower()
    if backend == "s3":
        if not bucket:
            raise ValueError("PHOTO_STORAGE=s3 requires S3_BUCKET")
        return S3PhotoStorage(bucket, region=region)
    if backend == "local":
        return LocalPhotoStorage(photo_dir, base_url=base_url)
    raise ValueError(f"Unknown PHOTO_STORAGE backend: {backend!r}")
