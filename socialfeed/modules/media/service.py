import logging
from dataclasses import dataclass
from typing import Iterable, List, Optional

from fastapi import UploadFile
from fastapi.concurrency import run_in_threadpool

from socialfeed.core.errors import ValidationError
from socialfeed.core.messages import ErrorMessages
from socialfeed.core.storage import ObjectStorage

logger = logging.getLogger(__name__)

POST_IMAGES_PREFIX = "posts"
PROFILE_IMAGES_PREFIX = "profile-images"


@dataclass
class ImageFile:
    """An uploaded image read fully into memory"""
    filename: Optional[str]
    content_type: str
    content: bytes

    @property
    def size(self) -> int:
        return len(self.content)


def validate_image(image: ImageFile, max_size: int) -> None:
    if image.size > max_size:
        raise ValidationError(ErrorMessages.FILE_TOO_LARGE)
    if not (image.content_type or "").startswith("image/"):
        raise ValidationError(ErrorMessages.FILE_INVALID_TYPE)


async def read_uploads(files: Iterable[UploadFile]) -> List[ImageFile]:
    """Read multipart file parts, skipping empty ones (blank file inputs)."""
    images = []
    for upload in files:
        if upload is None:
            continue
        content = await upload.read()
        if not content:
            continue
        images.append(ImageFile(
            filename=upload.filename,
            content_type=upload.content_type or "",
            content=content,
        ))
    return images


class MediaService:
    """Validates images and stores them through ``ObjectStorage``.

    Files of one request are all validated before the first upload. If an
    upload fails, the ones already stored for that request are deleted again.
    """

    def __init__(self, storage: ObjectStorage, max_size: int):
        self.storage = storage
        self.max_size = max_size

    async def upload_images(self, images: List[ImageFile], prefix: str) -> List[str]:
        """Upload sequentially, returning URLs in submission order."""
        for image in images:
            validate_image(image, self.max_size)

        urls: List[str] = []
        try:
            for image in images:
                url = await run_in_threadpool(
                    self.storage.upload_bytes, image.content, image.filename, image.content_type, prefix,
                )
                urls.append(url)
        except Exception:
            await self.discard(urls)
            raise

        logger.info(f"Uploaded {len(urls)} image(s) under '{prefix}'")
        return urls

    async def upload_image(self, image: ImageFile, prefix: str) -> str:
        return (await self.upload_images([image], prefix))[0]

    async def discard(self, urls: List[str]) -> None:
        """Best-effort removal of blobs whose owning row was never written."""
        for url in urls:
            deleted = await run_in_threadpool(self.storage.delete_file, url)
            if not deleted:
                logger.warning(f"Could not remove orphaned upload {url}")
