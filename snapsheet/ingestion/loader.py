"""Read document photos from disk or uploads into base64 payloads."""
from __future__ import annotations

import logging
import mimetypes
from pathlib import Path
from typing import List, Optional, Tuple

from snapsheet.core.models import SourceImage
from snapsheet.core.utils import encode_base64

logger = logging.getLogger(__name__)

# Extensions the stdlib table does not always know about.
EXTRA_IMAGE_TYPES = {
    ".heic": "image/heic",
    ".heif": "image/heif",
    ".webp": "image/webp",
}


def guess_image_type(file_name: str) -> Optional[str]:
    """Return the image mime type for ``file_name`` or None if it is not an image."""

    suffix = Path(file_name).suffix.lower()
    if suffix in EXTRA_IMAGE_TYPES:
        return EXTRA_IMAGE_TYPES[suffix]
    mime_type, _ = mimetypes.guess_type(file_name)
    if mime_type and mime_type.startswith("image/"):
        return mime_type
    return None


def encode_image(file_name: str, raw_bytes: bytes, mime_type: Optional[str] = None) -> SourceImage:
    """Wrap raw image bytes (e.g. a Streamlit upload) as a ``SourceImage``."""

    resolved = mime_type or guess_image_type(file_name) or "image/jpeg"
    return SourceImage(file_name=file_name, base64_data=encode_base64(raw_bytes), mime_type=resolved)


def load_images(image_dir: Path) -> Tuple[List[SourceImage], List[str]]:
    """Load every image file directly under ``image_dir`` in name order.

    Returns the images plus alerts for files that were skipped.
    """

    images: List[SourceImage] = []
    alerts: List[str] = []

    if not image_dir.is_dir():
        logger.warning("Image directory %s does not exist", image_dir)
        return images, alerts

    logger.info("Loading images from %s", image_dir)

    for path in sorted(image_dir.iterdir()):
        if not path.is_file() or path.name.startswith("."):
            continue
        mime_type = guess_image_type(path.name)
        if not mime_type:
            alerts.append(f"Skipped non-image file {path.name}")
            continue
        try:
            images.append(encode_image(path.name, path.read_bytes(), mime_type))
        except OSError:
            logger.exception("Failed to read image %s", path)
            alerts.append(f"Failed to read image {path.name}")

    logger.info("Loaded %d images", len(images))
    return images, alerts
