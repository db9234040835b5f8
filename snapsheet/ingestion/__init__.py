"""Image sources feeding the extraction batch."""
from snapsheet.ingestion.loader import encode_image, guess_image_type, load_images

__all__ = [
    "encode_image",
    "guess_image_type",
    "load_images",
]
