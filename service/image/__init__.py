"""경매 이미지 저장소"""

from .image_store import (
    DiscordImageStore,
    ImageRef,
    ImageStore,
    normalize_content_type,
    validate_image_format,
)

__all__ = [
    "DiscordImageStore",
    "ImageRef",
    "ImageStore",
    "normalize_content_type",
    "validate_image_format",
]
