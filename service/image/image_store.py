"""
경매 이미지 저장소

디스코드 첨부파일을 이미지 보관 채널로 다시 올려 영구 URL을 얻습니다.
형식 검사는 업로드 전에 수행합니다.
"""
import logging
from dataclasses import dataclass
from typing import Optional, Protocol

import discord

from config.auction import AUCTION
from exceptions import ImageUploadError, InvalidImageFormatError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ImageRef:
    """저장된 이미지 (외부 저장소가 발급한 id + url)"""
    public_id: str
    url: str


class ImageStore(Protocol):
    async def upload(self, image: discord.Attachment) -> ImageRef:
        ...


def normalize_content_type(content_type: Optional[str]) -> Optional[str]:
    """'image/png; charset=...' 형태를 'image/png'로 정리"""
    if not content_type:
        return None
    return content_type.split(";", 1)[0].strip().lower()


def validate_image_format(content_type: Optional[str]) -> str:
    """
    이미지 형식 검증

    Raises:
        InvalidImageFormatError: PNG, JPEG, WEBP가 아님
    """
    normalized = normalize_content_type(content_type)
    if normalized not in AUCTION.ALLOWED_IMAGE_TYPES:
        raise InvalidImageFormatError(content_type)
    return normalized


class DiscordImageStore:
    """이미지 보관 채널에 업로드하는 저장소"""

    def __init__(self, channel: discord.abc.Messageable):
        self.channel = channel

    async def upload(self, image: discord.Attachment) -> ImageRef:
        validate_image_format(image.content_type)

        try:
            file = await image.to_file()
            message = await self.channel.send(file=file)
        except discord.HTTPException as e:
            logger.error(f"Failed to upload auction image {image.filename}: {e}", exc_info=True)
            raise ImageUploadError() from e

        if not message.attachments:
            logger.error(f"Image channel returned no attachment for {image.filename}")
            raise ImageUploadError()

        stored = message.attachments[0]
        logger.info(f"Uploaded auction image {stored.id}")
        return ImageRef(public_id=str(stored.id), url=stored.url)
