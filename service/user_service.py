import logging
from typing import Union

from tortoise.exceptions import IntegrityError

from exceptions import UserAlreadyExistsError, UserNotFoundError, ValidationError
from models import User, UserRole
from models.repos import exists_account_by_discord_id, find_account_by_discord_id

logger = logging.getLogger(__name__)


async def register_user(discord_id: int, username: str, role: Union[UserRole, str]) -> User:
    """
    가입

    Raises:
        UserAlreadyExistsError: 이미 가입됨
        ValidationError: 알 수 없는 역할
    """
    if await exists_account_by_discord_id(discord_id):
        raise UserAlreadyExistsError(discord_id)

    try:
        role = UserRole(role)
    except ValueError:
        raise ValidationError(f"존재하지 않는 역할입니다: {role}") from None

    try:
        user = await User.create(discord_id=discord_id, username=username, role=role)
    except IntegrityError:
        # 동시에 들어온 가입 요청이 먼저 반영됨
        raise UserAlreadyExistsError(discord_id) from None

    logger.info(f"Registered user {user.id} ({role.value})")
    return user


async def get_user_by_discord_id(discord_id: int) -> User:
    user = await find_account_by_discord_id(discord_id)
    if user is None:
        raise UserNotFoundError(discord_id)
    return user
