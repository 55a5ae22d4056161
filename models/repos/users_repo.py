from typing import Optional

from models import User


async def find_account_by_discord_id(discord_id: int) -> Optional[User]:
    return await User.get_or_none(discord_id=discord_id)


async def exists_account_by_discord_id(discord_id: int) -> bool:
    return await User.exists(discord_id=discord_id)


async def find_account_by_id(user_id: int) -> Optional[User]:
    return await User.get_or_none(id=user_id)
