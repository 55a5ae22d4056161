from discord import Interaction, app_commands

from models import UserRole
from models.repos import find_account_by_discord_id


def requires_account():
    async def predicate(interaction: Interaction):
        user = await find_account_by_discord_id(interaction.user.id)
        if user is None:
            await interaction.response.send_message(
                "❗ 가입이 필요합니다. `/가입` 명령어로 먼저 가입해주세요.",
                ephemeral=True
            )
            return False
        return True

    return app_commands.check(predicate)


def requires_role(role: UserRole):
    async def predicate(interaction: Interaction):
        user = await find_account_by_discord_id(interaction.user.id)
        if user is None:
            await interaction.response.send_message(
                "❗ 가입이 필요합니다. `/가입` 명령어로 먼저 가입해주세요.",
                ephemeral=True
            )
            return False
        if user.role != role:
            await interaction.response.send_message(
                f"❗ `{role.value}` 역할만 사용할 수 있는 명령어입니다.",
                ephemeral=True
            )
            return False
        return True

    return app_commands.check(predicate)
