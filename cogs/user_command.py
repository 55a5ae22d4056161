"""
유저 관련 명령어 (가입, 정산 정보)
"""
import logging

import discord
from discord import app_commands
from discord.ext import commands

from decorator.account import requires_account
from exceptions import AuctionHouseError
from models import UserRole
from service.user_service import get_user_by_discord_id, register_user

logger = logging.getLogger(__name__)

ROLE_CHOICES = [
    app_commands.Choice(name="판매자", value=UserRole.AUCTIONEER.value),
    app_commands.Choice(name="입찰자", value=UserRole.BIDDER.value),
]


class UserCommand(commands.Cog):
    """유저 관련 명령어"""

    def __init__(self, bot: commands.Bot):
        self.bot = bot

    @app_commands.command(name="가입", description="📝 경매장에 가입합니다")
    @app_commands.describe(role="역할")
    @app_commands.choices(role=ROLE_CHOICES)
    async def register(self, interaction: discord.Interaction, role: app_commands.Choice[str]):
        try:
            user = await register_user(
                discord_id=interaction.user.id,
                username=interaction.user.name,
                role=role.value
            )
        except AuctionHouseError as e:
            await interaction.response.send_message(f"⚠️ {e.message}", ephemeral=True)
            return

        await interaction.response.send_message(
            f"✅ {role.name}(으)로 가입되었습니다. (ID: {user.id})",
            ephemeral=True
        )

    @app_commands.command(name="내정보", description="📊 낙찰 횟수와 정산 정보를 확인합니다")
    @requires_account()
    async def my_info(self, interaction: discord.Interaction):
        user = await get_user_by_discord_id(interaction.user.id)

        embed = discord.Embed(
            title=f"📊 {user.get_name()}",
            color=discord.Color.blue()
        )
        embed.add_field(name="역할", value=user.role.value, inline=True)
        embed.add_field(name="낙찰 횟수", value=f"{user.auctions_won}회", inline=True)
        embed.add_field(name="누적 지출", value=f"{user.money_spent:,}", inline=True)
        embed.add_field(name="미납 수수료", value=f"{user.unpaid_commission:,}", inline=True)

        await interaction.response.send_message(embed=embed, ephemeral=True)


async def setup(bot: commands.Bot):
    await bot.add_cog(UserCommand(bot))
