"""
경매 커맨드

경매 등록, 조회, 삭제, 재등록, 입찰 명령어를 제공합니다.
"""
import logging
from typing import Optional

import discord
from discord import app_commands
from discord.ext import commands

from config.auction import AUCTION
from decorator.account import requires_role
from exceptions import AuctionHouseError
from models import Auction, AuctionState, UserRole
from models.repos import find_account_by_id
from service.auction import AuctionDetails, AuctionService
from service.auction.schedule import parse_input_time
from service.image import DiscordImageStore
from service.user_service import get_user_by_discord_id

logger = logging.getLogger(__name__)

STATE_LABEL = {
    AuctionState.SCHEDULED: "⏳ 시작 전",
    AuctionState.ACTIVE: "🔥 진행 중",
    AuctionState.CLOSED: "🔒 종료",
}

CONDITION_CHOICES = [
    app_commands.Choice(name="새 상품", value="new"),
    app_commands.Choice(name="중고", value="used"),
]


async def _send_error(interaction: discord.Interaction, message: str) -> None:
    if interaction.response.is_done():
        await interaction.followup.send(f"⚠️ {message}", ephemeral=True)
    else:
        await interaction.response.send_message(f"⚠️ {message}", ephemeral=True)


def _auction_embed(auction: Auction) -> discord.Embed:
    state = auction.state
    embed = discord.Embed(
        title=auction.title,
        description=auction.description,
        color=discord.Color.gold() if state == AuctionState.ACTIVE else discord.Color.light_gray()
    )
    embed.add_field(name="상태", value=STATE_LABEL[state], inline=True)
    embed.add_field(name="분류", value=f"{auction.category} / {auction.condition.value}", inline=True)
    embed.add_field(name="시작가", value=f"{auction.starting_bid:,}", inline=True)
    embed.add_field(name="현재가", value=f"{auction.current_bid:,}", inline=True)
    embed.add_field(name="시작", value=discord.utils.format_dt(auction.start_time, "f"), inline=True)
    embed.add_field(name="종료", value=discord.utils.format_dt(auction.end_time, "R"), inline=True)
    embed.set_image(url=auction.image_url)
    embed.set_footer(text=f"경매 ID: {auction.id}")
    return embed


class AuctionCommand(commands.Cog):
    """경매 커맨드"""

    def __init__(self, bot: commands.Bot):
        self.bot = bot

    def _image_store(self) -> DiscordImageStore:
        channel = self.bot.get_channel(self.bot.env.image_channel_id)
        if channel is None:
            raise RuntimeError(f"Image channel {self.bot.env.image_channel_id} not found")
        return DiscordImageStore(channel)

    async def cog_app_command_error(
        self,
        interaction: discord.Interaction,
        error: app_commands.AppCommandError
    ):
        original = getattr(error, "original", error)
        if isinstance(original, AuctionHouseError):
            await _send_error(interaction, original.message)
            return
        if isinstance(error, app_commands.CheckFailure):
            return

        logger.error(f"Auction command failed: {original}", exc_info=original)
        await _send_error(interaction, "요청을 처리하지 못했습니다. 잠시 후 다시 시도해주세요.")

    # =========================================================================
    # 등록 / 조회
    # =========================================================================

    @app_commands.command(name="경매등록", description="🏛️ 새 경매를 등록합니다")
    @app_commands.describe(
        title="물품 이름",
        description="물품 설명",
        category="분류",
        condition="물품 상태",
        starting_bid="시작가",
        start_time="시작 시각 (예: 2026-10-20 21:00)",
        end_time="종료 시각 (예: 2026-10-21 21:00)",
        image="물품 이미지 (PNG, JPEG, WEBP)"
    )
    @app_commands.choices(condition=CONDITION_CHOICES)
    @requires_role(UserRole.AUCTIONEER)
    async def create(
        self,
        interaction: discord.Interaction,
        title: str,
        description: str,
        category: str,
        condition: app_commands.Choice[str],
        starting_bid: int,
        start_time: str,
        end_time: str,
        image: discord.Attachment
    ):
        await interaction.response.defer(thinking=True)

        user = await get_user_by_discord_id(interaction.user.id)
        details = AuctionDetails(
            title=title,
            description=description,
            category=category,
            condition=condition.value,
            starting_bid=starting_bid,
            start_time=parse_input_time(start_time),
            end_time=parse_input_time(end_time),
        )

        auction = await AuctionService.create_auction(user, details, image, self._image_store())

        await interaction.followup.send(
            content=(
                f"✅ 경매가 등록되었습니다. "
                f"{discord.utils.format_dt(auction.start_time, 'f')}부터 입찰할 수 있습니다."
            ),
            embed=_auction_embed(auction)
        )

    @app_commands.command(name="경매목록", description="📋 경매 목록을 확인합니다")
    async def list_all(self, interaction: discord.Interaction):
        summaries = await AuctionService.list_auctions(limit=AUCTION.LIST_PAGE_SIZE)

        if not summaries:
            await interaction.response.send_message("📭 등록된 경매가 없습니다.", ephemeral=True)
            return

        embed = discord.Embed(title="🏛️ 경매 목록", color=discord.Color.blue())
        for summary in summaries:
            embed.add_field(
                name=f"#{summary.id} {summary.title}",
                value=(
                    f"{STATE_LABEL[summary.state]} | 현재가 {summary.current_bid:,} "
                    f"(시작가 {summary.starting_bid:,}) | "
                    f"종료 {discord.utils.format_dt(summary.end_time, 'R')}"
                ),
                inline=False
            )

        await interaction.response.send_message(embed=embed)

    @app_commands.command(name="경매상세", description="🔍 경매 상세 정보와 입찰 현황을 확인합니다")
    @app_commands.describe(auction_id="경매 ID")
    async def detail(self, interaction: discord.Interaction, auction_id: str):
        detail = await AuctionService.get_auction_detail(auction_id)

        embed = _auction_embed(detail.auction)
        if detail.bidders:
            lines = [
                f"{rank}. {await self._mention(bid.bidder_id)} {bid.amount:,}"
                for rank, bid in enumerate(detail.bidders[:AUCTION.DETAIL_BIDDER_LIMIT], start=1)
            ]
            embed.add_field(name=f"입찰 현황 ({len(detail.bidders)}건)", value="\n".join(lines), inline=False)
        else:
            embed.add_field(name="입찰 현황", value="아직 입찰이 없습니다.", inline=False)

        await interaction.response.send_message(embed=embed)

    @staticmethod
    async def _mention(user_id: int) -> str:
        user = await find_account_by_id(user_id)
        return f"<@{user.discord_id}>" if user else "탈퇴한 사용자"

    @app_commands.command(name="내경매", description="🗂️ 내가 등록한 경매를 확인합니다")
    @requires_role(UserRole.AUCTIONEER)
    async def mine(self, interaction: discord.Interaction):
        user = await get_user_by_discord_id(interaction.user.id)
        auctions = await AuctionService.list_my_auctions(user)

        if not auctions:
            await interaction.response.send_message("📭 등록한 경매가 없습니다.", ephemeral=True)
            return

        embed = discord.Embed(title="🗂️ 내 경매", color=discord.Color.blue())
        for auction in auctions[:AUCTION.LIST_PAGE_SIZE]:
            embed.add_field(
                name=f"#{auction.id} {auction.title}",
                value=f"{STATE_LABEL[auction.state]} | 현재가 {auction.current_bid:,}",
                inline=False
            )
        await interaction.response.send_message(embed=embed, ephemeral=True)

    # =========================================================================
    # 삭제 / 재등록
    # =========================================================================

    async def _ensure_owner(self, interaction: discord.Interaction, auction_id: str) -> Optional[Auction]:
        user = await get_user_by_discord_id(interaction.user.id)
        auction = await AuctionService.get_auction(auction_id)
        if auction.created_by_id != user.id:
            await _send_error(interaction, "본인이 등록한 경매만 관리할 수 있습니다.")
            return None
        return auction

    @app_commands.command(name="경매삭제", description="🗑️ 경매를 삭제합니다")
    @app_commands.describe(auction_id="경매 ID")
    @requires_role(UserRole.AUCTIONEER)
    async def delete(self, interaction: discord.Interaction, auction_id: str):
        if await self._ensure_owner(interaction, auction_id) is None:
            return

        await AuctionService.delete_auction(auction_id)
        await interaction.response.send_message("🗑️ 경매가 삭제되었습니다.", ephemeral=True)

    @app_commands.command(name="경매재등록", description="🔁 종료된 경매를 새 일정으로 다시 등록합니다")
    @app_commands.describe(
        auction_id="경매 ID",
        start_time="시작 시각 (예: 2026-10-20 21:00)",
        end_time="종료 시각 (예: 2026-10-21 21:00)"
    )
    @requires_role(UserRole.AUCTIONEER)
    async def republish(self, interaction: discord.Interaction, auction_id: str, start_time: str, end_time: str):
        if await self._ensure_owner(interaction, auction_id) is None:
            return

        requester = await get_user_by_discord_id(interaction.user.id)
        result = await AuctionService.republish_auction(
            auction_id,
            parse_input_time(start_time),
            parse_input_time(end_time),
            requester
        )

        await interaction.response.send_message(
            content=(
                f"🔁 경매가 재등록되었습니다. "
                f"{discord.utils.format_dt(result.auction.start_time, 'f')}부터 입찰할 수 있습니다."
            ),
            embed=_auction_embed(result.auction)
        )

    # =========================================================================
    # 입찰
    # =========================================================================

    @app_commands.command(name="입찰", description="💰 경매에 입찰합니다")
    @app_commands.describe(auction_id="경매 ID", amount="입찰 금액")
    @requires_role(UserRole.BIDDER)
    async def bid(self, interaction: discord.Interaction, auction_id: str, amount: int):
        bidder = await get_user_by_discord_id(interaction.user.id)
        bid = await AuctionService.place_bid(auction_id, bidder, amount)

        await interaction.response.send_message(
            f"✅ 경매 #{bid.auction_id}에 **{bid.amount:,}**으로 입찰했습니다. 현재 최고 입찰자입니다."
        )


async def setup(bot: commands.Bot):
    await bot.add_cog(AuctionCommand(bot))
