"""배경 작업 Cog - 경매 마감 정산, 중단된 재등록 마무리"""
import logging
from discord.ext import commands, tasks

from config.auction import AUCTION
from service.auction import AuctionService, resume_pending_republishes

logger = logging.getLogger(__name__)


class BackgroundTasksCog(commands.Cog):
    """주기적 배경 작업 관리"""

    def __init__(self, bot):
        self.bot = bot
        self.close_due_auctions.start()
        self.resume_republishes.start()
        logger.info("BackgroundTasksCog initialized")

    def cog_unload(self):
        """Cog 언로드 시 작업 정지"""
        self.close_due_auctions.cancel()
        self.resume_republishes.cancel()
        logger.info("BackgroundTasksCog unloaded")

    @tasks.loop(seconds=AUCTION.CLOSE_SWEEP_INTERVAL_SECONDS)
    async def close_due_auctions(self):
        """마감된 경매 정산 (1분마다)"""
        try:
            settled = await AuctionService.close_due_auctions()

            if settled > 0:
                logger.info(f"🔨 Settled {settled} closed auctions")
            else:
                logger.debug("No closed auctions to settle")

        except Exception as e:
            logger.error(f"Failed to close due auctions: {e}", exc_info=True)

    @tasks.loop(seconds=AUCTION.CLOSE_SWEEP_INTERVAL_SECONDS)
    async def resume_republishes(self):
        """중단된 재등록 마무리"""
        try:
            await resume_pending_republishes()
        except Exception as e:
            logger.error(f"Failed to resume pending republishes: {e}", exc_info=True)

    @close_due_auctions.before_loop
    @resume_republishes.before_loop
    async def before_tasks(self):
        """봇 준비 대기"""
        await self.bot.wait_until_ready()
        logger.info("Background auction tasks ready")


async def setup(bot):
    """Cog 로드"""
    await bot.add_cog(BackgroundTasksCog(bot))
