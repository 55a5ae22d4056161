# bot.py
import os
import discord
from discord.app_commands import CheckFailure, CommandSignatureMismatch
from discord.ext import commands
from tortoise import Tortoise

import logging

from config.environment import BotEnvironment, load_environment
from exceptions import AuctionHouseError

# 로그 기본 설정
logging.basicConfig(
    level=logging.INFO,  # DEBUG, INFO, WARNING, ERROR, CRITICAL
    format="%(asctime)s [%(levelname)s] %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S"
)

COGS_DIR = os.path.join(os.path.dirname(os.path.abspath(__file__)), "cogs")


class AuctionBot(commands.Bot):
    def __init__(self, env: BotEnvironment):
        intents = discord.Intents.default()
        super().__init__(
            command_prefix="!",
            intents=intents,
            application_id=env.application_id
        )
        self.env = env

    async def setup_hook(self):
        logging.info("데이터 베이스 연결 시작")
        await self.init_db()
        logging.info("데이터 베이스 연결")

        for fn in sorted(os.listdir(COGS_DIR)):
            if fn.endswith(".py") and not fn.startswith("_"):
                await self.load_extension(f"cogs.{fn[:-3]}")
                logging.info(f"Loaded cogs.{fn[:-3]}")

        guild = discord.Object(id=self.env.guild_id)
        self.tree.copy_global_to(guild=guild)
        guild_synced = await self.tree.sync(guild=guild)
        logging.info(f"길드 커맨드 {len(guild_synced)}개 re-synced: {[c.name for c in guild_synced]}")

    async def init_db(self):
        await Tortoise.init(
            db_url=self.env.db_url,
            modules={"models": ["models"]},
            use_tz=True
        )
        await Tortoise.generate_schemas()

    async def close(self):
        await super().close()
        await Tortoise.close_connections()
        logging.info("데이터 베이스 연결 종료")

    async def on_ready(self):
        logging.info(f"Logged in as {self.user} (ID: {self.user.id})")


def main():
    env = load_environment()
    bot = AuctionBot(env)

    @bot.tree.error
    async def on_app_command_error(interaction: discord.Interaction, error):
        if isinstance(error, CommandSignatureMismatch):
            await interaction.response.defer(ephemeral=True, thinking=True)
            synced = await bot.tree.sync(guild=discord.Object(id=env.guild_id))
            return await interaction.followup.send(
                f"⚠️ 명령 시그니처가 갱신되어 `{', '.join(c.name for c in synced)}` 명령어를 재등록했습니다 .\n "
                "다시 시도해 주세요.",
                ephemeral=True
            )
        # 경매 규칙 위반과 권한 체크 실패는 cog에서 이미 응답함
        if isinstance(error, CheckFailure) or isinstance(getattr(error, "original", None), AuctionHouseError):
            return
        raise error

    bot.run(env.token, log_handler=None)


if __name__ == "__main__":
    main()
