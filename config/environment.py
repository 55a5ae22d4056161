"""
실행 환경 설정

.env 파일에서 봇 토큰, 길드, 데이터베이스 접속 정보를 읽어옵니다.
"""
import os
from dataclasses import dataclass

from dotenv import load_dotenv


@dataclass(frozen=True)
class BotEnvironment:
    """봇 실행에 필요한 환경 변수 묶음"""

    token: str
    application_id: int
    guild_id: int
    image_channel_id: int
    database_url: str
    database_user: str
    database_password: str
    database_port: int
    database_name: str

    @property
    def db_url(self) -> str:
        return (
            f"mysql://{self.database_user}:{self.database_password}"
            f"@{self.database_url}:{self.database_port}/{self.database_name}"
        )


def load_environment() -> BotEnvironment:
    """
    환경 변수 로드

    Raises:
        RuntimeError: 필수 환경 변수 누락
    """
    load_dotenv()

    is_dev = os.getenv("DEV") == "TRUE"
    prefix = "DEV_" if is_dev else ""

    env = BotEnvironment(
        token=os.getenv(f"{prefix}DISCORD_TOKEN") or "",
        application_id=int(os.getenv(f"{prefix}APPLICATION_ID") or 0),
        guild_id=int(os.getenv("GUILD_ID") or 0),
        image_channel_id=int(os.getenv("IMAGE_CHANNEL_ID") or 0),
        database_url=os.getenv("DATABASE_URL") or "",
        database_user=os.getenv("DATABASE_USER") or "",
        database_password=os.getenv("DATABASE_PASSWORD") or "",
        database_port=int(os.getenv("DATABASE_PORT") or 0),
        database_name=os.getenv("DATABASE_TABLE") or "",
    )

    if not env.token or not env.application_id or not env.guild_id:
        raise RuntimeError(
            f"환경변수 {prefix}DISCORD_TOKEN, {prefix}APPLICATION_ID, GUILD_ID를 .env에 모두 설정해주세요"
        )

    if not env.image_channel_id:
        raise RuntimeError("경매 이미지를 보관할 IMAGE_CHANNEL_ID를 .env에 설정해주세요")

    if not (
        env.database_url and env.database_user and env.database_password
        and env.database_port and env.database_name
    ):
        raise RuntimeError("데이터 베이스 설정에 필요한 정보가 부족합니다 .env를 확인해주세요")

    return env
