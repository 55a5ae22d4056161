"""
경매장 봇 설정 상수

매직 넘버와 운영 정책 값은 config/ 하위 모듈에서 관리합니다.
"""
from config.auction import AuctionConfig, AUCTION
from config.environment import BotEnvironment, load_environment

__all__ = [
    # auction
    "AuctionConfig", "AUCTION",
    # environment
    "BotEnvironment", "load_environment",
]
