"""경매장 관련 설정 (수수료, 이미지, 스케줄, 재시도)"""
from dataclasses import dataclass


@dataclass(frozen=True)
class AuctionConfig:
    """경매장 설정"""

    COMMISSION_RATE: float = 0.05
    """낙찰 수수료율 (5%)"""

    ALLOWED_IMAGE_TYPES: tuple[str, ...] = ("image/png", "image/jpeg", "image/webp")
    """등록 가능한 이미지 형식"""

    CLOSE_SWEEP_INTERVAL_SECONDS: int = 60
    """마감 처리 주기 (1분)"""

    STORE_RETRY_ATTEMPTS: int = 3
    """저장소 오류 시 최대 시도 횟수"""

    STORE_RETRY_WAIT_SECONDS: float = 0.1
    """재시도 대기 시간 배수"""

    STORE_RETRY_WAIT_MAX_SECONDS: float = 2.0
    """재시도 최대 대기 시간"""

    DETAIL_BIDDER_LIMIT: int = 10
    """상세 조회 시 표시할 입찰자 수"""

    LIST_PAGE_SIZE: int = 25
    """목록 조회 시 표시할 경매 수"""

    INPUT_UTC_OFFSET_HOURS: int = 9
    """명령어로 입력받는 시각의 시간대 (KST)"""

    INPUT_TIME_FORMAT: str = "%Y-%m-%d %H:%M"
    """명령어로 입력받는 시각 형식"""


AUCTION = AuctionConfig()
