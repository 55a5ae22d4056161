"""
경매장 봇 커스텀 예외 클래스 정의

모든 예외는 AuctionHouseError를 상속받아 일관된 에러 처리를 제공합니다.
분류(ValidationError, NotFoundError, ConflictError, UpstreamError)별로
호출자가 어떤 규칙을 위반했는지 구분할 수 있습니다.
"""
from typing import Iterable, Optional


class AuctionHouseError(Exception):
    """경매장 기본 예외 클래스"""

    def __init__(self, message: str = "알 수 없는 오류가 발생했습니다"):
        self.message = message
        super().__init__(self.message)


# =============================================================================
# 분류별 기본 예외
# =============================================================================


class ValidationError(AuctionHouseError):
    """잘못되었거나 누락된 입력"""
    pass


class NotFoundError(AuctionHouseError):
    """참조한 대상이 존재하지 않음"""
    pass


class ConflictError(AuctionHouseError):
    """비즈니스 규칙 충돌"""
    pass


class UpstreamError(AuctionHouseError):
    """이미지 저장소 또는 데이터베이스 오류"""

    def __init__(self, source: str, message: Optional[str] = None):
        self.source = source
        super().__init__(message or f"{source} 처리 중 오류가 발생했습니다. 잠시 후 다시 시도해주세요.")


# =============================================================================
# 입력 검증 예외
# =============================================================================


class MissingFieldsError(ValidationError):
    """필수 항목 누락"""

    def __init__(self, fields: Iterable[str]):
        self.fields = list(fields)
        super().__init__(f"경매 정보를 모두 입력해주세요. (누락: {', '.join(self.fields)})")


class InvalidScheduleError(ValidationError):
    """잘못된 경매 일정"""

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(reason)


class InvalidImageFormatError(ValidationError):
    """허용되지 않은 이미지 형식"""

    def __init__(self, content_type: Optional[str]):
        self.content_type = content_type
        super().__init__(
            f"지원하지 않는 이미지 형식입니다: {content_type}. PNG, JPEG, WEBP만 등록할 수 있습니다."
        )


class InvalidAuctionIdError(ValidationError):
    """잘못된 경매 ID 형식"""

    def __init__(self, raw_id):
        self.raw_id = raw_id
        super().__init__(f"잘못된 경매 ID 형식입니다: {raw_id}")


class InvalidAmountError(ValidationError):
    """잘못된 금액"""

    def __init__(self, field: str, value):
        self.field = field
        self.value = value
        super().__init__(f"{field}은(는) 1 이상의 정수여야 합니다. (입력: {value})")


class BidTooLowError(ValidationError):
    """입찰가가 현재가 이하"""

    def __init__(self, minimum: int, amount: int):
        self.minimum = minimum
        self.amount = amount
        super().__init__(f"입찰가는 {minimum}보다 높아야 합니다. (입력: {amount})")


# =============================================================================
# 조회 예외
# =============================================================================


class AuctionNotFoundError(NotFoundError):
    """경매를 찾을 수 없음"""

    def __init__(self, auction_id: int):
        self.auction_id = auction_id
        super().__init__(f"경매를 찾을 수 없습니다: {auction_id}")


class UserNotFoundError(NotFoundError):
    """사용자를 찾을 수 없음"""

    def __init__(self, user_id: int):
        self.user_id = user_id
        super().__init__(f"사용자를 찾을 수 없습니다: {user_id}")


# =============================================================================
# 비즈니스 규칙 충돌 예외
# =============================================================================


class UserAlreadyExistsError(ConflictError):
    """이미 가입된 사용자"""

    def __init__(self, discord_id: int):
        self.discord_id = discord_id
        super().__init__("이미 가입된 사용자입니다.")


class ActiveAuctionExistsError(ConflictError):
    """판매자에게 진행 중인 경매가 이미 있음"""

    def __init__(self, seller_id: int):
        self.seller_id = seller_id
        super().__init__("이미 진행 중인 경매가 있습니다. 경매가 끝난 뒤 다시 등록해주세요.")


class AuctionNotActiveError(ConflictError):
    """입찰 가능한 시간이 아님"""

    def __init__(self, auction_id: int):
        self.auction_id = auction_id
        super().__init__("현재 입찰할 수 없는 경매입니다. (시작 전이거나 이미 종료됨)")


class SelfBidError(ConflictError):
    """본인 경매 입찰"""

    def __init__(self):
        super().__init__("본인의 경매에는 입찰할 수 없습니다.")


class StaleBidError(ConflictError):
    """다른 입찰이 먼저 반영됨"""

    def __init__(self, auction_id: int, observed_bid: int):
        self.auction_id = auction_id
        self.observed_bid = observed_bid
        super().__init__("다른 입찰이 먼저 반영되었습니다. 현재가를 확인한 뒤 다시 입찰해주세요.")


class AuctionStateChangedError(ConflictError):
    """처리 도중 경매 상태가 바뀜"""

    def __init__(self, auction_id: int):
        self.auction_id = auction_id
        super().__init__("처리 중 경매 상태가 변경되었습니다. 다시 시도해주세요.")


class AuctionStillActiveError(ConflictError, ValidationError):
    """아직 종료되지 않은 경매 재등록"""

    def __init__(self, auction_id: int):
        self.auction_id = auction_id
        super().__init__("아직 종료되지 않은 경매는 재등록할 수 없습니다.")


# =============================================================================
# 외부 연동 예외
# =============================================================================


class ImageUploadError(UpstreamError):
    """이미지 업로드 실패"""

    def __init__(self):
        super().__init__("이미지 저장소", "경매 이미지 업로드에 실패했습니다.")


class StoreUnavailableError(UpstreamError):
    """데이터베이스 오류"""

    def __init__(self, operation: str):
        self.operation = operation
        super().__init__("데이터베이스", f"{operation} 중 저장소 오류가 발생했습니다. 잠시 후 다시 시도해주세요.")


# =============================================================================
# 정합성 예외
# =============================================================================


class FatalInconsistencyError(AuctionHouseError):
    """여러 단계 작업이 재시도 후에도 완료되지 못함"""

    def __init__(self, auction_id: int, resume_from: str):
        self.auction_id = auction_id
        self.resume_from = resume_from
        super().__init__(
            f"경매 {auction_id} 재등록이 '{resume_from}' 단계에서 중단되었습니다. "
            f"백그라운드 작업이 이어서 처리합니다."
        )
