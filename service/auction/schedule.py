"""경매 일정 검증 (등록, 재등록 공용)"""
from datetime import datetime, timedelta, timezone
from typing import Optional, Tuple

from config.auction import AUCTION
from exceptions import InvalidScheduleError, MissingFieldsError

INPUT_TIMEZONE = timezone(timedelta(hours=AUCTION.INPUT_UTC_OFFSET_HOURS))


def as_utc(value: datetime) -> datetime:
    """naive datetime은 UTC로 간주"""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def validate_schedule(
    start_time: Optional[datetime],
    end_time: Optional[datetime],
    now: Optional[datetime] = None
) -> Tuple[datetime, datetime]:
    """
    경매 일정 검증

    Returns:
        UTC로 정규화된 (start_time, end_time)

    Raises:
        MissingFieldsError: 시작/종료 시각 누락
        InvalidScheduleError: 시작 시각이 현재 이전이거나 종료 시각 이후
    """
    missing = [
        name for name, value in (("start_time", start_time), ("end_time", end_time))
        if value is None
    ]
    if missing:
        raise MissingFieldsError(missing)

    now = as_utc(now or datetime.now(timezone.utc))
    start_time = as_utc(start_time)
    end_time = as_utc(end_time)

    if start_time <= now:
        raise InvalidScheduleError("경매 시작 시각은 현재 시각 이후여야 합니다.")

    if start_time >= end_time:
        raise InvalidScheduleError("경매 시작 시각은 종료 시각보다 빨라야 합니다.")

    return start_time, end_time


def parse_input_time(text: Optional[str]) -> Optional[datetime]:
    """
    명령어 입력 시각 파싱 (예: 2026-10-20 21:00, KST 기준)

    Raises:
        InvalidScheduleError: 형식 오류
    """
    if text is None or not text.strip():
        return None
    try:
        parsed = datetime.strptime(text.strip(), AUCTION.INPUT_TIME_FORMAT)
    except ValueError:
        raise InvalidScheduleError(
            f"시각 형식이 올바르지 않습니다: {text} (예: 2026-10-20 21:00)"
        ) from None
    return parsed.replace(tzinfo=INPUT_TIMEZONE).astimezone(timezone.utc)
