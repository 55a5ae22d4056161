"""
저장소 재시도 헬퍼

멱등한 작업(조회, 조건부 업데이트)만 재시도합니다.
재시도 후에도 실패하면 StoreUnavailableError로 감싸 올립니다.
"""
import logging
from functools import wraps

from tenacity import (
    AsyncRetrying,
    before_sleep_log,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)
from tortoise.exceptions import DBConnectionError, IntegrityError, OperationalError

from config.auction import AUCTION
from exceptions import StoreUnavailableError

logger = logging.getLogger(__name__)

STORE_ERRORS = (OperationalError, DBConnectionError)


def is_transient_store_error(error: BaseException) -> bool:
    """재시도할 가치가 있는 저장소 오류인지 (무결성 오류 제외)"""
    return isinstance(error, STORE_ERRORS) and not isinstance(error, IntegrityError)


def store_retrying() -> AsyncRetrying:
    return AsyncRetrying(
        retry=retry_if_exception(is_transient_store_error),
        stop=stop_after_attempt(AUCTION.STORE_RETRY_ATTEMPTS),
        wait=wait_exponential(
            multiplier=AUCTION.STORE_RETRY_WAIT_SECONDS,
            max=AUCTION.STORE_RETRY_WAIT_MAX_SECONDS
        ),
        before_sleep=before_sleep_log(logger, logging.WARNING),
        reraise=True,
    )


def idempotent_store_call(operation: str):
    """
    멱등 저장소 작업 데코레이터

    일시적 저장소 오류는 재시도하고, 끝내 실패하면 StoreUnavailableError를 던집니다.
    """
    def decorator(func):
        @wraps(func)
        async def wrapper(*args, **kwargs):
            try:
                async for attempt in store_retrying():
                    with attempt:
                        return await func(*args, **kwargs)
            except STORE_ERRORS as e:
                logger.error(f"Store failure during {operation}: {e}", exc_info=True)
                raise StoreUnavailableError(operation) from e
        return wrapper
    return decorator


def single_store_call(operation: str):
    """
    비멱등 저장소 작업 데코레이터

    재시도하지 않고 저장소 오류를 즉시 StoreUnavailableError로 변환합니다.
    """
    def decorator(func):
        @wraps(func)
        async def wrapper(*args, **kwargs):
            try:
                return await func(*args, **kwargs)
            except STORE_ERRORS as e:
                logger.error(f"Store failure during {operation}: {e}", exc_info=True)
                raise StoreUnavailableError(operation) from e
        return wrapper
    return decorator
