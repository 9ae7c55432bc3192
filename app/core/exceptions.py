# app/core/exceptions.py
# 核心錯誤類型：Service / Repository 只拋出這些例外，
# 由 register_exception_handlers 統一轉成 HTTP 回應
import logging
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import OperationalError, TimeoutError as SQLAlchemyTimeoutError

logger = logging.getLogger(__name__)


class MarketplaceError(Exception):
    """所有核心錯誤的基底類別"""
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    error: str = "INTERNAL_ERROR"
    default_detail: str = "伺服器內部錯誤"

    def __init__(self, detail: str | None = None):
        self.detail = detail or self.default_detail
        super().__init__(self.detail)


class ValidationError(MarketplaceError):
    # 輸入缺漏或格式錯誤 (呼叫端的錯，修改前重試無意義)
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    error = "VALIDATION_ERROR"
    default_detail = "輸入資料格式錯誤"


class NotFoundError(MarketplaceError):
    status_code = status.HTTP_404_NOT_FOUND
    error = "NOT_FOUND"
    default_detail = "資料不存在"


class ForbiddenError(MarketplaceError):
    # 呼叫者對此資料沒有權限
    status_code = status.HTTP_403_FORBIDDEN
    error = "FORBIDDEN"
    default_detail = "你沒有權限執行此操作"


class InvalidStateError(MarketplaceError):
    # 資料的生命週期狀態不允許此操作 (例: 對已成案的案件聘用)
    status_code = status.HTTP_400_BAD_REQUEST
    error = "INVALID_STATE"
    default_detail = "目前狀態無法執行此操作"


class ConflictError(MarketplaceError):
    # 違反唯一性 (重複投標)
    status_code = status.HTTP_409_CONFLICT
    error = "CONFLICT"
    default_detail = "資料已存在"


class UnavailableError(MarketplaceError):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    error = "UNAVAILABLE"
    default_detail = "資料庫暫時無法連線，請稍後再試"


class StoreTimeoutError(MarketplaceError):
    status_code = status.HTTP_504_GATEWAY_TIMEOUT
    error = "TIMEOUT"
    default_detail = "資料庫回應逾時，請稍後再試"


def _error_response(exc: MarketplaceError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail, "error": exc.error},
    )


async def marketplace_error_handler(request: Request, exc: MarketplaceError) -> JSONResponse:
    logger.info(f"{request.method} {request.url.path} -> {exc.status_code} {exc.error}: {exc.detail}")
    return _error_response(exc)


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    # 保留 Pydantic 的錯誤明細，前端可據此標示欄位
    return JSONResponse(
        status_code=ValidationError.status_code,
        content={"detail": jsonable_errors(exc), "error": ValidationError.error},
    )


async def store_unavailable_handler(request: Request, exc: OperationalError) -> JSONResponse:
    logger.error(f"資料庫無法連線 ({request.url.path}): {exc}", exc_info=True)
    return _error_response(UnavailableError())


async def store_timeout_handler(request: Request, exc: SQLAlchemyTimeoutError) -> JSONResponse:
    logger.error(f"資料庫連線逾時 ({request.url.path}): {exc}")
    return _error_response(StoreTimeoutError())


def jsonable_errors(exc: RequestValidationError) -> list:
    """將 Pydantic 錯誤轉成可序列化的 list (ctx 內可能含有 Exception 物件)"""
    errors = []
    for err in exc.errors():
        item = {"loc": list(err.get("loc", ())), "msg": err.get("msg"), "type": err.get("type")}
        errors.append(item)
    return errors


def register_exception_handlers(app: FastAPI) -> None:
    """在 app 上註冊所有錯誤處理器"""
    app.add_exception_handler(MarketplaceError, marketplace_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(OperationalError, store_unavailable_handler)
    app.add_exception_handler(SQLAlchemyTimeoutError, store_timeout_handler)
