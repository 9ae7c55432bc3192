# app/core/security.py
# 負責 JWT 權杖的驗證 (權杖由外部身分服務簽發，核心只讀取 user_id)
from datetime import datetime, timedelta, timezone
from typing import Optional
from jose import JWTError, jwt
from fastapi import Depends, HTTPException, Query, status, WebSocketException
from fastapi.security import OAuth2PasswordBearer
from app.core.config import settings
from app.schemas.identity_schema import Caller, TokenData

# (重要) 定義 Token 從哪裡來 (Authorization Header)
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/token")
# 公開 API 用：沒有 Token 也不報錯
optional_oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/token", auto_error=False)


def create_access_token(data: dict, expires_minutes: Optional[int] = None) -> str:
    """
    根據傳入的 data (e.g., user_id) 產生 JWT access token
    (僅供本機開發與測試使用，正式環境的 Token 由身分服務簽發)
    """
    to_encode = data.copy() # 避免修改原始資料
    minutes = expires_minutes if expires_minutes is not None else settings.ACCESS_TOKEN_EXPIRE_MINUTES
    expire = datetime.now(timezone.utc) + timedelta(minutes=minutes)
    to_encode.update({"exp": expire})

    return jwt.encode(
        to_encode,
        settings.JWT_SECRET_KEY,
        algorithm=settings.JWT_ALGORITHM
    )


def verify_access_token(token: str) -> TokenData | None:
    """
    驗證 JWT，回傳 TokenData 或 None
    """
    try:
        payload = jwt.decode(
            token,
            settings.JWT_SECRET_KEY,
            algorithms=[settings.JWT_ALGORITHM]
        )
    except JWTError:
        return None

    # 優先使用 user_id，沒有的話退回標準的 'sub'
    user_id = payload.get("user_id") or payload.get("sub")
    if not user_id:
        return None
    return TokenData(user_id=str(user_id))


async def get_current_caller(token: str = Depends(oauth2_scheme)) -> Caller:
    """
    FastAPI 依賴項：驗證 Token 並回傳呼叫者身分 (用於 REST API)
    """
    token_data = verify_access_token(token)
    if token_data is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="無法驗證憑證",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return Caller(user_id=token_data.user_id)


async def get_optional_caller(
    token: Optional[str] = Depends(optional_oauth2_scheme)
) -> Optional[Caller]:
    """
    公開 API 用：有帶有效 Token 就回傳身分，否則視為匿名 (None)
    """
    if not token:
        return None
    token_data = verify_access_token(token)
    if token_data is None:
        return None
    return Caller(user_id=token_data.user_id)


async def get_current_caller_from_websocket_token(
    token: str = Query(...), # 從 Query 參數 (?token=...) 讀取
) -> Caller:
    """
    WebSocket 專用的 Token 驗證依賴
    """
    token_data = verify_access_token(token)
    if token_data is None:
        raise WebSocketException(
            code=status.WS_1008_POLICY_VIOLATION,
            reason="無法驗證憑證"
        )
    return Caller(user_id=token_data.user_id)
