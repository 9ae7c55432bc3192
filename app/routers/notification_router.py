# app/routers/notification_router.py

from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect
import logging

from app.core.security import get_current_caller_from_websocket_token
from app.core.websocket_manager import manager
from app.schemas.identity_schema import Caller

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/notifications", tags=["Notifications"])


@router.websocket("/ws")
async def notification_socket(
    websocket: WebSocket,
    # 前端連線 URL 必須是: /notifications/ws?token=...
    caller: Caller = Depends(get_current_caller_from_websocket_token),
):
    """
    即時通知通道。連線後伺服器會推送 {"event": ..., "data": ...}。
    用戶端傳來的訊息只當作 keep-alive，不做處理。
    """
    await websocket.accept()
    manager.register_connection(caller.user_id, websocket)
    try:
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect:
        pass
    except Exception as e:
        logger.error(f"Unexpected error in notification socket for user {caller.user_id}: {e}")
    finally:
        manager.unregister_connection(caller.user_id, websocket)
