# app/services/notification_service.py

from typing import Optional
import logging

from app.core.websocket_manager import ConnectionRegistry, manager
from app.schemas.notification_schema import HiredPayload, NotificationEvent

logger = logging.getLogger(__name__)

HIRED_EVENT = "hired"

class NotificationDispatcher:
    """
    即時通知：盡力送達目前在線的連線，不保存、不重送。
    任何送達失敗都只記錄 log，不會拋回呼叫端。
    """

    def __init__(self, registry: Optional[ConnectionRegistry] = None):
        self.registry = registry or manager

    async def notify(self, recipient_id: str, event: NotificationEvent) -> bool:
        """
        回傳是否至少送達一個連線
        """
        try:
            delivered = await self.registry.send_to_identity(recipient_id, event.event, event.payload)
        except Exception as e:
            logger.warning(f"通知送出失敗 user={recipient_id} event={event.event}: {e}", exc_info=True)
            return False
        if delivered:
            logger.info(f"通知已送出 user={recipient_id} event={event.event} connections={delivered}")
        return delivered > 0

    @staticmethod
    def build_hired_event(gig_id: str, gig_title: str, bid_id: str) -> NotificationEvent:
        payload = HiredPayload(
            message=f"You have been hired for {gig_title}!",
            gig_id=gig_id,
            gig_title=gig_title,
            bid_id=bid_id,
        )
        return NotificationEvent(event=HIRED_EVENT, payload=payload.model_dump(by_alias=True))


# 預設使用全域的連線登記表
dispatcher = NotificationDispatcher()

def get_notification_dispatcher() -> NotificationDispatcher:
    """FastAPI Dependency (測試可覆寫)"""
    return dispatcher
