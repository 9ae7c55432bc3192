# app/services/hiring_service.py

from fastapi import BackgroundTasks
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional
import logging

from app.core.exceptions import ForbiddenError, InvalidStateError, NotFoundError
from app.models.bid import Bid, BID_STATUS_HIRED, BID_STATUS_REJECTED
from app.repositories.bid_repo import BidRepository
from app.repositories.gig_repo import GigRepository
from app.schemas.identity_schema import Caller
from app.schemas.notification_schema import NotificationEvent
from app.services.notification_service import NotificationDispatcher, dispatcher as default_dispatcher
from app.utils import access_policy

logger = logging.getLogger(__name__)


class HiringService:
    """
    聘用流程 (整個系統唯一需要跨資料表原子性的操作)

    案件: open -> assigned (終態)
    投標: pending -> hired / rejected (終態)

    同一案件同時有兩個聘用請求時，由 GigRepository.set_assigned 的
    條件式 UPDATE 決定勝負：先提交者成功，另一個拿到 InvalidStateError。
    """

    def __init__(
        self,
        db: AsyncSession,
        dispatcher: Optional[NotificationDispatcher] = None,
        background_tasks: Optional[BackgroundTasks] = None,
    ):
        self.db = db
        self.bid_repo = BidRepository(db)
        self.gig_repo = GigRepository(db)
        self.dispatcher = dispatcher or default_dispatcher
        # 有 background_tasks 時通知在回應送出後才執行
        self.background_tasks = background_tasks

    async def hire(self, bid_id: str, caller: Caller) -> Bid:
        # 步驟 1: 找投標
        bid = await self.bid_repo.get_bid_by_id(bid_id)
        if not bid:
            raise NotFoundError("投標不存在")

        # 步驟 2: 找案件 (理論上一定存在)
        gig = await self.gig_repo.get_gig_by_id(bid.gig_id)
        if not gig:
            raise NotFoundError("案件不存在")

        # 步驟 3: 權限與狀態
        if not access_policy.is_owner(gig, caller.user_id):
            raise ForbiddenError("你沒有權限為此案件聘用")
        if not access_policy.can_hire(gig, caller.user_id):
            raise InvalidStateError("此案件已經完成聘用")

        gig_id, gig_title = gig.gig_id, gig.title

        # 步驟 4: 同一個交易內完成三個更新，任何一步失敗就整個回滾
        try:
            await self._apply_hire(gig_id, bid_id)
            await self.db.commit()
        except Exception as e:
            await self.db.rollback()
            if isinstance(e, InvalidStateError):
                logger.info(f"Hire rejected for bid {bid_id} on gig {gig_id}: {e.detail}")
            else:
                logger.error(f"Hire failed and rolled back for bid {bid_id}: {e}", exc_info=True)
            raise

        logger.info(f"Gig {gig_id} assigned to bid {bid_id} (bidder {bid.bidder_id})")

        # 步驟 5: 提交後才通知，通知失敗不影響聘用結果
        event = NotificationDispatcher.build_hired_event(gig_id, gig_title, bid_id)
        if self.background_tasks is not None:
            self.background_tasks.add_task(self._notify_safely, bid.bidder_id, event)
        else:
            await self._notify_safely(bid.bidder_id, event)

        # 步驟 6: 重新讀取提交後的投標 (含案件)
        self.db.expire(gig)
        return await self.bid_repo.get_bid_by_id_with_gig(bid_id, fresh=True)

    async def _notify_safely(self, recipient_id: str, event: NotificationEvent) -> None:
        try:
            await self.dispatcher.notify(recipient_id, event)
        except Exception as e:
            logger.warning(f"Hired notification to {recipient_id} failed: {e}")

    async def _apply_hire(self, gig_id: str, bid_id: str) -> None:
        """
        (重要) 順序：先鎖案件再改投標。後到的交易會在 set_assigned 等待，
        等前一個提交後拿到 0 列而失敗，不會看到一半的結果。
        """
        await self.gig_repo.set_assigned(gig_id)

        if not await self.bid_repo.set_status(bid_id, BID_STATUS_HIRED):
            raise InvalidStateError("此投標已被處理")

        rejected = await self.bid_repo.set_status_for_gig_except(gig_id, bid_id, BID_STATUS_REJECTED)
        logger.info(f"Gig {gig_id}: {rejected} competing bid(s) rejected")
