# app/services/bid_service.py

from sqlalchemy.ext.asyncio import AsyncSession
from typing import List
import logging

from app.core.exceptions import ForbiddenError, InvalidStateError, NotFoundError
from app.models.bid import Bid, BID_STATUS_PENDING
from app.repositories.bid_repo import BidRepository
from app.repositories.gig_repo import GigRepository
from app.schemas.bid_schema import BidCreate
from app.schemas.identity_schema import Caller
from app.utils import access_policy

logger = logging.getLogger(__name__)


class BidService:
    def __init__(self, db: AsyncSession):
        self.db = db
        self.bid_repo = BidRepository(db)
        self.gig_repo = GigRepository(db)

    async def create_bid(self, gig_id: str, bid_data: BidCreate, bidder: Caller) -> Bid:
        """
        對招募中的案件投標
        """
        # 步驟 1: 驗證
        gig = await self.gig_repo.get_gig_by_id(gig_id)
        if not gig:
            raise NotFoundError("案件不存在")
        if not access_policy.can_bid(gig, bidder.user_id):
            # 狀態優先於身分：已聘用的案件一律回 InvalidState
            if not access_policy.is_open(gig):
                raise InvalidStateError("此案件目前未在招募中")
            raise ForbiddenError("不能對自己的案件投標")

        # 步驟 2: 在同一個交易內遞增 bid_count 並新增投標
        # register_bid 以條件式 UPDATE 再次確認案件仍是 open (與聘用互斥)
        try:
            await self.gig_repo.register_bid(gig_id)
        except Exception:
            await self.db.rollback()
            raise

        new_bid = Bid(
            gig_id=gig_id,
            bidder_id=bidder.user_id,
            message=bid_data.message,
            price=bid_data.price,
            status=BID_STATUS_PENDING,
        )
        # 重複投標會在這裡由唯一索引擋下 (ConflictError)
        created = await self.bid_repo.create_bid(new_bid)
        logger.info(f"Bid created: {created.bid_id} on gig {gig_id} by {bidder.user_id}")

        return await self.bid_repo.get_bid_by_id_with_gig(created.bid_id, fresh=True)

    async def get_bids_for_gig(self, gig_id: str, caller: Caller) -> List[Bid]:
        """
        (擁有者) 檢視案件收到的所有投標
        """
        gig = await self.gig_repo.get_gig_by_id(gig_id)
        if not gig:
            raise NotFoundError("案件不存在")
        if not access_policy.is_owner(gig, caller.user_id):
            raise ForbiddenError("你沒有權限檢視此案件的投標")
        return await self.bid_repo.list_bids_for_gig(gig_id)

    async def get_my_bids(self, caller: Caller) -> List[Bid]:
        """
        (投標者) 我的投標，結束後 (hired / rejected) 仍可查詢
        """
        return await self.bid_repo.list_bids_for_bidder(caller.user_id)
