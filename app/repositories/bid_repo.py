# app/repositories/bid_repo.py

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy.orm import selectinload
from typing import List, Optional
import logging

from app.core.exceptions import ConflictError
from app.models.bid import Bid, BID_STATUS_PENDING

logger = logging.getLogger(__name__)

class BidRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_bid_by_id(self, bid_id: str) -> Optional[Bid]:
        """
        透過 ID 獲取單一投標
        """
        stmt = select(Bid).where(Bid.bid_id == bid_id)
        result = await self.db.execute(stmt)
        return result.scalars().first()

    async def get_bid_by_id_with_gig(self, bid_id: str, fresh: bool = False) -> Optional[Bid]:
        """
        透過 ID 獲取單一投標，並載入關聯的 Gig
        fresh=True: 交易提交後重新讀取，確保拿到的是資料庫中的最新狀態
        """
        stmt = select(Bid).where(Bid.bid_id == bid_id).options(selectinload(Bid.gig))
        if fresh:
            stmt = stmt.execution_options(populate_existing=True)
        result = await self.db.execute(stmt)
        return result.scalars().first()

    async def list_bids_for_gig(self, gig_id: str) -> List[Bid]:
        """
        獲取特定案件的所有投標 (擁有者檢視用，最新在前)
        """
        stmt = (
            select(Bid)
            .where(Bid.gig_id == gig_id)
            .options(selectinload(Bid.gig))
            .order_by(Bid.created_at.desc())
        )
        result = await self.db.execute(stmt)
        return result.scalars().all()

    async def list_bids_for_bidder(self, bidder_id: str) -> List[Bid]:
        """
        獲取特定投標者的所有投標 (含已聘用/已拒絕，最新在前)
        """
        stmt = (
            select(Bid)
            .where(Bid.bidder_id == bidder_id)
            .options(selectinload(Bid.gig))
            .order_by(Bid.created_at.desc())
        )
        result = await self.db.execute(stmt)
        return result.scalars().all()

    async def create_bid(self, bid: Bid) -> Bid:
        """
        新增投標 (會一併提交同一交易中的其他變更，例如案件的 bid_count)
        (重要) 不做事先查詢，重複投標由唯一索引擋下並轉成 ConflictError
        """
        try:
            self.db.add(bid)
            await self.db.flush()
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            logger.info(f"重複投標 gig={bid.gig_id} bidder={bid.bidder_id}: {e.orig}")
            raise ConflictError("你已經對此案件投標") from e
        except Exception:
            await self.db.rollback()
            raise
        return bid

    async def set_status(self, bid_id: str, status: str) -> bool:
        """
        (聘用流程專用) 將 pending 的投標改為終態，回傳是否有更新
        commit 由呼叫端負責
        """
        stmt = (
            update(Bid)
            .where(Bid.bid_id == bid_id, Bid.status == BID_STATUS_PENDING)
            .values(status=status)
            .execution_options(synchronize_session=False)
        )
        result = await self.db.execute(stmt)
        return result.rowcount == 1

    async def set_status_for_gig_except(self, gig_id: str, except_bid_id: str, status: str) -> int:
        """
        (聘用流程專用) 將案件中除了 except_bid_id 以外的 pending 投標一次更新
        回傳更新筆數，commit 由呼叫端負責
        """
        stmt = (
            update(Bid)
            .where(
                Bid.gig_id == gig_id,
                Bid.bid_id != except_bid_id,
                Bid.status == BID_STATUS_PENDING,
            )
            .values(status=status)
            .execution_options(synchronize_session=False)
        )
        result = await self.db.execute(stmt)
        return result.rowcount
