# app/repositories/gig_repo.py

import logging
from typing import Any, Dict, List, Optional
from sqlalchemy import delete, func, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from app.core.exceptions import InvalidStateError
from app.models.gig import Gig, GIG_STATUS_ASSIGNED, GIG_STATUS_OPEN

logger = logging.getLogger(__name__)

class GigRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    # 建立新案件
    async def create_gig(self, title: str, description: str, budget: float, owner_id: str) -> Gig:
        """
        建立新案件 (狀態固定為 open)
        """
        gig = Gig(
            title=title,
            description=description,
            budget=budget,
            owner_id=owner_id,
            status=GIG_STATUS_OPEN,
            bid_count=0,
        )
        try:
            self.db.add(gig)
            await self.db.flush()
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise
        return gig

    async def get_gig_by_id(self, gig_id: str, fresh: bool = False) -> Optional[Gig]:
        """
        透過 ID 獲取單一案件
        fresh=True 時強制以資料庫內容覆蓋 Session 中的舊物件
        """
        stmt = select(Gig).where(Gig.gig_id == gig_id)
        if fresh:
            stmt = stmt.execution_options(populate_existing=True)
        result = await self.db.execute(stmt)
        return result.scalars().first()

    # 搜尋招募中的案件
    async def list_open_gigs(self, title_filter: Optional[str] = None) -> List[Gig]:
        """
        獲取所有 open 的案件 (最新在前)
        title_filter: 標題不分大小寫的部分比對
        """
        stmt = select(Gig).where(Gig.status == GIG_STATUS_OPEN)

        if title_filter:
            # 使用 lower() + LIKE，MySQL 與 SQLite 行為一致
            pattern = f"%{_escape_like(title_filter.lower())}%"
            stmt = stmt.where(func.lower(Gig.title).like(pattern, escape="\\"))

        stmt = stmt.order_by(Gig.created_at.desc())
        result = await self.db.execute(stmt)
        return result.scalars().all()

    # 查看特定擁有者的所有案件
    async def list_gigs_by_owner(self, owner_id: str) -> List[Gig]:
        stmt = select(Gig).where(Gig.owner_id == owner_id).order_by(Gig.created_at.desc())
        result = await self.db.execute(stmt)
        return result.scalars().all()

    async def update_gig(self, gig_id: str, owner_id: str, fields: Dict[str, Any]) -> None:
        """
        (U) 更新案件內容，只有擁有者且狀態為 open 才會成功
        條件寫在 WHERE 中，與聘用流程互斥，不會有「先檢查再寫入」的空窗
        """
        stmt = (
            update(Gig)
            .where(
                Gig.gig_id == gig_id,
                Gig.owner_id == owner_id,
                Gig.status == GIG_STATUS_OPEN,
            )
            .values(**fields)
            .execution_options(synchronize_session=False)
        )
        try:
            result = await self.db.execute(stmt)
            if result.rowcount != 1:
                raise InvalidStateError("案件已不在招募中，無法修改")
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise

    async def delete_gig(self, gig_id: str, owner_id: str) -> None:
        """
        (D) 刪除案件：擁有者、狀態 open、且尚未收到任何投標
        """
        stmt = delete(Gig).where(
            Gig.gig_id == gig_id,
            Gig.owner_id == owner_id,
            Gig.status == GIG_STATUS_OPEN,
            Gig.bid_count == 0,
        ).execution_options(synchronize_session=False)
        try:
            result = await self.db.execute(stmt)
            if result.rowcount != 1:
                raise InvalidStateError("案件已有投標或不在招募中，無法刪除")
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise

    async def register_bid(self, gig_id: str) -> None:
        """
        投標時遞增 bid_count (僅限 open)
        (重要) 這個 UPDATE 會鎖住案件那一列，讓投標與聘用互相排隊
        commit 由呼叫端負責
        """
        stmt = (
            update(Gig)
            .where(Gig.gig_id == gig_id, Gig.status == GIG_STATUS_OPEN)
            .values(bid_count=Gig.bid_count + 1)
            .execution_options(synchronize_session=False)
        )
        result = await self.db.execute(stmt)
        if result.rowcount != 1:
            raise InvalidStateError("此案件目前未在招募中")

    async def set_assigned(self, gig_id: str) -> None:
        """
        (聘用流程專用) open -> assigned
        先提交者勝出：後到的交易在這裡拿到 0 列，拋出 InvalidStateError
        commit 由呼叫端負責
        """
        stmt = (
            update(Gig)
            .where(Gig.gig_id == gig_id, Gig.status == GIG_STATUS_OPEN)
            .values(status=GIG_STATUS_ASSIGNED)
            .execution_options(synchronize_session=False)
        )
        result = await self.db.execute(stmt)
        if result.rowcount != 1:
            raise InvalidStateError("此案件已經完成聘用")


def _escape_like(term: str) -> str:
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
