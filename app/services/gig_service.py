# app/services/gig_service.py
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional
import logging

from app.core.exceptions import ForbiddenError, InvalidStateError, NotFoundError, ValidationError
from app.models.gig import Gig
from app.repositories.gig_repo import GigRepository
from app.schemas.gig_schema import GigCreate, GigUpdate
from app.schemas.identity_schema import Caller
from app.utils import access_policy

logger = logging.getLogger(__name__)

class GigService:
    def __init__(self, db: AsyncSession):
        self.db = db
        self.gig_repo = GigRepository(db)

    # 輔助函式：檢查狀態和權限
    async def _get_and_check_permission(self, gig_id: str, caller: Caller, action: str) -> Gig:
        """
        獲取案件，檢查是否仍在招募中，並檢查是否為擁有者。
        (重要) 先檢查狀態：已成案的案件對任何人都回傳 InvalidState
        """
        gig = await self.gig_repo.get_gig_by_id(gig_id)
        if not gig:
            raise NotFoundError("案件不存在")
        if not access_policy.is_open(gig):
            raise InvalidStateError(f"已成案的案件無法{action}")
        if not access_policy.is_owner(gig, caller.user_id):
            raise ForbiddenError(f"你沒有權限{action}此案件")
        return gig

    async def create_gig(self, gig_data: GigCreate, caller: Caller) -> Gig:
        """
        業務邏輯：建立案件
        """
        gig = await self.gig_repo.create_gig(
            title=gig_data.title,
            description=gig_data.description,
            budget=gig_data.budget,
            owner_id=caller.user_id,
        )
        logger.info(f"Gig created: {gig.gig_id} by owner {caller.user_id}")
        return gig

    async def search_gigs(self, search: Optional[str] = None) -> List[Gig]:
        """
        業務邏輯：搜尋招募中的案件 (空白關鍵字等同不篩選)
        """
        term = search.strip() if search else None
        return await self.gig_repo.list_open_gigs(title_filter=term or None)

    async def get_gig_details(self, gig_id: str, caller: Optional[Caller] = None) -> Gig:
        """
        業務邏輯：獲取單一案件詳情
        非招募中的案件只有擁有者看得到，其他人一律 404
        """
        gig = await self.gig_repo.get_gig_by_id(gig_id)
        caller_id = caller.user_id if caller else None
        if not gig or not access_policy.can_view(gig, caller_id):
            raise NotFoundError("案件不存在")
        return gig

    async def get_my_gigs(self, caller: Caller) -> List[Gig]:
        return await self.gig_repo.list_gigs_by_owner(caller.user_id)

    async def update_gig(self, gig_id: str, data: GigUpdate, caller: Caller) -> Gig:
        """
        業務邏輯：更新案件內容 (僅限擁有者、招募中)
        """
        await self._get_and_check_permission(gig_id, caller, "修改")

        update_data = data.model_dump(exclude_unset=True)
        null_fields = [key for key, value in update_data.items() if value is None]
        if null_fields:
            raise ValidationError(f"欄位不可為空: {', '.join(null_fields)}")

        if update_data:
            # 檢查與寫入之間若被聘用，Repo 的條件式 UPDATE 會拋出 InvalidState
            await self.gig_repo.update_gig(gig_id, caller.user_id, update_data)
            logger.info(f"Gig updated: {gig_id} fields={list(update_data)}")

        return await self.gig_repo.get_gig_by_id(gig_id, fresh=True)

    async def delete_gig(self, gig_id: str, caller: Caller) -> None:
        """
        業務邏輯：刪除案件 (僅限擁有者、招募中、尚無投標)
        已有投標的案件不允許刪除，避免留下孤兒投標
        """
        gig = await self._get_and_check_permission(gig_id, caller, "刪除")
        if gig.bid_count > 0:
            raise InvalidStateError("已有投標的案件無法刪除")

        await self.gig_repo.delete_gig(gig_id, caller.user_id)
        logger.info(f"Gig deleted: {gig_id} by owner {caller.user_id}")
