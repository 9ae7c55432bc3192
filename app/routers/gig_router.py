# app/routers/gig_router.py
import logging
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional

# 匯入核心依賴
from app.core.database import get_db
from app.core.security import get_current_caller, get_optional_caller
from app.schemas.identity_schema import Caller

# 匯入 Service 和 Schemas
from app.services.gig_service import GigService
from app.schemas.gig_schema import GigCreate, GigOut, GigUpdate, GigDeleteAck

logger = logging.getLogger(__name__)

# (注意) 瀏覽與搜尋是公開的，所以不在 router 層強制登入
router = APIRouter(
    prefix="/gigs",
    tags=["Gigs"],
)

@router.post(
    "/",
    response_model=GigOut,
    status_code=status.HTTP_201_CREATED
)
async def create_new_gig(
    gig_data: GigCreate, # Request Body
    db: AsyncSession = Depends(get_db),
    current_caller: Caller = Depends(get_current_caller)
):
    """
    刊登新案件。

    - 預算必須大於 0。
    - 新案件狀態為 open。
    """
    service = GigService(db)
    return await service.create_gig(gig_data=gig_data, caller=current_caller)

@router.get("/", response_model=List[GigOut])
async def search_open_gigs(
    search: Optional[str] = None,
    db: AsyncSession = Depends(get_db),
):
    """
    搜尋招募中的案件 (標題不分大小寫部分比對，最新在前)。
    """
    logger.info(f"Router received search term: {search!r}")
    service = GigService(db)
    return await service.search_gigs(search)

@router.get("/my", response_model=List[GigOut])
async def read_my_gigs(
    db: AsyncSession = Depends(get_db),
    current_caller: Caller = Depends(get_current_caller)
):
    """
    獲取當前登入者自己刊登的所有案件 (任何狀態)。
    """
    service = GigService(db)
    return await service.get_my_gigs(current_caller)

# 拿到特定的案件詳情
@router.get("/{gig_id}", response_model=GigOut)
async def get_gig_by_id(
    gig_id: str,
    db: AsyncSession = Depends(get_db),
    current_caller: Optional[Caller] = Depends(get_optional_caller)
):
    """
    獲取單一案件的詳細資料。
    已成案的案件只有擁有者 (需帶 Token) 看得到。
    """
    service = GigService(db)
    return await service.get_gig_details(gig_id, current_caller)

@router.put("/{gig_id}", response_model=GigOut)
async def update_gig_details(
    gig_id: str,
    gig_data: GigUpdate, # Request Body
    db: AsyncSession = Depends(get_db),
    current_caller: Caller = Depends(get_current_caller)
):
    """
    (擁有者) 更新「招募中」案件的標題、描述或預算。
    """
    service = GigService(db)
    return await service.update_gig(gig_id=gig_id, data=gig_data, caller=current_caller)

@router.delete("/{gig_id}", response_model=GigDeleteAck)
async def delete_gig(
    gig_id: str,
    db: AsyncSession = Depends(get_db),
    current_caller: Caller = Depends(get_current_caller)
):
    """
    (擁有者) 刪除「招募中」且尚未收到投標的案件。
    """
    service = GigService(db)
    await service.delete_gig(gig_id, current_caller)
    return GigDeleteAck(gig_id=gig_id)
