# app/routers/bid_router.py

from fastapi import APIRouter, BackgroundTasks, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List

from app.core.database import get_db
from app.core.security import get_current_caller
from app.schemas.identity_schema import Caller
from app.services.bid_service import BidService
from app.services.hiring_service import HiringService
from app.services.notification_service import NotificationDispatcher, get_notification_dispatcher
from app.schemas.bid_schema import BidCreate, BidOutWithGig

# 建立 API Router
router = APIRouter(
    prefix="/bids",
    tags=["Bids"],
    dependencies=[Depends(get_current_caller)] # 重要：此 router 下所有 API 都需要登入
)

# -----------------------------------------------------------------
# 投標掛載在 /gigs/ 下，語意更清晰
# 我們需要一個單獨的 router 來處理這個
# -----------------------------------------------------------------
gig_bid_router = APIRouter(
    prefix="/gigs",
    tags=["Bids"], # 歸類到同一個 Tag
    dependencies=[Depends(get_current_caller)]
)

# -----------------------------------------------------------------
# 1. 對案件投標
# -----------------------------------------------------------------
@gig_bid_router.post(
    "/{gig_id}/bids",
    response_model=BidOutWithGig,
    status_code=status.HTTP_201_CREATED
)
async def submit_bid(
    gig_id: str,
    bid_data: BidCreate,
    db: AsyncSession = Depends(get_db),
    current_caller: Caller = Depends(get_current_caller)
):
    """
    對招募中的案件投標。

    - 不能對自己的案件投標 (403)。
    - 同一案件只能投標一次 (409)。
    """
    service = BidService(db)
    return await service.create_bid(gig_id=gig_id, bid_data=bid_data, bidder=current_caller)

# -----------------------------------------------------------------
# 2. (擁有者) 檢視特定案件的所有投標
# -----------------------------------------------------------------
@gig_bid_router.get("/{gig_id}/bids", response_model=List[BidOutWithGig])
async def get_bids_for_gig(
    gig_id: str,
    db: AsyncSession = Depends(get_db),
    current_caller: Caller = Depends(get_current_caller)
):
    """
    (擁有者) 檢視案件收到的所有投標 (最新在前)。
    """
    service = BidService(db)
    return await service.get_bids_for_gig(gig_id, current_caller)

# -----------------------------------------------------------------
# 3. 檢視自己提交的所有投標
# -----------------------------------------------------------------
@router.get("/my", response_model=List[BidOutWithGig])
async def get_my_bids(
    db: AsyncSession = Depends(get_db),
    current_caller: Caller = Depends(get_current_caller)
):
    """
    檢視自己提交過的所有投標 (含已聘用/已拒絕)。
    """
    service = BidService(db)
    return await service.get_my_bids(current_caller)

# -----------------------------------------------------------------
# 4. (擁有者) 聘用
# -----------------------------------------------------------------
@router.patch("/{bid_id}/hire", response_model=BidOutWithGig)
async def hire_bid(
    bid_id: str,
    background_tasks: BackgroundTasks,
    db: AsyncSession = Depends(get_db),
    current_caller: Caller = Depends(get_current_caller),
    dispatcher: NotificationDispatcher = Depends(get_notification_dispatcher)
):
    """
    擁有者聘用一個投標：案件改為 assigned、此投標 hired、其餘投標 rejected，
    回應送出後再即時通知得標者 (event: hired)。
    """
    service = HiringService(db, dispatcher=dispatcher, background_tasks=background_tasks)
    return await service.hire(bid_id, current_caller)
