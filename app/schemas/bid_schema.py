# app/schemas/bid_schema.py
from pydantic import BaseModel, ConfigDict, Field
from datetime import datetime
from typing import Optional

from app.schemas.gig_schema import GigSummaryOut, MAX_AMOUNT

# --- 建立 (Create) ---
class BidCreate(BaseModel):
    # gig_id 和 bidder_id 將從 URL 和 Token 中取得
    model_config = ConfigDict(str_strip_whitespace=True)

    # 最少 10 字，避免灌水投標
    message: str = Field(..., min_length=10, max_length=500)
    price: float = Field(..., ge=0, le=MAX_AMOUNT, allow_inf_nan=False)

# --- 讀取 (Read / Out) ---
class BidOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    bid_id: str
    gig_id: str
    bidder_id: str
    message: str
    price: float
    status: str
    created_at: datetime
    updated_at: datetime

# --- 包含關聯案件資訊的完整輸出 (聘用結果、我的投標) ---
class BidOutWithGig(BidOut):
    gig: Optional[GigSummaryOut] = None
