# app/schemas/gig_schema.py
from pydantic import BaseModel, ConfigDict, Field
from typing import Optional
from datetime import datetime

# DECIMAL(10, 2) 欄位可存的最大金額
MAX_AMOUNT = 99_999_999.99

# 1. 基礎欄位 (對應 Model)
class GigBase(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    title: str = Field(..., min_length=1, max_length=100)
    description: str = Field(..., min_length=1, max_length=2000)
    budget: float = Field(..., gt=0, le=MAX_AMOUNT, allow_inf_nan=False)

# 2. 刊登案件時的 Request Body (Input)
class GigCreate(GigBase):
    pass

# 3. 更新案件時的 Request Body (Input)
# (所有欄位皆可選，但不可明確傳 null)
class GigUpdate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    title: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = Field(None, min_length=1, max_length=2000)
    budget: Optional[float] = Field(None, gt=0, le=MAX_AMOUNT, allow_inf_nan=False)

# 4. 回傳給前端的案件資料 (Output)
class GigOut(GigBase):
    model_config = ConfigDict(from_attributes=True)

    gig_id: str
    owner_id: str
    status: str
    bid_count: int
    created_at: datetime
    updated_at: datetime

# 5. 嵌在投標資料中的精簡案件資訊
class GigSummaryOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    gig_id: str
    title: str
    description: str
    budget: float
    status: str

# 6. 刪除成功的回應
class GigDeleteAck(BaseModel):
    gig_id: str
    message: str = "案件已刪除"
