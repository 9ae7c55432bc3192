# app/schemas/notification_schema.py

from pydantic import BaseModel, ConfigDict, Field


class HiredPayload(BaseModel):
    """
    聘用成功時推送給得標者的內容 (欄位名稱與前端約定為 camelCase)
    """
    model_config = ConfigDict(populate_by_name=True)

    message: str
    gig_id: str = Field(..., alias="gigId")
    gig_title: str = Field(..., alias="gigTitle")
    bid_id: str = Field(..., alias="bidId")


class NotificationEvent(BaseModel):
    """送往即時通道的事件"""
    event: str
    payload: dict
