# models/gig.py
import uuid
from datetime import datetime, timezone
from sqlalchemy import Column, String, TEXT, INT, DECIMAL, DateTime, Enum, CHAR
from sqlalchemy.dialects import mysql
from sqlalchemy.orm import relationship
from app.core.database import Base


def utcnow() -> datetime:
    # 統一存 naive UTC (SQLite 不保存時區)
    return datetime.now(timezone.utc).replace(tzinfo=None)

# MySQL 預設 DATETIME 只到秒，排序 "最新在前" 需要微秒
Timestamp = DateTime().with_variant(mysql.DATETIME(fsp=6), "mysql")

GIG_STATUS_OPEN = "open"
GIG_STATUS_ASSIGNED = "assigned"


class Gig(Base):
    __tablename__ = "gigs"

    gig_id = Column(CHAR(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    # 擁有者身分 (由身分服務提供，建立後不可修改)
    owner_id = Column(CHAR(36), nullable=False, index=True)
    title = Column(String(100), nullable=False, index=True)
    description = Column(TEXT, nullable=False)
    budget = Column(DECIMAL(10, 2, asdecimal=False), nullable=False)
    # 狀態只能 open -> assigned，不可逆
    status = Column(
        Enum(GIG_STATUS_OPEN, GIG_STATUS_ASSIGNED, name="gig_status_enum"),
        default=GIG_STATUS_OPEN,
        nullable=False,
        index=True,
    )
    # 收到的投標數 (與投標同一個交易內遞增)
    bid_count = Column(INT, default=0, nullable=False)
    created_at = Column(Timestamp, default=utcnow, nullable=False)
    updated_at = Column(Timestamp, default=utcnow, onupdate=utcnow, nullable=False)

    # 反向查詢用 (刪除案件不連帶刪除投標)
    bids = relationship("Bid", back_populates="gig")
