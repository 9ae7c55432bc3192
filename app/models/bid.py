# app/models/bid.py
import uuid
from sqlalchemy import Column, TEXT, DECIMAL, ForeignKey, Enum, CHAR, UniqueConstraint
from sqlalchemy.orm import relationship
from app.core.database import Base
from app.models.gig import Timestamp, utcnow

BID_STATUS_PENDING = "pending"
BID_STATUS_HIRED = "hired"
BID_STATUS_REJECTED = "rejected"


class Bid(Base):
    __tablename__ = "bids"
    __table_args__ = (
        # (重要) 同一人對同一案件只能投標一次，由資料庫在 INSERT 時檢查
        UniqueConstraint("gig_id", "bidder_id", name="uq_bids_gig_bidder"),
    )

    bid_id = Column(CHAR(36), primary_key=True, default=lambda: str(uuid.uuid4()))

    gig_id = Column(CHAR(36), ForeignKey("gigs.gig_id"), nullable=False, index=True)
    bidder_id = Column(CHAR(36), nullable=False, index=True)

    message = Column(TEXT, nullable=False)
    price = Column(DECIMAL(10, 2, asdecimal=False), nullable=False)

    # pending -> hired / rejected (皆為終態)，只能由聘用流程修改
    status = Column(
        Enum(BID_STATUS_PENDING, BID_STATUS_HIRED, BID_STATUS_REJECTED, name="bid_status_enum"),
        default=BID_STATUS_PENDING,
        nullable=False,
    )

    created_at = Column(Timestamp, default=utcnow, nullable=False)
    updated_at = Column(Timestamp, default=utcnow, onupdate=utcnow, nullable=False)

    gig = relationship("Gig", back_populates="bids")
