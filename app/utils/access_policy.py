# app/utils/access_policy.py
# 存取規則：純函式，不讀寫資料庫
# 違反時由呼叫端決定拋出 ForbiddenError (身分不對) 或 InvalidStateError (狀態不對)
from typing import Optional

from app.models.gig import GIG_STATUS_OPEN


def is_owner(gig, caller_id: Optional[str]) -> bool:
    return caller_id is not None and gig.owner_id == caller_id


def is_open(gig) -> bool:
    return gig.status == GIG_STATUS_OPEN


def can_bid(gig, caller_id: Optional[str]) -> bool:
    """招募中，且不是自己的案件"""
    return caller_id is not None and is_open(gig) and not is_owner(gig, caller_id)


def can_hire(gig, caller_id: Optional[str]) -> bool:
    """只有擁有者可以對招募中的案件聘用"""
    return is_owner(gig, caller_id) and is_open(gig)


def can_view(gig, caller_id: Optional[str]) -> bool:
    """招募中的案件所有人可見；其他狀態只有擁有者可見"""
    return is_open(gig) or is_owner(gig, caller_id)
