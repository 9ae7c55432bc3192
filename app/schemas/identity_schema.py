# app/schemas/identity_schema.py
from pydantic import BaseModel


# Token 內的資料 (由外部身分服務簽發)
class TokenData(BaseModel):
    user_id: str


# 已驗證的呼叫者身分，傳入所有核心操作
class Caller(BaseModel):
    user_id: str
