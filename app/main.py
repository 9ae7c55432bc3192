import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.core.config import settings
from app.core.database import init_models
from app.core.exceptions import register_exception_handlers
from app.routers import gig_router, notification_router

# 單獨匯入 "bid_router.py" 檔案中的 *兩個* router
from app.routers.bid_router import (
    router as bid_main_router,
    gig_bid_router,
)

# --- 匯入所有 Model 檔案 ---
# 都在應用程式啟動時被 SQLAlchemy 註冊。
from app.models import gig
from app.models import bid


# 設定基礎日誌
logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')
logger = logging.getLogger(__name__) # 建立一個 logger 實例


@asynccontextmanager
async def lifespan(app: FastAPI):
    if settings.DB_AUTO_CREATE:
        logger.info("DB_AUTO_CREATE 已開啟，建立資料表")
        await init_models()
    yield


app = FastAPI(title="Gig Marketplace Backend", lifespan=lifespan)

# --- 設定 CORS (跨來源資源共用) ---
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"], # 允許所有 HTTP 方法
    allow_headers=["*"], # 允許所有 HTTP 標頭
)

# --- 錯誤處理 ---
register_exception_handlers(app)

# --- 根路徑 ---
@app.get("/")
def read_root():
    return {"status": "success", "message": "Backend is running!"}

@app.get("/health")
def health_check():
    return {"status": "OK", "message": "Server is running"}

# --- 載入 API 路由 ---
app.include_router(gig_router.router)
app.include_router(gig_bid_router)
app.include_router(bid_main_router)
app.include_router(notification_router.router)
