from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession
from sqlalchemy.orm import sessionmaker, declarative_base
from app.core.config import settings

# 建立非同步引擎
engine_kwargs = {
    "pool_pre_ping": True, # 每次從連線池取連線前，先 PING 一次，確保連線有效
    "echo": settings.DB_ECHO,
}
# SQLite 不使用 QueuePool，不能傳 pool_timeout
if not settings.DATABASE_URL.startswith("sqlite"):
    engine_kwargs["pool_timeout"] = settings.DB_POOL_TIMEOUT

engine = create_async_engine(settings.DATABASE_URL, **engine_kwargs)

# 建立非同步 Session
AsyncSessionLocal = sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False,
)

# 建立 ORM Model 基底類別
Base = declarative_base()

# (重要) 取得 DB Session 的 Dependency
async def get_db() -> AsyncSession:
    """FastAPI Dependency: 取得非同步資料庫 session (每個請求一個)"""
    async with AsyncSessionLocal() as session:
        try:
            yield session
        finally:
            await session.close()

async def init_models(bind=None) -> None:
    """建立所有資料表 (開發環境與測試用，正式環境請用 DDL)"""
    # 匯入 Model 檔案，讓 Base.metadata 註冊所有表格
    from app.models import gig, bid  # noqa: F401

    target = bind or engine
    async with target.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
