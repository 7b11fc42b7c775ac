"""
FastAPI メインアプリケーション
Offer Alert - インフルエンサーのプロモコード通知バックエンド
"""

from fastapi import FastAPI, Depends
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.orm import Session
from sqlalchemy import text
from contextlib import asynccontextmanager
import logging
from datetime import datetime
from dotenv import load_dotenv
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

load_dotenv()

from offer_alert.config import get_settings
from offer_alert.database import get_db, engine
from offer_alert.auth import router as auth_router
from offer_alert.rate_limiter import limiter
from offer_alert.routers.promo_codes import router as promo_codes_router
from offer_alert.routers.follows import router as follows_router
from offer_alert.routers.domain_sync import router as domain_sync_router
from offer_alert.services.scheduler_service import (
    start_scheduler,
    stop_scheduler,
    get_scheduler_status,
)

# ログ設定
logging.basicConfig(
    level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


# ============================================
# ライフサイクル管理
# ============================================
@asynccontextmanager
async def lifespan(app: FastAPI):
    """アプリケーションの起動・終了処理"""
    settings = get_settings()
    logger.info("🚀 Offer Alert Backend starting...")
    logger.info(f"Database engine: {engine.url.render_as_string(hide_password=True)}")

    # DB接続テスト
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
            logger.info("✅ Database connection test successful")
    except Exception as e:
        logger.error(f"❌ Database connection test failed: {e}")

    if settings.BYPASS_OFFER_LIMITS:
        logger.warning("⚠️ BYPASS_OFFER_LIMITS が有効です（オファー数制限なし）")

    if settings.ENABLE_SCHEDULER:
        start_scheduler()

    yield

    logger.info("👋 Offer Alert Backend shutting down...")
    stop_scheduler()
    engine.dispose()


# ============================================
# FastAPI アプリケーション
# ============================================
app = FastAPI(
    title="Offer Alert API",
    description="インフルエンサーのプロモコードとフォロワーのドメインマッピング管理",
    version=get_settings().VERSION,
    lifespan=lifespan,
)

# レート制限
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

# CORS設定
app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        "http://localhost:3000",
        "http://127.0.0.1:3000",
        get_settings().FRONTEND_URL,
    ],
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS", "PATCH"],
    allow_headers=["*"],
    max_age=3600,
)

# ルータ登録
app.include_router(auth_router)
app.include_router(promo_codes_router)
app.include_router(follows_router)
app.include_router(domain_sync_router)


# ============================================
# 基本エンドポイント
# ============================================
@app.get("/")
async def root():
    """ルートエンドポイント"""
    return {
        "message": "Offer Alert Backend API",
        "version": get_settings().VERSION,
        "status": "running",
        "docs": "/docs",
        "endpoints": {
            "health": "/api/health",
            "db_health": "/api/db/health",
            "promo_codes": "/api/promo-codes",
            "follows": "/api/follows",
            "domain_sync": "/api/domain-sync",
        },
    }


@app.get("/api/health")
async def health_check():
    """ヘルスチェックエンドポイント"""
    return {
        "status": "ok",
        "service": "Offer Alert Backend",
        "timestamp": datetime.now().isoformat(),
    }


@app.get("/api/db/health")
def db_health_check(db: Session = Depends(get_db)):
    """データベース接続確認エンドポイント"""
    try:
        db.execute(text("SELECT 1"))
        return {
            "status": "connected",
            "dialect": engine.dialect.name,
        }
    except Exception as e:
        logger.error(f"Database connection failed: {e}")
        return {"status": "error", "message": str(e)}


@app.get("/api/scheduler/status")
async def scheduler_status():
    """スケジューラーの状態を取得（管理・モニタリング用）"""
    return {"status": "ok", "scheduler": get_scheduler_status()}


# ============================================
# 開発サーバー起動
# ============================================
if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "offer_alert.main:app", host="0.0.0.0", port=8000, reload=True, log_level="info"
    )
