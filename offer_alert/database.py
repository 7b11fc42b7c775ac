from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import QueuePool
import os
from dotenv import load_dotenv

from offer_alert.config import get_settings
from offer_alert.models.base import Base  # noqa: F401

load_dotenv()

DATABASE_URL = get_settings().DATABASE_URL

connect_args = {}
engine_kwargs = {}

if DATABASE_URL.startswith("sqlite"):
    # FastAPIのスレッドプールから同一接続を使うため
    connect_args = {"check_same_thread": False}
else:
    engine_kwargs = {
        "poolclass": QueuePool,
        "pool_size": 5,
        "max_overflow": 10,
        "pool_recycle": 3600,
        "pool_pre_ping": True,
    }

# Azure MySQL っぽいホストなら SSL を有効化
if "mysql.database.azure.com" in DATABASE_URL:
    ssl_ca_path = os.getenv("SSL_CA_PATH")
    if ssl_ca_path and os.path.exists(ssl_ca_path):
        connect_args = {
            "ssl_ca": ssl_ca_path,
            "ssl_verify_cert": True,
        }
    else:
        # Azure MySQLはSSL必須のため、システムのCA証明書を使用
        import certifi
        connect_args = {
            "ssl_ca": certifi.where(),
            "ssl_verify_cert": True,
        }

engine = create_engine(
    DATABASE_URL,
    echo=get_settings().DEBUG,
    connect_args=connect_args,
    **engine_kwargs,
)

# セッションファクトリー
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


# 依存性注入用のジェネレータ
def get_db():
    """
    FastAPIの依存性注入で使用するDBセッション

    使用例:
        from sqlalchemy.orm import Session
        from offer_alert.database import get_db

        @router.get("/promo-codes")
        def list_promo_codes(db: Session = Depends(get_db)):
            return db.query(PromoCode).all()
    """

    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
