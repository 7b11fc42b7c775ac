"""
PromoCode Model - プロモコードテーブル

brand_url がドメインマッピングの唯一の情報源。
affiliate_link はマッピング計算に使用しない（移行処理を除く）。
"""
from datetime import datetime
from typing import Optional, TYPE_CHECKING
from sqlalchemy import String, Text, DateTime, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import func

from .base import Base

if TYPE_CHECKING:
    from .user import User


class PromoCode(Base):
    """プロモコードテーブル"""
    __tablename__ = "promo_codes"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    influencer_id: Mapped[str] = mapped_column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    brand_name: Mapped[str] = mapped_column(String(255), nullable=False)
    brand_url: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    brand_instagram_handle: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    promo_code: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    category: Mapped[Optional[str]] = mapped_column(String(100), nullable=True, index=True)
    expiration_date: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True, index=True)
    affiliate_link: Mapped[Optional[str]] = mapped_column(String(1000), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now(), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now(), onupdate=func.now(), nullable=False)

    # Relationships
    influencer: Mapped["User"] = relationship("User", back_populates="promo_codes")
