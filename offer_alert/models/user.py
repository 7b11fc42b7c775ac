"""
User Model - ユーザーテーブル
"""

from datetime import datetime
from typing import Optional, TYPE_CHECKING
from sqlalchemy import String, Boolean, DateTime
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import func

from .base import Base

if TYPE_CHECKING:
    from .promo_code import PromoCode


ROLE_USER = "user"
ROLE_INFLUENCER = "influencer"
ROLE_AGENCY = "agency"
ROLES = (ROLE_USER, ROLE_INFLUENCER, ROLE_AGENCY)


class User(Base):
    """ユーザーテーブル（一般ユーザー・インフルエンサー・エージェンシー共通）"""

    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    email: Mapped[str] = mapped_column(
        String(255), unique=True, nullable=False, index=True
    )
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    nickname: Mapped[str] = mapped_column(String(100), nullable=True)
    role: Mapped[str] = mapped_column(
        String(20), default=ROLE_USER, nullable=False, index=True
    )
    subscription_tier: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    is_fake_account: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, server_default=func.now(), onupdate=func.now(), nullable=False
    )

    # Relationships
    promo_codes: Mapped[list["PromoCode"]] = relationship(
        "PromoCode", back_populates="influencer", cascade="all, delete-orphan"
    )
