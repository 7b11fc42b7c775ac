"""
UserDomainMap Model - ユーザー×インフルエンサー×ドメインのマッピングテーブル

domain が NULL の行は「フォロー中だが解決可能なドメインがない」状態を表す。
"""
from typing import Optional
from sqlalchemy import String, ForeignKey, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base


class UserDomainMap(Base):
    """ドメインマッピングテーブル"""
    __tablename__ = "user_domain_map"
    __table_args__ = (
        UniqueConstraint("user_id", "influencer_id", "domain", name="uq_user_influencer_domain"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    user_id: Mapped[str] = mapped_column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    influencer_id: Mapped[str] = mapped_column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    domain: Mapped[Optional[str]] = mapped_column(String(255), nullable=True, index=True)
