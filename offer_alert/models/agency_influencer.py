"""
AgencyInfluencer Model - エージェンシーが管理するインフルエンサー
"""
from datetime import datetime
from sqlalchemy import String, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from .base import Base


class AgencyInfluencer(Base):
    """エージェンシー管理テーブル"""
    __tablename__ = "agency_influencers"
    __table_args__ = (UniqueConstraint("agency_id", "influencer_id", name="uq_agency_influencer"),)

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    agency_id: Mapped[str] = mapped_column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    influencer_id: Mapped[str] = mapped_column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now(), nullable=False)
