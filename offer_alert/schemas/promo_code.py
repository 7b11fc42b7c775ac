"""PromoCode schemas"""
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from .base import BaseSchema
from .domain_sync import SyncResult


def _prefix_instagram_handle(v):
    """Instagramハンドルに@を自動付与"""
    if isinstance(v, str):
        v = v.strip()
        if v and not v.startswith("@"):
            v = f"@{v}"
    return v


class PromoCodeBase(BaseSchema):
    """Base promo code schema"""
    brand_name: str = Field(..., min_length=1, max_length=255)
    brand_url: str = Field(..., min_length=1, max_length=500)
    brand_instagram_handle: str = Field(..., min_length=1, max_length=100)
    promo_code: str = Field(..., min_length=1, max_length=100)
    description: str = Field(..., min_length=1)
    category: str = Field("Fashion", max_length=100)
    expiration_date: Optional[datetime] = None
    affiliate_link: str = Field(..., min_length=1, max_length=1000)

    @field_validator("brand_instagram_handle", mode="before")
    @classmethod
    def prefix_instagram_handle(cls, v):
        return _prefix_instagram_handle(v)


class PromoCodeCreate(PromoCodeBase):
    """Schema for creating a promo code (agency may set influencer_id)"""
    influencer_id: Optional[str] = Field(None, max_length=36)


class PromoCodeUpdate(BaseSchema):
    """Schema for updating a promo code"""
    brand_name: Optional[str] = Field(None, min_length=1, max_length=255)
    brand_url: Optional[str] = Field(None, min_length=1, max_length=500)
    brand_instagram_handle: Optional[str] = Field(None, min_length=1, max_length=100)
    promo_code: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = None
    category: Optional[str] = Field(None, max_length=100)
    expiration_date: Optional[datetime] = None
    affiliate_link: Optional[str] = Field(None, max_length=1000)

    @field_validator("brand_instagram_handle", mode="before")
    @classmethod
    def prefix_instagram_handle(cls, v):
        return _prefix_instagram_handle(v)

    @field_validator(
        "brand_name", "brand_url", "brand_instagram_handle", "promo_code", "description"
    )
    @classmethod
    def reject_null(cls, v):
        """必須項目は省略可だが null での上書きは不可"""
        if v is None:
            raise ValueError("この項目に null は指定できません")
        return v


class PromoCodeResponse(BaseSchema):
    """Schema for promo code response"""
    id: str
    influencer_id: str
    brand_name: str
    brand_url: Optional[str] = None
    brand_instagram_handle: Optional[str] = None
    promo_code: str
    description: Optional[str] = None
    category: Optional[str] = None
    expiration_date: Optional[datetime] = None
    affiliate_link: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class PromoCodeListResponse(BaseModel):
    """プロモコード一覧レスポンス"""
    promo_codes: List[PromoCodeResponse]
    count: int


class PromoCodeMutationResponse(BaseModel):
    """作成・更新・削除レスポンス（同期結果付き）"""
    message: str
    promo_code: Optional[PromoCodeResponse] = None
    sync: Optional[SyncResult] = None
