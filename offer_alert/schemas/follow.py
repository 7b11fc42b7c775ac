"""Follow schemas"""
from typing import List, Optional

from pydantic import BaseModel, Field

from .base import BaseSchema


class FollowResponse(BaseModel):
    """フォロー・フォロー解除レスポンス"""
    success: bool
    message: str
    is_following: bool
    domains_added: int = 0
    removed: int = 0


class FollowStatusResponse(BaseModel):
    """フォロー状態レスポンス"""
    influencer_id: str
    is_following: bool


class DomainMappingResponse(BaseSchema):
    """ドメインマッピング1件"""
    influencer_id: str
    domain: Optional[str] = None


class DomainListResponse(BaseModel):
    """ユーザーのドメインマッピング一覧"""
    mappings: List[DomainMappingResponse]
    domains: List[str]


class BulkFollowRequest(BaseModel):
    """一括フォローリクエスト（表示中のインフルエンサー全員など）"""
    influencer_ids: List[str] = Field(..., min_length=1, max_length=100)
