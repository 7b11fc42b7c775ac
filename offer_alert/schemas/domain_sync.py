"""Domain sync schemas"""
from typing import List, Optional

from pydantic import BaseModel, Field


class SyncResult(BaseModel):
    """ドメインマッピング同期結果"""
    success: bool
    message: str
    influencer_id: Optional[str] = None
    mode: str = Field("full_refresh", description="full_refresh / targeted_delete")
    followers: int = 0
    domains: int = 0
    added: int = 0
    removed: int = 0
    errors: int = 0


class AddMappingsResult(BaseModel):
    """フォロー時のマッピング追加結果"""
    success: bool
    domains_added: int = 0
    errors: int = 0


class DomainSyncRequest(BaseModel):
    """手動同期リクエスト（influencer_id 省略時は本人）"""
    influencer_id: Optional[str] = Field(None, max_length=36, description="インフルエンサーID")


class BulkFollowItem(BaseModel):
    """一括フォローのインフルエンサー別結果"""
    influencer_id: str
    status: str = Field(..., description="followed / already_following / not_found / self / failed")
    domains_added: int = 0


class BulkFollowResult(BaseModel):
    """一括フォロー結果"""
    success: bool
    message: str
    followed_count: int = 0
    already_following_count: int = 0
    failed_count: int = 0
    domains_added: int = 0
    results: List[BulkFollowItem] = []
