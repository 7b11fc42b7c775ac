"""
ドメイン同期 API エンドポイント
インフルエンサー本人または管理エージェンシーが手動で全件同期を実行する
"""

import logging
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.orm import Session

from offer_alert.config import get_settings
from offer_alert.database import get_db
from offer_alert.dependencies import (
    get_current_influencer_or_agency,
    resolve_managed_influencer,
)
from offer_alert.models.user import User
from offer_alert.rate_limiter import limiter
from offer_alert.schemas.domain_sync import DomainSyncRequest, SyncResult
from offer_alert.services.domain_sync import sync_domain_map

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/domain-sync", tags=["DomainSync"])


@router.post("", response_model=SyncResult)
@limiter.limit(get_settings().SYNC_RATE_LIMIT)
def sync_domains(
    request: Request,
    body: Optional[DomainSyncRequest] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_influencer_or_agency),
):
    """
    ドメインマッピングの全件同期

    influencer_id 省略時はログインユーザー本人を対象とする。
    """
    influencer = resolve_managed_influencer(
        db, current_user, body.influencer_id if body else None
    )

    logger.info(f"手動同期リクエスト: user={current_user.id}, influencer={influencer.id}")
    result = sync_domain_map(db, influencer.id)

    if not result.success:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=result.message,
        )
    return result
