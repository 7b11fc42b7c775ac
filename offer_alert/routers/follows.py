"""
Follow API エンドポイント
フォロー状態は user_domain_map の行で表現する
"""

import logging
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from offer_alert.auth import get_current_user
from offer_alert.database import get_db
from offer_alert.models.user import User, ROLE_INFLUENCER
from offer_alert.schemas.follow import (
    FollowResponse,
    FollowStatusResponse,
    DomainMappingResponse,
    DomainListResponse,
    BulkFollowRequest,
)
from offer_alert.schemas.domain_sync import BulkFollowResult
from offer_alert.services.domain_sync import DomainSyncService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/follows", tags=["Follows"])


def _get_influencer(db: Session, influencer_id: str) -> User:
    influencer = db.get(User, influencer_id)
    if influencer is None or influencer.role != ROLE_INFLUENCER:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="インフルエンサーが見つかりません",
        )
    return influencer


@router.get("/domains", response_model=DomainListResponse)
def list_my_domains(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    ログインユーザーのドメインマッピング一覧（ブラウザ拡張用）
    """
    mappings = DomainSyncService(db).get_user_mappings(current_user.id)
    domains = sorted({m.domain for m in mappings if m.domain})
    return DomainListResponse(
        mappings=[DomainMappingResponse.model_validate(m) for m in mappings],
        domains=domains,
    )


@router.post("/bulk", response_model=BulkFollowResult)
def bulk_follow_influencers(
    request: BulkFollowRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    インフルエンサーを一括フォロー（フォロー済みはスキップ）
    """
    return DomainSyncService(db).bulk_follow(current_user.id, request.influencer_ids)


@router.post("/{influencer_id}", response_model=FollowResponse)
def follow_influencer(
    influencer_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    インフルエンサーをフォロー
    """
    influencer = _get_influencer(db, influencer_id)
    if influencer.id == current_user.id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="自分自身はフォローできません",
        )

    service = DomainSyncService(db)
    if service.is_following(current_user.id, influencer.id):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="このインフルエンサーは既にフォローしています",
        )

    result = service.follow(current_user.id, influencer.id)
    if not result.success:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="フォローに失敗しました。再度お試しください",
        )

    logger.info(
        f"フォロー: user={current_user.id}, influencer={influencer.id}, "
        f"domains={result.domains_added}"
    )
    return FollowResponse(
        success=True,
        message=f"{influencer.nickname}さんをフォローしました",
        is_following=True,
        domains_added=result.domains_added,
    )


@router.delete("/{influencer_id}", response_model=FollowResponse)
def unfollow_influencer(
    influencer_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    フォロー解除（該当する全マッピングを削除）
    """
    removed = DomainSyncService(db).unfollow(current_user.id, influencer_id)
    if removed == 0:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="このインフルエンサーはフォローしていません",
        )

    logger.info(f"フォロー解除: user={current_user.id}, influencer={influencer_id}")
    return FollowResponse(
        success=True,
        message="フォローを解除しました",
        is_following=False,
        removed=removed,
    )


@router.get("/{influencer_id}/status", response_model=FollowStatusResponse)
def get_follow_status(
    influencer_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    フォロー状態を取得
    """
    return FollowStatusResponse(
        influencer_id=influencer_id,
        is_following=DomainSyncService(db).is_following(current_user.id, influencer_id),
    )
