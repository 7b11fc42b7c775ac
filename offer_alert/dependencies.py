"""依存注入モジュール"""
from typing import Optional

from fastapi import Depends, HTTPException, status
from sqlalchemy.orm import Session

from offer_alert.auth import get_current_user
from offer_alert.config import Settings, get_settings
from offer_alert.database import get_db
from offer_alert.models.agency_influencer import AgencyInfluencer
from offer_alert.models.user import User, ROLE_AGENCY, ROLE_INFLUENCER


def get_app_settings() -> Settings:
    """設定の依存注入（テストで上書き可能）"""
    return get_settings()


def manages_influencer(db: Session, agency_id: str, influencer_id: str) -> bool:
    """エージェンシーがインフルエンサーを管理しているか"""
    return (
        db.query(AgencyInfluencer.id)
        .filter(
            AgencyInfluencer.agency_id == agency_id,
            AgencyInfluencer.influencer_id == influencer_id,
        )
        .first()
        is not None
    )


def resolve_managed_influencer(
    db: Session, current_user: User, influencer_id: Optional[str]
) -> User:
    """
    操作対象のインフルエンサーを解決

    本人（インフルエンサー）または管理エージェンシーのみ許可する。
    """
    target_id = influencer_id or current_user.id

    if target_id != current_user.id:
        if current_user.role != ROLE_AGENCY or not manages_influencer(
            db, current_user.id, target_id
        ):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="このインフルエンサーを操作する権限がありません",
            )

    influencer = db.get(User, target_id)
    if influencer is None or influencer.role != ROLE_INFLUENCER:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="インフルエンサーが見つかりません",
        )
    return influencer


def get_current_influencer_or_agency(
    current_user: User = Depends(get_current_user),
) -> User:
    """インフルエンサーまたはエージェンシーのみ許可"""
    if current_user.role not in (ROLE_INFLUENCER, ROLE_AGENCY):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="インフルエンサーまたはエージェンシーのみ利用できます",
        )
    return current_user


__all__ = [
    "get_db",
    "get_app_settings",
    "manages_influencer",
    "resolve_managed_influencer",
    "get_current_influencer_or_agency",
]
