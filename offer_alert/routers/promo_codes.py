"""
PromoCode API エンドポイント

作成・更新・削除の後にドメインマッピングを同期する。
同期の失敗は保存処理を失敗させない（結果はレスポンスに含める）。
"""

import re
import uuid
import logging
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from offer_alert.config import Settings
from offer_alert.database import get_db
from offer_alert.dependencies import (
    get_app_settings,
    get_current_influencer_or_agency,
    resolve_managed_influencer,
)
from offer_alert.models.agency_influencer import AgencyInfluencer
from offer_alert.models.promo_code import PromoCode
from offer_alert.models.user import User, ROLE_AGENCY
from offer_alert.schemas.promo_code import (
    PromoCodeCreate,
    PromoCodeUpdate,
    PromoCodeResponse,
    PromoCodeListResponse,
    PromoCodeMutationResponse,
)
from offer_alert.services.domain import is_valid_brand_url
from offer_alert.services.domain_sync import sync_domain_map
from offer_alert.services.offer_limits import OfferLimitExceeded, check_offer_limit

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/promo-codes", tags=["PromoCodes"])

INSTAGRAM_HANDLE_PATTERN = re.compile(r"^@[a-zA-Z0-9._]+$")


def _count_offers(db: Session, user: User) -> int:
    """上限判定用の登録数（エージェンシーは管理下の全インフルエンサー分）"""
    if user.role == ROLE_AGENCY:
        return (
            db.query(PromoCode)
            .join(
                AgencyInfluencer,
                AgencyInfluencer.influencer_id == PromoCode.influencer_id,
            )
            .filter(AgencyInfluencer.agency_id == user.id)
            .count()
        )
    return db.query(PromoCode).filter(PromoCode.influencer_id == user.id).count()


def _validate_brand_fields(
    brand_url: Optional[str], instagram_handle: Optional[str]
) -> None:
    if brand_url is not None and not is_valid_brand_url(brand_url):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="ブランドURLの形式が正しくありません",
        )
    if instagram_handle is not None and not INSTAGRAM_HANDLE_PATTERN.match(instagram_handle):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Instagramハンドルの形式が正しくありません（例: @brandname）",
        )


def _get_owned_promo_code(db: Session, promo_code_id: str, current_user: User) -> PromoCode:
    """プロモコードを取得し、操作権限を確認"""
    promo_code = db.get(PromoCode, promo_code_id)
    if not promo_code:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="プロモコードが見つかりません"
        )
    resolve_managed_influencer(db, current_user, promo_code.influencer_id)
    return promo_code


@router.get("", response_model=PromoCodeListResponse)
def list_promo_codes(
    influencer_id: Optional[str] = Query(None, description="管理対象インフルエンサーID"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_influencer_or_agency),
):
    """
    プロモコード一覧を取得
    """
    influencer = resolve_managed_influencer(db, current_user, influencer_id)

    promo_codes = (
        db.query(PromoCode)
        .filter(PromoCode.influencer_id == influencer.id)
        .order_by(PromoCode.created_at.desc())
        .all()
    )

    return PromoCodeListResponse(
        promo_codes=[PromoCodeResponse.model_validate(p) for p in promo_codes],
        count=len(promo_codes),
    )


@router.post(
    "", response_model=PromoCodeMutationResponse, status_code=status.HTTP_201_CREATED
)
def create_promo_code(
    request: PromoCodeCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_influencer_or_agency),
    settings: Settings = Depends(get_app_settings),
):
    """
    プロモコードを登録し、フォロワーのドメインマッピングを同期
    """
    influencer = resolve_managed_influencer(db, current_user, request.influencer_id)
    _validate_brand_fields(request.brand_url, request.brand_instagram_handle)

    try:
        check_offer_limit(
            current_user,
            _count_offers(db, current_user),
            bypass=settings.BYPASS_OFFER_LIMITS,
        )
    except OfferLimitExceeded as e:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail={
                "message": str(e),
                "max_offers": e.max_offers,
                "tier": e.tier,
                "required_tier": e.required_tier,
            },
        )

    promo_code = PromoCode(
        id=str(uuid.uuid4()),
        influencer_id=influencer.id,
        **request.model_dump(exclude={"influencer_id"}),
    )
    db.add(promo_code)
    db.commit()
    db.refresh(promo_code)

    logger.info(f"プロモコードを登録: {promo_code.id} - {promo_code.brand_name}")

    sync_result = sync_domain_map(db, influencer.id, changed_promo_code_id=promo_code.id)

    return PromoCodeMutationResponse(
        message="プロモコードを登録しました",
        promo_code=PromoCodeResponse.model_validate(promo_code),
        sync=sync_result,
    )


@router.put("/{promo_code_id}", response_model=PromoCodeMutationResponse)
def update_promo_code(
    promo_code_id: str,
    request: PromoCodeUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_influencer_or_agency),
):
    """
    プロモコードを更新し、フォロワーのドメインマッピングを再計算
    """
    promo_code = _get_owned_promo_code(db, promo_code_id, current_user)

    changes = request.model_dump(exclude_unset=True)
    _validate_brand_fields(
        changes.get("brand_url"), changes.get("brand_instagram_handle")
    )

    for field, value in changes.items():
        setattr(promo_code, field, value)

    db.commit()
    db.refresh(promo_code)

    logger.info(f"プロモコードを更新: {promo_code.id} - {sorted(changes)}")

    sync_result = sync_domain_map(
        db, promo_code.influencer_id, changed_promo_code_id=promo_code.id
    )

    return PromoCodeMutationResponse(
        message="プロモコードを更新しました",
        promo_code=PromoCodeResponse.model_validate(promo_code),
        sync=sync_result,
    )


@router.delete("/{promo_code_id}", response_model=PromoCodeMutationResponse)
def delete_promo_code(
    promo_code_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_influencer_or_agency),
):
    """
    プロモコードを削除し、孤立したドメインのマッピングを削除
    """
    promo_code = _get_owned_promo_code(db, promo_code_id, current_user)
    influencer_id = promo_code.influencer_id
    brand_url = promo_code.brand_url

    db.delete(promo_code)
    db.commit()

    logger.info(f"プロモコードを削除: {promo_code_id}")

    sync_result = sync_domain_map(
        db,
        influencer_id,
        changed_promo_code_id=promo_code_id,
        is_delete=True,
        deleted_brand_url=brand_url,
    )

    return PromoCodeMutationResponse(
        message="プロモコードを削除しました",
        sync=sync_result,
    )
