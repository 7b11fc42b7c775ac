"""
期限切れオファーの同期バッチ
期限切れのプロモコードを持つインフルエンサーのマッピングを再計算する
"""
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from offer_alert.database import SessionLocal
from offer_alert.models.promo_code import PromoCode
from offer_alert.services.domain_sync import DomainSyncService

logger = logging.getLogger(__name__)


def find_influencers_with_expired_codes(
    db: Session, now: Optional[datetime] = None
) -> List[str]:
    """期限切れプロモコードを持つインフルエンサーIDを取得"""
    now = now or datetime.now()
    rows = (
        db.query(PromoCode.influencer_id)
        .filter(
            PromoCode.expiration_date.isnot(None),
            PromoCode.expiration_date < now,
        )
        .distinct()
        .all()
    )
    return sorted(row.influencer_id for row in rows)


def sweep_expired_offers(db: Session, now: Optional[datetime] = None) -> Dict[str, Any]:
    """期限切れのあるインフルエンサーごとに全件同期を実行"""
    start_time = datetime.now()
    influencer_ids = find_influencers_with_expired_codes(db, now=now)

    if not influencer_ids:
        logger.info("期限切れのプロモコードはありません")

    service = DomainSyncService(db)
    synced = 0
    errors = 0
    for influencer_id in influencer_ids:
        result = service.sync(influencer_id)
        if result.success and result.errors == 0:
            synced += 1
        else:
            errors += 1

    duration = (datetime.now() - start_time).total_seconds()
    logger.info(
        f"期限切れ同期完了: 対象={len(influencer_ids)}, 成功={synced}, "
        f"エラー={errors}, 処理時間={duration:.2f}秒"
    )
    return {
        "status": "completed",
        "total": len(influencer_ids),
        "synced": synced,
        "errors": errors,
        "duration_seconds": duration,
    }


def run_expired_offer_sweep() -> Dict[str, Any]:
    """バッチ処理を実行するエントリーポイント"""
    db = SessionLocal()
    try:
        return sweep_expired_offers(db)
    finally:
        db.close()
