"""
フォロー移行処理
旧 follows テーブルから user_domain_map を一括作成する（初回のみ実行）
"""
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from offer_alert.database import SessionLocal
from offer_alert.models.follow import Follow
from offer_alert.models.promo_code import PromoCode
from offer_alert.services.domain import extract_domains
from offer_alert.services.domain_sync import DomainSyncService, get_influencer_lock

logger = logging.getLogger(__name__)


class FollowMigrationProcessor:
    """follows -> user_domain_map 移行処理クラス"""

    def __init__(self, db: Session):
        self.db = db
        self.sync_service = DomainSyncService(db)
        self.migrated_count = 0
        self.mappings_added = 0
        self.error_count = 0

    def get_follows(self) -> List[Follow]:
        """旧フォローを全件取得（ページングなし）"""
        return self.db.query(Follow).order_by(Follow.created_at).all()

    def get_affiliate_links(self, influencer_id: str) -> List[str]:
        """affiliate_link が設定されたプロモコードのリンクを取得"""
        rows = (
            self.db.query(PromoCode.affiliate_link)
            .filter(
                PromoCode.influencer_id == influencer_id,
                PromoCode.affiliate_link.isnot(None),
            )
            .all()
        )
        return [row.affiliate_link for row in rows]

    def migrate_follow(self, follow: Follow) -> bool:
        """1件のフォローを移行"""
        try:
            links = self.get_affiliate_links(follow.influencer_id)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(
                f"プロモコード取得エラー: influencer={follow.influencer_id} - {str(e)}"
            )
            self.error_count += 1
            return False

        domains = extract_domains(links)
        rows = [(follow.user_id, follow.influencer_id, d) for d in domains] or [
            (follow.user_id, follow.influencer_id, None)
        ]

        try:
            with get_influencer_lock(follow.influencer_id):
                added = self.sync_service.insert_missing(rows)
                self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"マッピング登録エラー: follow={follow.id} - {str(e)}")
            self.error_count += 1
            return False

        self.mappings_added += added
        self.migrated_count += 1
        return True

    def run(self) -> Optional[Dict[str, Any]]:
        """
        移行処理を実行

        Returns:
            結果サマリー。follows の取得に失敗した場合は None
        """
        logger.info("=" * 50)
        logger.info("フォロー移行処理を開始")
        logger.info("=" * 50)

        start_time = datetime.now()

        try:
            follows = self.get_follows()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"follows 取得エラー: {str(e)}")
            return None

        if not follows:
            logger.info("移行対象のフォローがありません")

        for i, follow in enumerate(follows, 1):
            logger.debug(f"[{i}/{len(follows)}] user={follow.user_id}, influencer={follow.influencer_id}")
            self.migrate_follow(follow)

        duration = (datetime.now() - start_time).total_seconds()
        result = {
            "status": "completed",
            "total": len(follows),
            "migrated": self.migrated_count,
            "mappings_added": self.mappings_added,
            "errors": self.error_count,
            "duration_seconds": duration,
        }

        logger.info("=" * 50)
        logger.info("フォロー移行処理完了")
        logger.info(f"  フォロー件数: {result['total']}")
        logger.info(f"  移行成功: {result['migrated']}")
        logger.info(f"  追加マッピング: {result['mappings_added']}")
        logger.info(f"  エラー: {result['errors']}")
        logger.info("=" * 50)

        return result


def migrate_follows_to_user_domain_map(db: Session) -> bool:
    """
    follows から user_domain_map へ移行

    個別のフォローの失敗はログのみ。follows の取得に失敗した場合のみ False
    """
    return FollowMigrationProcessor(db).run() is not None


def run_follow_migration() -> Optional[Dict[str, Any]]:
    """移行処理を実行するエントリーポイント"""
    db = SessionLocal()
    try:
        return FollowMigrationProcessor(db).run()
    finally:
        db.close()
