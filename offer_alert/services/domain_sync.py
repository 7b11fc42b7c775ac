"""
ドメインマッピング同期サービス
インフルエンサーのプロモコード（brand_url）から user_domain_map を再計算する

- フォロワー解決（user_domain_map / 旧 follows テーブル）
- 全件リフレッシュ（作成・更新・期限切れ時）
- 削除時の差分削除
- フォロー・フォロー解除

同一インフルエンサーへの同期はプロセス内ロックで直列化し、
書き込みは1回の一括DELETE・一括INSERTで行う。
"""
import uuid
import logging
import threading
from datetime import datetime
from typing import Dict, Iterable, List, Optional, Set, Tuple

from sqlalchemy import delete, insert, or_
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from offer_alert.config import get_settings
from offer_alert.models.follow import Follow
from offer_alert.models.promo_code import PromoCode
from offer_alert.models.user_domain_map import UserDomainMap
from offer_alert.models.user import User, ROLE_INFLUENCER
from offer_alert.schemas.domain_sync import (
    AddMappingsResult,
    BulkFollowItem,
    BulkFollowResult,
    SyncResult,
)
from offer_alert.services.domain import extract_domain, extract_domains

logger = logging.getLogger(__name__)

FOLLOWER_SOURCE_DOMAIN_MAP = "domain_map"
FOLLOWER_SOURCE_FOLLOWS = "follows"

# 一意制約違反（他プロセスとの競合）時の再試行回数
MAX_WRITE_ATTEMPTS = 2

# インフルエンサーごとの同期ロック
# 解放はしない。件数はプロセスが扱ったインフルエンサー数で頭打ちになる
_influencer_locks: Dict[str, threading.Lock] = {}
_locks_guard = threading.Lock()


def get_influencer_lock(influencer_id: str) -> threading.Lock:
    """インフルエンサーIDごとのロックを取得（なければ作成）"""
    with _locks_guard:
        lock = _influencer_locks.get(influencer_id)
        if lock is None:
            lock = threading.Lock()
            _influencer_locks[influencer_id] = lock
        return lock


class DomainSyncService:
    """ドメインマッピング同期クラス"""

    def __init__(self, db: Session, follower_page_size: Optional[int] = None):
        self.db = db
        self.follower_page_size = follower_page_size or get_settings().FOLLOWER_PAGE_SIZE

    # ============================================
    # 読み取り
    # ============================================
    def get_followers(
        self, influencer_id: str, source: str = FOLLOWER_SOURCE_DOMAIN_MAP
    ) -> Set[str]:
        """
        インフルエンサーのフォロワーIDを取得

        1回の呼び出しで follower_page_size 件までしか返さない。

        Parameters:
            influencer_id: インフルエンサーID
            source: "domain_map"（通常）または "follows"（移行用）

        Returns:
            重複なしのユーザーID集合（該当なしなら空集合）
        """
        if source == FOLLOWER_SOURCE_FOLLOWS:
            column = Follow.user_id
            query = self.db.query(column).filter(Follow.influencer_id == influencer_id)
        else:
            column = UserDomainMap.user_id
            query = self.db.query(column).filter(UserDomainMap.influencer_id == influencer_id)

        rows = query.distinct().order_by(column).limit(self.follower_page_size).all()
        followers = {row.user_id for row in rows}

        if len(rows) >= self.follower_page_size:
            logger.warning(
                f"フォロワー数が上限に達しました（以降は切り捨て）: "
                f"influencer={influencer_id}, limit={self.follower_page_size}"
            )
        return followers

    def get_active_promo_codes(
        self,
        influencer_id: str,
        now: Optional[datetime] = None,
        exclude_id: Optional[str] = None,
    ) -> List[PromoCode]:
        """有効期限内（または期限なし）のプロモコードを取得"""
        now = now or datetime.now()
        query = self.db.query(PromoCode).filter(
            PromoCode.influencer_id == influencer_id,
            or_(
                PromoCode.expiration_date.is_(None),
                PromoCode.expiration_date >= now,
            ),
        )
        if exclude_id:
            query = query.filter(PromoCode.id != exclude_id)
        return query.all()

    def get_active_domains(
        self,
        influencer_id: str,
        now: Optional[datetime] = None,
        exclude_id: Optional[str] = None,
    ) -> Set[str]:
        """有効なプロモコードの brand_url からドメイン集合を取得"""
        promo_codes = self.get_active_promo_codes(influencer_id, now=now, exclude_id=exclude_id)
        return extract_domains(p.brand_url for p in promo_codes)

    # ============================================
    # 書き込み（commit は呼び出し側）
    # ============================================
    def insert_missing(self, rows: Iterable[Tuple[str, str, Optional[str]]]) -> int:
        """
        (user_id, influencer_id, domain) を重複無視で一括登録

        NULL ドメインは一意制約で弾かれないDBがあるため、既存行を先に照合する。

        Returns:
            登録件数
        """
        wanted = set(rows)
        if not wanted:
            return 0

        user_ids = {user_id for user_id, _, _ in wanted}
        influencer_ids = {influencer_id for _, influencer_id, _ in wanted}
        existing = (
            self.db.query(
                UserDomainMap.user_id,
                UserDomainMap.influencer_id,
                UserDomainMap.domain,
            )
            .filter(
                UserDomainMap.user_id.in_(sorted(user_ids)),
                UserDomainMap.influencer_id.in_(sorted(influencer_ids)),
            )
            .all()
        )
        present = {(r.user_id, r.influencer_id, r.domain) for r in existing}

        missing = sorted(wanted - present, key=lambda r: (r[0], r[1], r[2] or ""))
        if not missing:
            return 0

        self.db.execute(
            insert(UserDomainMap),
            [
                {
                    "id": str(uuid.uuid4()),
                    "user_id": user_id,
                    "influencer_id": influencer_id,
                    "domain": domain,
                }
                for user_id, influencer_id, domain in missing
            ],
        )
        return len(missing)

    def _delete_by_ids(self, ids: List[str]) -> int:
        """マッピング行をIDで一括削除"""
        if not ids:
            return 0
        self.db.execute(
            delete(UserDomainMap)
            .where(UserDomainMap.id.in_(ids))
            .execution_options(synchronize_session=False)
        )
        return len(ids)

    def _apply_refresh(
        self, influencer_id: str, followers: Set[str], desired: Set[Optional[str]]
    ) -> Tuple[int, int]:
        """
        フォロワーごとの行集合を desired と完全一致させる

        Returns:
            (追加件数, 削除件数)
        """
        existing = (
            self.db.query(UserDomainMap.id, UserDomainMap.user_id, UserDomainMap.domain)
            .filter(
                UserDomainMap.influencer_id == influencer_id,
                UserDomainMap.user_id.in_(sorted(followers)),
            )
            .all()
        )

        kept: Set[Tuple[str, Optional[str]]] = set()
        stale_ids: List[str] = []
        for row in existing:
            key = (row.user_id, row.domain)
            # 対象外ドメインと重複行（NULLの重複など）は削除
            if row.domain not in desired or key in kept:
                stale_ids.append(row.id)
            else:
                kept.add(key)

        to_insert = [
            (user_id, influencer_id, domain)
            for user_id in followers
            for domain in desired
            if (user_id, domain) not in kept
        ]

        removed = self._delete_by_ids(stale_ids)
        added = self.insert_missing(to_insert)
        return added, removed

    # ============================================
    # 同期
    # ============================================
    def sync(
        self,
        influencer_id: str,
        changed_promo_code_id: Optional[str] = None,
        is_delete: bool = False,
        deleted_brand_url: Optional[str] = None,
    ) -> SyncResult:
        """
        インフルエンサーのドメインマッピングを同期

        Parameters:
            influencer_id: インフルエンサーID
            changed_promo_code_id: 変更・削除されたプロモコードID
            is_delete: 削除による同期か
            deleted_brand_url: 削除済みプロモコードの brand_url（行が既に無い場合に指定）

        Returns:
            同期結果（例外は送出しない）
        """
        with get_influencer_lock(influencer_id):
            if is_delete:
                return self._sync_targeted_delete(
                    influencer_id, changed_promo_code_id, deleted_brand_url
                )
            return self._sync_full_refresh(influencer_id)

    def _sync_full_refresh(self, influencer_id: str) -> SyncResult:
        """有効なプロモコードのドメイン集合で全フォロワーの行を再構築"""
        logger.info(f"ドメインマッピング全件同期開始: influencer={influencer_id}")
        now = datetime.now()

        try:
            followers = self.get_followers(influencer_id)
            domains = self.get_active_domains(influencer_id, now=now)
        except SQLAlchemyError as e:
            logger.error(f"同期用データ取得エラー: influencer={influencer_id} - {str(e)}")
            self.db.rollback()
            return SyncResult(
                success=False,
                message=f"同期用データの取得に失敗しました: {str(e)}",
                influencer_id=influencer_id,
            )

        result = SyncResult(
            success=True,
            message="",
            influencer_id=influencer_id,
            followers=len(followers),
            domains=len(domains),
        )

        if not followers:
            result.message = "フォロワーがいないため同期対象なし"
            logger.info(f"{result.message}: influencer={influencer_id}")
            return result

        # ドメインが無い場合もフォロー関係を残すため NULL 行を1件作る
        desired: Set[Optional[str]] = set(domains) or {None}

        for attempt in range(1, MAX_WRITE_ATTEMPTS + 1):
            try:
                added, removed = self._apply_refresh(influencer_id, followers, desired)
                self.db.commit()
                result.added += added
                result.removed += removed
                break
            except IntegrityError as e:
                self.db.rollback()
                logger.warning(
                    f"一意制約違反、再試行します ({attempt}/{MAX_WRITE_ATTEMPTS}): "
                    f"influencer={influencer_id} - {str(e)}"
                )
                if attempt == MAX_WRITE_ATTEMPTS:
                    result.errors += 1
            except SQLAlchemyError as e:
                self.db.rollback()
                logger.error(f"マッピング書き込みエラー: influencer={influencer_id} - {str(e)}")
                result.errors += 1
                break

        result.message = (
            f"{len(followers)}人のフォロワーに{len(domains)}件のドメインを同期しました"
            f"（追加={result.added}, 削除={result.removed}, エラー={result.errors}）"
        )
        logger.info(f"ドメインマッピング全件同期完了: influencer={influencer_id} {result.message}")
        return result

    def _sync_targeted_delete(
        self,
        influencer_id: str,
        promo_code_id: Optional[str],
        deleted_brand_url: Optional[str],
    ) -> SyncResult:
        """削除されたプロモコードのドメインが孤立した場合のみ行を削除"""
        logger.info(
            f"ドメインマッピング削除同期開始: influencer={influencer_id}, promo_code={promo_code_id}"
        )
        now = datetime.now()

        try:
            if deleted_brand_url is None and promo_code_id:
                promo_code = self.db.get(PromoCode, promo_code_id)
                deleted_brand_url = promo_code.brand_url if promo_code else None
            deleted_domain = extract_domain(deleted_brand_url)

            if deleted_domain is None:
                return SyncResult(
                    success=True,
                    message="削除されたプロモコードのドメインを特定できないため同期対象なし",
                    influencer_id=influencer_id,
                    mode="targeted_delete",
                )

            remaining_domains = self.get_active_domains(
                influencer_id, now=now, exclude_id=promo_code_id
            )
            followers = self.get_followers(influencer_id)
        except SQLAlchemyError as e:
            logger.error(f"同期用データ取得エラー: influencer={influencer_id} - {str(e)}")
            self.db.rollback()
            return SyncResult(
                success=False,
                message=f"同期用データの取得に失敗しました: {str(e)}",
                influencer_id=influencer_id,
                mode="targeted_delete",
            )

        result = SyncResult(
            success=True,
            message="",
            influencer_id=influencer_id,
            mode="targeted_delete",
            followers=len(followers),
            domains=len(remaining_domains),
        )

        if deleted_domain in remaining_domains:
            result.message = f"ドメイン {deleted_domain} は他のプロモコードで使用中のため変更なし"
            logger.info(f"{result.message}: influencer={influencer_id}")
            return result

        if not followers:
            result.message = "フォロワーがいないため同期対象なし"
            return result

        try:
            stale_ids = [
                row.id
                for row in self.db.query(UserDomainMap.id).filter(
                    UserDomainMap.influencer_id == influencer_id,
                    UserDomainMap.domain == deleted_domain,
                    UserDomainMap.user_id.in_(sorted(followers)),
                )
            ]
            result.removed = self._delete_by_ids(stale_ids)

            # 行が残らなかったフォロワーは NULL 行でフォロー関係を残す
            still_mapped = {
                row.user_id
                for row in self.db.query(UserDomainMap.user_id)
                .filter(
                    UserDomainMap.influencer_id == influencer_id,
                    UserDomainMap.user_id.in_(sorted(followers)),
                )
                .distinct()
            }
            result.added = self.insert_missing(
                (user_id, influencer_id, None) for user_id in followers - still_mapped
            )
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"マッピング削除エラー: influencer={influencer_id} - {str(e)}")
            result.errors += 1

        result.message = (
            f"孤立したドメイン {deleted_domain} を{len(followers)}人のフォロワーから削除しました"
            f"（削除={result.removed}, エラー={result.errors}）"
        )
        logger.info(f"ドメインマッピング削除同期完了: influencer={influencer_id} {result.message}")
        return result

    # ============================================
    # フォロー操作
    # ============================================
    def add_domain_mappings(
        self, user_id: str, influencer_id: str, links: Iterable[Optional[str]]
    ) -> AddMappingsResult:
        """
        ユーザー×インフルエンサーのマッピングをリンクから追加

        解決できるドメインが無い場合は NULL ドメインの行を1件作る。
        """
        domains = extract_domains(links)
        desired: Set[Optional[str]] = set(domains) or {None}

        try:
            self.insert_missing((user_id, influencer_id, domain) for domain in desired)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(
                f"マッピング追加エラー: user={user_id}, influencer={influencer_id} - {str(e)}"
            )
            return AddMappingsResult(success=False, errors=1)

        return AddMappingsResult(success=True, domains_added=len(domains))

    def follow(self, user_id: str, influencer_id: str) -> AddMappingsResult:
        """有効なプロモコードの brand_url を元にフォロー登録"""
        promo_codes = self.get_active_promo_codes(influencer_id)
        with get_influencer_lock(influencer_id):
            return self.add_domain_mappings(
                user_id, influencer_id, [p.brand_url for p in promo_codes]
            )

    def bulk_follow(self, user_id: str, influencer_ids: Iterable[str]) -> BulkFollowResult:
        """
        複数インフルエンサーを一括フォロー

        自分自身・フォロー済み・存在しない（またはインフルエンサーでない）IDはスキップし、
        1件の失敗で残りを止めない。
        """
        ordered_ids = list(dict.fromkeys(i for i in influencer_ids if i))
        result = BulkFollowResult(success=True, message="")

        influencers = {
            row.id
            for row in self.db.query(User.id).filter(
                User.id.in_(sorted(ordered_ids)), User.role == ROLE_INFLUENCER
            )
        }
        already_following = {
            row.influencer_id
            for row in self.db.query(UserDomainMap.influencer_id)
            .filter(
                UserDomainMap.user_id == user_id,
                UserDomainMap.influencer_id.in_(sorted(ordered_ids)),
            )
            .distinct()
        }

        for influencer_id in ordered_ids:
            if influencer_id == user_id:
                result.results.append(BulkFollowItem(influencer_id=influencer_id, status="self"))
                continue
            if influencer_id not in influencers:
                result.results.append(BulkFollowItem(influencer_id=influencer_id, status="not_found"))
                continue
            if influencer_id in already_following:
                result.already_following_count += 1
                result.results.append(
                    BulkFollowItem(influencer_id=influencer_id, status="already_following")
                )
                continue

            try:
                added = self.follow(user_id, influencer_id)
            except SQLAlchemyError as e:
                self.db.rollback()
                logger.error(
                    f"一括フォローエラー: user={user_id}, influencer={influencer_id} - {str(e)}"
                )
                added = AddMappingsResult(success=False, errors=1)

            if added.success:
                result.followed_count += 1
                result.domains_added += added.domains_added
                result.results.append(
                    BulkFollowItem(
                        influencer_id=influencer_id,
                        status="followed",
                        domains_added=added.domains_added,
                    )
                )
            else:
                result.failed_count += 1
                result.results.append(BulkFollowItem(influencer_id=influencer_id, status="failed"))

        result.success = result.failed_count == 0
        result.message = (
            f"{result.followed_count}人をフォローしました"
            f"（フォロー済み={result.already_following_count}, 失敗={result.failed_count}）"
        )
        logger.info(f"一括フォロー完了: user={user_id} {result.message}")
        return result

    def unfollow(self, user_id: str, influencer_id: str) -> int:
        """ユーザー×インフルエンサーの全マッピングを削除"""
        with get_influencer_lock(influencer_id):
            removed = (
                self.db.query(UserDomainMap)
                .filter(
                    UserDomainMap.user_id == user_id,
                    UserDomainMap.influencer_id == influencer_id,
                )
                .delete(synchronize_session=False)
            )
            self.db.commit()
        return removed

    def is_following(self, user_id: str, influencer_id: str) -> bool:
        """マッピング行が1件でもあればフォロー中"""
        return (
            self.db.query(UserDomainMap.id)
            .filter(
                UserDomainMap.user_id == user_id,
                UserDomainMap.influencer_id == influencer_id,
            )
            .first()
            is not None
        )

    def get_user_mappings(self, user_id: str) -> List[UserDomainMap]:
        """ユーザーの全マッピングを取得"""
        return (
            self.db.query(UserDomainMap)
            .filter(UserDomainMap.user_id == user_id)
            .order_by(UserDomainMap.influencer_id, UserDomainMap.domain)
            .all()
        )


def get_followers(
    db: Session, influencer_id: str, source: str = FOLLOWER_SOURCE_DOMAIN_MAP
) -> Set[str]:
    """フォロワー取得のヘルパー関数"""
    return DomainSyncService(db).get_followers(influencer_id, source=source)


def sync_domain_map(
    db: Session,
    influencer_id: str,
    changed_promo_code_id: Optional[str] = None,
    is_delete: bool = False,
    deleted_brand_url: Optional[str] = None,
) -> SyncResult:
    """ドメインマッピング同期のヘルパー関数"""
    return DomainSyncService(db).sync(
        influencer_id,
        changed_promo_code_id=changed_promo_code_id,
        is_delete=is_delete,
        deleted_brand_url=deleted_brand_url,
    )


def add_domain_mappings(
    db: Session, user_id: str, influencer_id: str, links: Iterable[Optional[str]]
) -> AddMappingsResult:
    """マッピング追加のヘルパー関数"""
    return DomainSyncService(db).add_domain_mappings(user_id, influencer_id, links)
