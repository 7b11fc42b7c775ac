"""
テスト用の共通設定・フィクスチャ
"""

import os
import uuid
from datetime import datetime
from typing import Optional

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

# テスト用の環境変数を設定（offer_alert.mainをインポートする前に設定）
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SECRET_KEY", "test-secret-key-for-testing-only")

from offer_alert.main import app
from offer_alert.auth import create_access_token, hash_password
from offer_alert.database import get_db
from offer_alert.models import Base, User, PromoCode, Follow, UserDomainMap, AgencyInfluencer
from offer_alert.rate_limiter import limiter


# テスト用のインメモリSQLiteデータベース
SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

limiter.enabled = False


def override_get_db():
    """テスト用のDBセッションを提供"""
    try:
        db = TestingSessionLocal()
        yield db
    finally:
        db.close()


@pytest.fixture(scope="function")
def db_session():
    """各テスト用のDBセッション"""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def client(db_session):
    """テスト用のAPIクライアント"""
    app.dependency_overrides[get_db] = override_get_db
    Base.metadata.create_all(bind=engine)

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()
    Base.metadata.drop_all(bind=engine)


# ============================================
# データ作成ヘルパー
# ============================================
@pytest.fixture
def make_user(db_session):
    """ユーザーを作成するファクトリ"""

    def _make_user(
        role: str = "user",
        email: Optional[str] = None,
        subscription_tier: Optional[str] = None,
        is_fake_account: bool = False,
    ) -> User:
        user_id = str(uuid.uuid4())
        user = User(
            id=user_id,
            email=email or f"{role}-{user_id[:8]}@example.com",
            password_hash=hash_password("password123"),
            nickname=f"{role}-{user_id[:8]}",
            role=role,
            subscription_tier=subscription_tier,
            is_fake_account=is_fake_account,
        )
        db_session.add(user)
        db_session.commit()
        return user

    return _make_user


@pytest.fixture
def make_promo_code(db_session):
    """プロモコードを作成するファクトリ"""

    def _make_promo_code(
        influencer_id: str,
        brand_url: Optional[str],
        expiration_date: Optional[datetime] = None,
        affiliate_link: Optional[str] = None,
        brand_name: str = "Brand",
    ) -> PromoCode:
        promo_code = PromoCode(
            id=str(uuid.uuid4()),
            influencer_id=influencer_id,
            brand_name=brand_name,
            brand_url=brand_url,
            brand_instagram_handle="@brand",
            promo_code="SAVE10",
            description="10% off",
            category="Fashion",
            expiration_date=expiration_date,
            affiliate_link=affiliate_link,
        )
        db_session.add(promo_code)
        db_session.commit()
        return promo_code

    return _make_promo_code


@pytest.fixture
def add_follower(db_session):
    """user_domain_map に NULL ドメイン行を作ってフォロワーにする"""

    def _add_follower(user_id: str, influencer_id: str) -> None:
        db_session.add(
            UserDomainMap(
                id=str(uuid.uuid4()),
                user_id=user_id,
                influencer_id=influencer_id,
                domain=None,
            )
        )
        db_session.commit()

    return _add_follower


@pytest.fixture
def add_legacy_follow(db_session):
    """旧 follows テーブルに行を追加"""

    def _add_legacy_follow(user_id: str, influencer_id: str) -> Follow:
        follow = Follow(id=str(uuid.uuid4()), user_id=user_id, influencer_id=influencer_id)
        db_session.add(follow)
        db_session.commit()
        return follow

    return _add_legacy_follow


@pytest.fixture
def link_agency(db_session):
    """エージェンシーとインフルエンサーを紐付け"""

    def _link_agency(agency_id: str, influencer_id: str) -> None:
        db_session.add(
            AgencyInfluencer(
                id=str(uuid.uuid4()), agency_id=agency_id, influencer_id=influencer_id
            )
        )
        db_session.commit()

    return _link_agency


def headers_for(user: User) -> dict:
    """ユーザーの認証ヘッダーを作成"""
    token = create_access_token(data={"sub": user.email})
    return {"Authorization": f"Bearer {token}"}


def mapping_rows(db, influencer_id: str) -> list:
    """(user_id, domain) の一覧をソートして取得"""
    rows = (
        db.query(UserDomainMap.user_id, UserDomainMap.domain)
        .filter(UserDomainMap.influencer_id == influencer_id)
        .all()
    )
    return sorted(((r.user_id, r.domain) for r in rows), key=lambda r: (r[0], r[1] or ""))


@pytest.fixture
def test_user(client):
    """テスト用ユーザーを作成"""
    response = client.post(
        "/auth/signup",
        json={
            "email": "test@example.com",
            "password": "testpassword123"
        }
    )
    return response.json()


@pytest.fixture
def auth_headers(test_user):
    """認証ヘッダーを取得"""
    return {"Authorization": f"Bearer {test_user['token']}"}
