"""
期限切れオファー同期バッチのテスト
"""

from datetime import datetime, timedelta

from conftest import mapping_rows
from offer_alert.services.domain_sync import sync_domain_map
from offer_alert.services.expiry_sweep import (
    find_influencers_with_expired_codes,
    sweep_expired_offers,
)
from offer_alert.services import scheduler_service


class TestExpirySweep:
    """期限切れ同期のテスト"""

    def test_find_influencers(self, db_session, make_user, make_promo_code):
        expired_a = make_user(role="influencer")
        expired_b = make_user(role="influencer")
        active = make_user(role="influencer")
        yesterday = datetime.now() - timedelta(days=1)
        make_promo_code(expired_a.id, "https://a.com", expiration_date=yesterday)
        make_promo_code(expired_a.id, "https://a2.com", expiration_date=yesterday)
        make_promo_code(expired_b.id, "https://b.com", expiration_date=yesterday)
        make_promo_code(active.id, "https://c.com", expiration_date=datetime.now() + timedelta(days=1))
        make_promo_code(active.id, "https://d.com")

        assert find_influencers_with_expired_codes(db_session) == sorted(
            [expired_a.id, expired_b.id]
        )

    def test_sweep_removes_expired_domains(
        self, db_session, make_user, make_promo_code, add_follower
    ):
        influencer = make_user(role="influencer")
        user = make_user()
        add_follower(user.id, influencer.id)
        old = make_promo_code(influencer.id, "https://old.com")
        make_promo_code(influencer.id, "https://nike.com")
        sync_domain_map(db_session, influencer.id)

        old.expiration_date = datetime.now() - timedelta(hours=1)
        db_session.commit()

        result = sweep_expired_offers(db_session)

        assert result["total"] == 1
        assert result["synced"] == 1
        assert result["errors"] == 0
        assert mapping_rows(db_session, influencer.id) == [(user.id, "nike.com")]

    def test_sweep_last_domain_expired_keeps_follow(
        self, db_session, make_user, make_promo_code, add_follower
    ):
        influencer = make_user(role="influencer")
        user = make_user()
        add_follower(user.id, influencer.id)
        promo_code = make_promo_code(influencer.id, "https://nike.com")
        sync_domain_map(db_session, influencer.id)

        promo_code.expiration_date = datetime.now() - timedelta(hours=1)
        db_session.commit()
        sweep_expired_offers(db_session)

        assert mapping_rows(db_session, influencer.id) == [(user.id, None)]

    def test_sweep_nothing_expired(self, db_session):
        result = sweep_expired_offers(db_session)

        assert result["status"] == "completed"
        assert result["total"] == 0


class TestSchedulerJob:
    """スケジューラージョブのテスト"""

    def test_job_skipped_when_locked(self, monkeypatch):
        calls = []
        monkeypatch.setattr(
            "offer_alert.services.expiry_sweep.run_expired_offer_sweep",
            lambda: calls.append(1),
        )

        scheduler_service.job_lock.acquire()
        try:
            scheduler_service.run_expiry_sweep_job()
        finally:
            scheduler_service.job_lock.release()

        assert calls == []

    def test_job_runs_sweep(self, monkeypatch):
        calls = []

        def fake_sweep():
            calls.append(1)
            return {"total": 0, "synced": 0, "errors": 0, "duration_seconds": 0.0}

        monkeypatch.setattr(
            "offer_alert.services.expiry_sweep.run_expired_offer_sweep", fake_sweep
        )

        scheduler_service.run_expiry_sweep_job()

        assert calls == [1]
        assert scheduler_service.job_lock.locked() is False

    def test_status_when_stopped(self):
        status = scheduler_service.get_scheduler_status()

        assert status == {"running": False, "jobs": []}
