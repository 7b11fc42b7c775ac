"""
バッチスケジューラーサービス

APSchedulerを使用して定期バッチ処理を実行する
- 期限切れオファー同期: EXPIRY_SWEEP_INTERVAL_HOURS 時間ごと

同時実行防止のため、ジョブはロックで排他制御する
"""

import logging
import threading
from datetime import datetime
from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.interval import IntervalTrigger

from offer_alert.config import get_settings

logger = logging.getLogger(__name__)

# スケジューラーインスタンス（グローバル）
scheduler = BackgroundScheduler()

# ジョブの排他制御用ロック
job_lock = threading.Lock()


def run_expiry_sweep_job():
    """期限切れオファー同期ジョブ"""
    acquired = job_lock.acquire(blocking=False)
    if not acquired:
        logger.warning("⏳ 期限切れ同期: 他のジョブが実行中のためスキップ")
        return

    try:
        from offer_alert.services.expiry_sweep import run_expired_offer_sweep

        logger.info(f"🧹 期限切れ同期開始: {datetime.now().isoformat()}")

        result = run_expired_offer_sweep()

        logger.info(
            f"✅ 期限切れ同期完了: "
            f"対象={result['total']}, 成功={result['synced']}, "
            f"エラー={result['errors']}, 処理時間={result['duration_seconds']:.2f}秒"
        )
    except Exception as e:
        logger.error(f"❌ 期限切れ同期エラー: {str(e)}")
    finally:
        job_lock.release()


def start_scheduler():
    """スケジューラーを開始"""
    if scheduler.running:
        logger.warning("スケジューラーは既に実行中です")
        return

    interval_hours = get_settings().EXPIRY_SWEEP_INTERVAL_HOURS

    scheduler.add_job(
        run_expiry_sweep_job,
        trigger=IntervalTrigger(hours=interval_hours),
        id="expiry_sweep",
        name="期限切れオファー同期",
        replace_existing=True,
        max_instances=1,  # 同時に1インスタンスのみ
    )

    scheduler.start()
    logger.info("📅 スケジューラー開始")
    logger.info(f"   - 期限切れオファー同期: {interval_hours}時間ごと")


def stop_scheduler():
    """スケジューラーを停止"""
    if scheduler.running:
        scheduler.shutdown(wait=False)
        logger.info("📅 スケジューラー停止")


def get_scheduler_status() -> dict:
    """スケジューラーの状態を取得"""
    jobs = []
    if scheduler.running:
        for job in scheduler.get_jobs():
            jobs.append({
                "id": job.id,
                "name": job.name,
                "next_run": job.next_run_time.isoformat() if job.next_run_time else None,
            })

    return {
        "running": scheduler.running,
        "jobs": jobs,
    }
