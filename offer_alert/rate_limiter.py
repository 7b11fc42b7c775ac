"""
レート制限設定
手動同期など負荷の高いエンドポイントにIP単位の制限をかける
"""
from slowapi import Limiter
from slowapi.util import get_remote_address

from offer_alert.config import get_settings

limiter = Limiter(
    key_func=get_remote_address,
    enabled=get_settings().RATE_LIMIT_ENABLED,
)
