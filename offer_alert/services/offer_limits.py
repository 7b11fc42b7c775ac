"""
オファー数制限
サブスクリプションのティアごとにプロモコード登録数を制限する
"""
from typing import Optional

from offer_alert.models.user import User

DEFAULT_TIER = "Starter"

# None は無制限
TIER_MAX_OFFERS = {
    "Starter": 1,
    "Boost": 3,
    "Growth": 10,
    "Pro": 20,
    "Elite": None,
}


class OfferLimitExceeded(Exception):
    """登録上限を超えた"""

    def __init__(self, max_offers: int, tier: str, required_tier: str):
        self.max_offers = max_offers
        self.tier = tier
        self.required_tier = required_tier
        super().__init__(
            f"You've reached your limit of {max_offers} offers with the {tier} plan. "
            f"Upgrade to {required_tier}."
        )


def max_offers_for_tier(tier: Optional[str]) -> Optional[int]:
    """ティアの最大オファー数（未知のティアは Starter 扱い）"""
    return TIER_MAX_OFFERS.get(tier or DEFAULT_TIER, TIER_MAX_OFFERS[DEFAULT_TIER])


def required_tier_for(current_count: int) -> str:
    """現在の登録数から必要なティアを判定"""
    if current_count >= 20:
        return "Elite"
    if current_count >= 10:
        return "Pro"
    if current_count >= 3:
        return "Growth"
    return "Boost"


def check_offer_limit(user: User, current_count: int, bypass: bool = False) -> None:
    """
    登録上限をチェック

    Args:
        user: 上限判定の対象ユーザー（インフルエンサーまたはエージェンシー）
        current_count: 現在の登録数
        bypass: 設定による上限無効化（BYPASS_OFFER_LIMITS）

    Raises:
        OfferLimitExceeded: 上限に達している場合
    """
    if bypass or user.is_fake_account:
        return

    tier = user.subscription_tier or DEFAULT_TIER
    max_offers = max_offers_for_tier(tier)
    if max_offers is not None and current_count >= max_offers:
        raise OfferLimitExceeded(max_offers, tier, required_tier_for(current_count))
