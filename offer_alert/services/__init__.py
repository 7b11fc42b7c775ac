"""
ドメインマッピング関連サービス
"""

from .domain import extract_domain, extract_domains, is_valid_brand_url
from .domain_sync import (
    DomainSyncService,
    get_followers,
    sync_domain_map,
    add_domain_mappings,
)
from .offer_limits import OfferLimitExceeded, check_offer_limit

__all__ = [
    "extract_domain",
    "extract_domains",
    "is_valid_brand_url",
    "DomainSyncService",
    "get_followers",
    "sync_domain_map",
    "add_domain_mappings",
    "OfferLimitExceeded",
    "check_offer_limit",
]
