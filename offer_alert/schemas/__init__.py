"""
Pydantic Schemas for Offer Alert Application
Based on offer_alert/models
"""

from .base import BaseSchema
from .domain_sync import (
    SyncResult,
    AddMappingsResult,
    DomainSyncRequest,
    BulkFollowItem,
    BulkFollowResult,
)
from .promo_code import (
    PromoCodeBase,
    PromoCodeCreate,
    PromoCodeUpdate,
    PromoCodeResponse,
    PromoCodeListResponse,
    PromoCodeMutationResponse,
)
from .follow import (
    FollowResponse,
    FollowStatusResponse,
    DomainMappingResponse,
    DomainListResponse,
    BulkFollowRequest,
)

__all__ = [
    "BaseSchema",
    "SyncResult",
    "AddMappingsResult",
    "DomainSyncRequest",
    "BulkFollowItem",
    "BulkFollowResult",
    "PromoCodeBase",
    "PromoCodeCreate",
    "PromoCodeUpdate",
    "PromoCodeResponse",
    "PromoCodeListResponse",
    "PromoCodeMutationResponse",
    "FollowResponse",
    "FollowStatusResponse",
    "DomainMappingResponse",
    "DomainListResponse",
    "BulkFollowRequest",
]
