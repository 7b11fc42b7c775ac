"""
SQLAlchemy Models for Offer Alert Application

Usage:
    from offer_alert.models import User, PromoCode, Follow, UserDomainMap
    # または
    from offer_alert.models import Base
"""

from .base import Base
from .user import User
from .promo_code import PromoCode
from .follow import Follow
from .user_domain_map import UserDomainMap
from .agency_influencer import AgencyInfluencer

__all__ = [
    "Base",
    "User",
    "PromoCode",
    "Follow",
    "UserDomainMap",
    "AgencyInfluencer",
]
