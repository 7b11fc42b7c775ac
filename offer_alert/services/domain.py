"""
ドメイン抽出ユーティリティ
URL文字列から登録可能ドメイン（nike.com, brand.co.uk など）を取り出す

公開サフィックスリストは使わず、既知の国別2階層TLDのみ特別扱いする。
"""

import logging
import re
from typing import Iterable, Optional, Set
from urllib.parse import urlsplit

logger = logging.getLogger(__name__)

_SCHEME_PATTERN = re.compile(r"^https?://", re.IGNORECASE)
_HOSTNAME_PATTERN = re.compile(r"^[a-z0-9_-]+(\.[a-z0-9_-]+)*$")

# 最後のラベル -> 2番目のラベルとして許可する値
MULTI_LABEL_TLDS = {
    "uk": ("co",),
    "au": ("com",),
    "in": ("co",),
    "ca": ("co", "com"),
}

BRAND_URL_PATTERN = re.compile(
    r"^(https?://)?(www\.)?[a-zA-Z0-9-]+(\.[a-zA-Z0-9-]+)+([/?#].*)?$",
    re.IGNORECASE,
)


def _normalize_hostname(hostname: str) -> Optional[str]:
    """ホスト名を小文字・ASCII化し、妥当でなければNoneを返す"""
    hostname = hostname.strip().rstrip(".").lower()
    if not hostname:
        return None
    try:
        hostname = hostname.encode("idna").decode("ascii")
    except UnicodeError:
        return None
    if not _HOSTNAME_PATTERN.match(hostname):
        return None
    return hostname


def extract_domain(url) -> Optional[str]:
    """
    URLからドメインを抽出

    Args:
        url: URL文字列（スキーム省略可）

    Returns:
        ドメイン文字列。空・不正な入力の場合はNone（例外は送出しない）
    """
    if not url or not isinstance(url, str) or not url.strip():
        return None

    candidate = url.strip()
    if not _SCHEME_PATTERN.match(candidate):
        candidate = f"https://{candidate}"

    try:
        parsed = urlsplit(candidate)
        # 不正なポート指定はここで ValueError になる
        parsed.port
        hostname = parsed.hostname
    except ValueError as e:
        logger.debug(f"URL解析エラー: {url!r} - {e}")
        return None

    if not hostname:
        return None

    hostname = _normalize_hostname(hostname)
    if hostname is None:
        logger.debug(f"不正なホスト名のためスキップ: {url!r}")
        return None

    if hostname.startswith("www."):
        hostname = hostname[4:]

    parts = hostname.split(".")
    if len(parts) >= 3 and parts[-2] in MULTI_LABEL_TLDS.get(parts[-1], ()):
        return ".".join(parts[-3:])

    return hostname


def extract_domains(urls: Iterable[Optional[str]]) -> Set[str]:
    """URLリストから重複なしのドメイン集合を取得（抽出失敗分は除外）"""
    domains = set()
    for url in urls:
        domain = extract_domain(url)
        if domain:
            domains.add(domain)
    return domains


def is_valid_brand_url(url: Optional[str]) -> bool:
    """ブランドURLの形式チェック（プロモコード登録フォーム用）"""
    if not url:
        return False
    return BRAND_URL_PATTERN.match(url.strip()) is not None
