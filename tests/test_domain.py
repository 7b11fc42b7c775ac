"""
ドメイン抽出のテスト
"""

import pytest

from offer_alert.services.domain import extract_domain, extract_domains, is_valid_brand_url


class TestExtractDomain:
    """extract_domain のテスト"""

    @pytest.mark.parametrize(
        "url, expected",
        [
            ("https://www.nike.com/shoes", "nike.com"),
            ("http://nike.com", "nike.com"),
            ("HTTPS://WWW.Nike.com/Sale", "nike.com"),
            ("nike.com/sale", "nike.com"),
            ("www.adidas.com", "adidas.com"),
            ("shop.brand.co.uk", "brand.co.uk"),
            ("https://www.shop.brand.co.uk/path", "brand.co.uk"),
            ("store.brand.com.au", "brand.com.au"),
            ("brand.co.in", "brand.co.in"),
            ("shop.brand.co.ca", "brand.co.ca"),
            ("shop.brand.com.ca", "brand.com.ca"),
            ("shop.example.com", "shop.example.com"),
            ("https://nike.com:8443/x?y=1", "nike.com"),
        ],
    )
    def test_extracts_domain(self, url, expected):
        assert extract_domain(url) == expected

    @pytest.mark.parametrize("url", ["", "   ", None, 123, ["nike.com"]])
    def test_empty_or_non_string_returns_none(self, url):
        assert extract_domain(url) is None

    @pytest.mark.parametrize(
        "url",
        ["not a url at all", "https://", "http://exa mple.com", "https://nike.com:notaport"],
    )
    def test_unparseable_returns_none(self, url):
        """不正なURLでも例外を送出しない"""
        assert extract_domain(url) is None

    def test_two_label_country_domain_is_kept(self):
        """co.uk 単体はそのまま返す"""
        assert extract_domain("co.uk") == "co.uk"


class TestExtractDomains:
    """extract_domains のテスト"""

    def test_deduplicates_and_skips_invalid(self):
        domains = extract_domains(
            ["https://nike.com", "nike.com/sale", None, "", "not a url", "adidas.com"]
        )
        assert domains == {"nike.com", "adidas.com"}


class TestBrandUrlValidation:
    """ブランドURL形式チェック"""

    @pytest.mark.parametrize(
        "url",
        ["nike.com", "https://www.nike.com/shoes", "http://shop.brand.co.uk?ref=1"],
    )
    def test_valid(self, url):
        assert is_valid_brand_url(url) is True

    @pytest.mark.parametrize("url", ["", None, "nike", "ftp://nike.com", "nike .com"])
    def test_invalid(self, url):
        assert is_valid_brand_url(url) is False
