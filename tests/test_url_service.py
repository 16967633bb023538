"""
Tests for URL hashing, input validation and the URL shortening service.
"""

import hashlib

import pytest
from sqlalchemy import select

from app.core.exceptions import (
    DatabaseError,
    InvalidInputError,
    InvalidURLError,
    RedirectionNotFoundError,
)
from app.core.validators import is_valid_url, sanitize_input, sanitize_key
from app.db.models import PERMANENT_REDIRECT, TEMPORARY_REDIRECT, ShortURL, UrlSafety
from app.services.reachability import ReachabilityResult
from app.services.redirect_service import RedirectService
from app.services.url_service import (
    HASH_LENGTH,
    ShortURLProperties,
    URLShorteningService,
    hash_url,
)


class StubReachability:
    def __init__(self, reachable=True):
        self.reachable = reachable
        self.checked = []

    async def check(self, url):
        self.checked.append(url)
        return ReachabilityResult(
            reachable=self.reachable,
            status_code=200 if self.reachable else 404,
            error_type=None if self.reachable else "Client Error",
        )


class StubSafeBrowsing:
    def __init__(self, verdict):
        self.verdict = verdict

    async def check(self, url):
        return self.verdict


class TestHashing:
    """Short keys are derived from the URL."""

    def test_hash_is_md5_prefix(self):
        url = "https://example.com/some/page"
        assert hash_url(url) == hashlib.md5(url.encode("utf-8")).hexdigest()[:8]

    def test_hash_is_deterministic_and_fixed_length(self):
        first = hash_url("https://example.com")
        assert first == hash_url("https://example.com")
        assert len(first) == HASH_LENGTH
        assert all(c in "0123456789abcdef" for c in first)

    def test_different_urls_get_different_keys(self):
        assert hash_url("https://example.com/a") != hash_url("https://example.com/b")


class TestURLValidation:
    """Test URL validation function."""

    def test_valid_urls(self):
        valid_urls = [
            "http://example.com",
            "https://example.com",
            "https://www.example.com/path/to/page",
            "http://subdomain.example.com:8080/path?query=value",
            "http://localhost:8000/docs",
        ]
        for url in valid_urls:
            assert is_valid_url(url), f"Should be valid: {url}"

    def test_invalid_urls(self):
        invalid_urls = [
            "not-a-url",
            "ftp://example.com",  # FTP not supported
            "example.com",  # Missing scheme
            "",
            "http://",  # Missing domain
            "http://intranet/page",  # No dot in host
            "javascript:alert(1)",
            "https://example.com/redirect?to=javascript:alert(1)",
            "https://exa mple.com",
        ]
        for url in invalid_urls:
            assert not is_valid_url(url), f"Should be invalid: {url}"


class TestSanitizers:
    """Basic input constraints."""

    def test_strips_whitespace(self):
        assert sanitize_input("  https://example.com  ", "url") == "https://example.com"

    @pytest.mark.parametrize("value", [None, "", "   "])
    def test_missing_or_blank_is_rejected(self, value):
        with pytest.raises(InvalidInputError) as exc_info:
            sanitize_input(value, "url")
        assert exc_info.value.field == "url"

    def test_too_long_is_rejected(self):
        with pytest.raises(InvalidInputError):
            sanitize_input("https://example.com/" + "a" * 2048, "url", max_length=2048)

    def test_key_length_limit(self):
        assert sanitize_key("a" * 100) == "a" * 100
        with pytest.raises(InvalidInputError):
            sanitize_key("a" * 101)


class TestURLShorteningService:
    """Link creation against the test database."""

    @pytest.mark.asyncio
    async def test_create_short_url(self, session, unique_url):
        service = URLShorteningService(session)

        short_url = await service.create_short_url(
            unique_url, ShortURLProperties(ip="10.0.0.1", sponsor="acme")
        )

        assert short_url.url_hash == hash_url(unique_url)
        assert short_url.target == unique_url
        assert short_url.mode == TEMPORARY_REDIRECT
        assert short_url.sponsor == "acme"
        assert short_url.ip == "10.0.0.1"
        assert short_url.safety == UrlSafety.UNKNOWN.value
        assert short_url.is_safe is False

    @pytest.mark.asyncio
    async def test_create_is_idempotent(self, session, unique_url):
        service = URLShorteningService(session)

        first = await service.create_short_url(unique_url)
        second = await service.create_short_url(unique_url)

        assert first.id == second.id
        result = await session.execute(
            select(ShortURL).where(ShortURL.url_hash == hash_url(unique_url))
        )
        assert len(result.scalars().all()) == 1

    @pytest.mark.asyncio
    async def test_invalid_url_is_rejected_before_probing(self, session):
        reachability = StubReachability()
        service = URLShorteningService(session, reachability_checker=reachability)

        with pytest.raises(InvalidURLError):
            await service.create_short_url("ftp://example.com/file")
        assert reachability.checked == []

    @pytest.mark.asyncio
    async def test_blank_url_is_invalid_input(self, session):
        service = URLShorteningService(session)

        with pytest.raises(InvalidInputError):
            await service.create_short_url("   ")

    @pytest.mark.asyncio
    async def test_unreachable_url_is_rejected(self, session, unique_url):
        service = URLShorteningService(session, reachability_checker=StubReachability(reachable=False))

        with pytest.raises(InvalidURLError) as exc_info:
            await service.create_short_url(unique_url)
        assert exc_info.value.reason == "URL is not reachable"
        assert await service.get_short_url(hash_url(unique_url)) is None

    @pytest.mark.asyncio
    async def test_safe_browsing_verdict_is_stored(self, session, unique_url):
        service = URLShorteningService(session, safe_browsing=StubSafeBrowsing(UrlSafety.SAFE))

        short_url = await service.create_short_url(unique_url)

        assert short_url.safety == "safe"
        assert short_url.is_safe is True

    @pytest.mark.asyncio
    async def test_hash_collision_is_reported(self, session, unique_url):
        session.add(ShortURL(url_hash=hash_url(unique_url), target="https://other.example.com"))
        await session.commit()
        service = URLShorteningService(session)

        with pytest.raises(DatabaseError):
            await service.create_short_url(unique_url)


class TestRedirectService:
    """Key resolution."""

    @pytest.mark.asyncio
    async def test_redirect_to_known_key(self, session, unique_url):
        await URLShorteningService(session).create_short_url(
            unique_url, ShortURLProperties(mode=PERMANENT_REDIRECT)
        )

        redirection = await RedirectService(session).redirect_to(hash_url(unique_url))

        assert redirection.target == unique_url
        assert redirection.status_code == PERMANENT_REDIRECT

    @pytest.mark.asyncio
    async def test_unknown_key(self, session):
        with pytest.raises(RedirectionNotFoundError):
            await RedirectService(session).redirect_to("ffffffff-missing")

    @pytest.mark.asyncio
    async def test_blank_key(self, session):
        with pytest.raises(InvalidInputError):
            await RedirectService(session).redirect_to(" ")
