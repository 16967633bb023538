"""
HTTP tests for the API endpoints, using FastAPI's TestClient.
"""

import time
from datetime import datetime, timezone

from app.api.dependencies import get_redirection_limiter
from app.core.redirection_limiter import RedirectionLimiter
from app.core.setting import EnvSettingsOptions
from app.main import app, docs_urls
from app.services.url_service import hash_url


def shorten(client, url, **fields):
    return client.post("/api/link", data={"url": url, **fields})


def use_limiter(limiter: RedirectionLimiter) -> None:
    app.dependency_overrides[get_redirection_limiter] = lambda: limiter


class TestPages:

    def test_root_serves_link_form(self, client):
        response = client.get("/")

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/html")
        assert '<form id="shortener"' in response.text
        assert 'name="url"' in response.text
        assert "/static/js/app.js" in response.text

    def test_form_script_is_served(self, client):
        response = client.get("/static/js/app.js")

        assert response.status_code == 200
        assert "/api/link" in response.text

    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"
        assert "X-Process-Time" in response.headers

    def test_docs_hidden_in_production(self):
        assert docs_urls(EnvSettingsOptions.production) == {"docs_url": None, "redoc_url": None}
        assert docs_urls(EnvSettingsOptions.development)["docs_url"] == "/docs"


class TestCreateLink:

    def test_create(self, client, unique_url):
        response = shorten(client, unique_url, sponsor="acme")

        assert response.status_code == 201
        expected = f"http://sho.rt/{hash_url(unique_url)}"
        assert response.headers["Location"] == expected
        assert response.json() == {"url": expected, "properties": {"safe": False}}

    def test_create_twice_returns_same_link(self, client, unique_url):
        first = shorten(client, unique_url)
        second = shorten(client, unique_url)

        assert first.status_code == 201
        assert second.status_code == 201
        assert first.json()["url"] == second.json()["url"]

    def test_blank_url(self, client):
        response = shorten(client, "   ")

        assert response.status_code == 400
        assert response.headers["content-type"].startswith("application/problem+json")
        body = response.json()
        assert body["title"] == "Invalid Input"
        assert body["status"] == 400
        assert body["instance"] == "/api/link"

    def test_missing_url(self, client):
        response = client.post("/api/link", data={"sponsor": "acme"})

        assert response.status_code == 400
        assert response.json()["title"] == "Invalid Input"

    def test_unsupported_scheme(self, client):
        response = shorten(client, "ftp://example.com/file")

        assert response.status_code == 400
        body = response.json()
        assert body["title"] == "Invalid URL"
        assert body["type"].endswith("/invalid-url")


class TestRedirect:

    def test_redirects_with_temporary_status(self, client, unique_url):
        shorten(client, unique_url)

        response = client.get(f"/{hash_url(unique_url)}")

        assert response.status_code == 307
        assert response.headers["location"] == unique_url

    def test_unknown_key(self, client):
        response = client.get("/doesnotexist")

        assert response.status_code == 404
        body = response.json()
        assert body["title"] == "Redirection Not Found"
        assert body["instance"] == "/doesnotexist"

    def test_oversized_key(self, client):
        response = client.get("/" + "k" * 101)

        assert response.status_code == 400
        assert response.json()["title"] == "Invalid Input"

    def test_unknown_key_does_not_touch_limiter(self, client):
        limiter = RedirectionLimiter(max_redirects=1, window_seconds=10)
        use_limiter(limiter)

        client.get("/doesnotexist")

        assert limiter.tracked_keys() == 0

    def test_limit_exceeded(self, client, clock, unique_url):
        clock.now = 1_000_000
        limiter = RedirectionLimiter(max_redirects=2, window_seconds=10, clock=clock)
        use_limiter(limiter)
        shorten(client, unique_url)
        key = hash_url(unique_url)

        assert client.get(f"/{key}").status_code == 307
        assert client.get(f"/{key}").status_code == 307
        response = client.get(f"/{key}")

        assert response.status_code == 429
        assert response.headers["content-type"].startswith("application/problem+json")
        body = response.json()
        assert body["title"] == "Redirection Limit Exceeded"
        assert body["status"] == 429
        assert body["instance"] == f"/{key}"
        assert body["url"] == f"http://sho.rt/{key}"
        limits = body["limits"]
        assert limits["maxRedirects"] == 2
        assert limits["currentRedirects"] == 2
        assert limits["windowSeconds"] == 10
        assert limits["errorType"] == "LIMIT_EXCEEDED"
        assert response.headers["Retry-After"] == "10"
        reset_at = datetime.fromisoformat(limits["resetAt"])
        assert reset_at == datetime.fromtimestamp(clock.now + 10, timezone.utc)

    def test_window_reset_allows_redirects_again(self, client, clock, unique_url):
        clock.now = int(time.time())
        limiter = RedirectionLimiter(max_redirects=1, window_seconds=10, clock=clock)
        use_limiter(limiter)
        shorten(client, unique_url)
        key = hash_url(unique_url)

        assert client.get(f"/{key}").status_code == 307
        assert client.get(f"/{key}").status_code == 429
        clock.advance(11)
        assert client.get(f"/{key}").status_code == 307

    def test_retry_after_follows_limiter_clock(self, client, clock, unique_url):
        limiter = RedirectionLimiter(max_redirects=1, window_seconds=10, clock=clock)
        use_limiter(limiter)
        shorten(client, unique_url)
        key = hash_url(unique_url)
        client.get(f"/{key}")

        clock.advance(4)
        response = client.get(f"/{key}")

        assert response.status_code == 429
        assert response.headers["Retry-After"] == "6"

    def test_denied_redirects_are_not_logged_as_clicks(self, client, clock, unique_url):
        limiter = RedirectionLimiter(max_redirects=2, window_seconds=60, clock=clock)
        use_limiter(limiter)
        shorten(client, unique_url)
        key = hash_url(unique_url)

        statuses = [client.get(f"/{key}").status_code for _ in range(4)]

        assert statuses == [307, 307, 429, 429]
        stats = client.get(f"/stats/{key}").json()
        assert stats["click_count"] == 2


class TestStatsAndQR:

    def test_stats(self, client, unique_url):
        shorten(client, unique_url, sponsor="acme")
        key = hash_url(unique_url)
        client.get(f"/{key}", headers={"User-Agent": "curl/8.4.0"})

        response = client.get(f"/stats/{key}")

        assert response.status_code == 200
        body = response.json()
        assert body["key"] == key
        assert body["original_url"] == unique_url
        assert body["click_count"] == 1
        assert body["safe"] is False
        assert body["sponsor"] == "acme"

    def test_stats_unknown_key(self, client):
        assert client.get("/stats/doesnotexist").status_code == 404

    def test_qr_code(self, client, unique_url):
        shorten(client, unique_url)

        response = client.get(f"/{hash_url(unique_url)}/qr")

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("image/svg+xml")
        assert b"svg" in response.content

    def test_qr_unknown_key(self, client):
        assert client.get("/doesnotexist/qr").status_code == 404
