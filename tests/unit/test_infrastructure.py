"""Unit tests for the infrastructure layer: HttpClient and ZeptoMailProvider."""

from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest

from config import EmailSettings
from infrastructure.email.zeptomail import ZeptoMailProvider
from infrastructure.http_client import HttpClient


# ── HttpClient ────────────────────────────────────────────────────────────────


class TestHttpClient:
    async def test_post_delegates_to_httpx(self, mocker):
        client = HttpClient()
        fake_resp = MagicMock(status_code=200)
        mocker.patch.object(client._client, "post", return_value=fake_resp)
        resp = await client.post("http://example.com", json={"a": 1})
        assert resp.status_code == 200
        client._client.post.assert_awaited_once_with("http://example.com", json={"a": 1})
        await client.aclose()

    async def test_post_propagates_exception(self, mocker):
        client = HttpClient()
        mocker.patch.object(
            client._client, "post", side_effect=httpx.ConnectTimeout("timeout")
        )
        with pytest.raises(httpx.ConnectTimeout, match="timeout"):
            await client.post("http://example.com")
        await client.aclose()

    async def test_context_manager_closes(self):
        async with HttpClient() as client:
            assert client._client.is_closed is False
        assert client._client.is_closed is True


# ── ZeptoMailProvider ─────────────────────────────────────────────────────────


class TestZeptoMailProvider:
    def _make(self, token="test-token"):
        settings = EmailSettings(
            zepto_api_token=token,
            zepto_from_email="noreply@laundry.example",
            zepto_from_name="Laundry",
        )
        http = MagicMock()
        http.post = AsyncMock(return_value=MagicMock(status_code=200))
        provider = ZeptoMailProvider(
            settings=settings, http_client=http, app_url="https://laundry.example"
        )
        return provider, http

    async def test_verification_email_carries_code(self):
        provider, http = self._make()
        assert await provider.send_verification_code("user@example.com", "123456") is True

        http.post.assert_awaited_once()
        payload = http.post.call_args.kwargs["json"]
        assert payload["to"][0]["email_address"]["address"] == "user@example.com"
        assert "123456" in payload["htmlbody"]
        assert "123456" in payload["textbody"]
        assert "10 minutes" in payload["textbody"]

    async def test_password_reset_links_token(self):
        provider, http = self._make()
        await provider.send_password_reset("user@example.com", "abc123token")
        payload = http.post.call_args.kwargs["json"]
        assert "https://laundry.example/reset-password?token=abc123token" in payload["htmlbody"]

    async def test_password_reset_uses_reset_ttl(self):
        settings = EmailSettings(zepto_api_token="t", zepto_from_email="noreply@laundry.example")
        http = MagicMock()
        http.post = AsyncMock(return_value=MagicMock(status_code=200))
        provider = ZeptoMailProvider(settings, http, ttl_minutes=10, reset_ttl_minutes=30)
        await provider.send_password_reset("user@example.com", "abc123token")
        payload = http.post.call_args.kwargs["json"]
        assert "expires in 30 minutes" in payload["htmlbody"]
        assert "expires in 30 minutes" in payload["textbody"]

    async def test_welcome_email_greets_by_name(self):
        provider, http = self._make()
        await provider.send_welcome_email("user@example.com", "Ada")
        payload = http.post.call_args.kwargs["json"]
        assert "Welcome, Ada!" in payload["htmlbody"]
        assert payload["to"][0]["email_address"]["name"] == "Ada"

    async def test_returns_false_when_token_empty(self):
        provider, http = self._make(token="")
        assert await provider.send_verification_code("u@e.com", "000000") is False
        http.post.assert_not_awaited()

    async def test_returns_false_on_non_2xx(self):
        provider, http = self._make()
        http.post = AsyncMock(return_value=MagicMock(status_code=422, text="Unprocessable"))
        assert await provider.send_verification_code("u@e.com", "000000") is False

    async def test_returns_false_on_http_error(self):
        provider, http = self._make()
        http.post = AsyncMock(side_effect=httpx.ReadTimeout("timeout"))
        assert await provider.send_verification_code("u@e.com", "000000") is False

    async def test_auth_header_prepends_prefix(self):
        provider, http = self._make(token="rawtoken")
        await provider.send_welcome_email("u@e.com", "Alice")
        auth = http.post.call_args.kwargs["headers"]["Authorization"]
        assert auth == "Zoho-enczapikey rawtoken"

    async def test_auth_header_not_double_prefixed(self):
        provider, http = self._make(token="Zoho-enczapikey alreadyprefixed")
        http.post = AsyncMock(return_value=MagicMock(status_code=201))
        await provider.send_password_reset("u@e.com", "654321")
        auth = http.post.call_args.kwargs["headers"]["Authorization"]
        assert auth.count("Zoho-enczapikey") == 1
