"""Tests for the FlipDeck HTTP client."""

import httpx
import pytest

from flipdeck.client.api import FlipdeckAPIError, FlipdeckClient, LocalFile


class TestLocalFile:
    def test_size_and_extension(self):
        file = LocalFile("Quarterly Report.v2.PDF", b"12345")
        assert file.size == 5
        assert file.extension == "PDF"

    def test_from_path(self, tmp_path):
        path = tmp_path / "deck.pdf"
        path.write_bytes(b"%PDF-1.7")
        file = LocalFile.from_path(path, "application/pdf")
        assert (file.name, file.data, file.content_type) == ("deck.pdf", b"%PDF-1.7", "application/pdf")


def _client_for(response: httpx.Response) -> FlipdeckClient:
    transport = httpx.MockTransport(lambda request: response)
    http = httpx.AsyncClient(transport=transport)
    return FlipdeckClient(base_url="http://api.test", access_token="token", http_client=http)


@pytest.mark.asyncio
class TestErrorMessages:
    async def test_function_error_body(self):
        client = _client_for(httpx.Response(400, json={"error": "Invalid payment signature"}))
        with pytest.raises(FlipdeckAPIError) as exc_info:
            await client.get_me()
        assert exc_info.value.status_code == 400
        assert exc_info.value.message == "Invalid payment signature"

    async def test_plan_gate_detail(self):
        body = {"detail": {"message": "Free plan limit reached", "limit": 3}}
        client = _client_for(httpx.Response(402, json=body))
        with pytest.raises(FlipdeckAPIError, match="Free plan limit reached"):
            await client.create_flipbook(title="x", pdf_storage_path="u/x.pdf")

    async def test_plain_detail(self):
        client = _client_for(httpx.Response(404, json={"detail": "Flipbook not found"}))
        with pytest.raises(FlipdeckAPIError, match="Flipbook not found"):
            await client.get_flipbook("abc")

    async def test_non_json_body(self):
        client = _client_for(httpx.Response(502, text="Bad gateway"))
        with pytest.raises(FlipdeckAPIError, match="Bad gateway"):
            await client.get_me()

    async def test_transport_error(self):
        def refuse(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused")

        http = httpx.AsyncClient(transport=httpx.MockTransport(refuse))
        client = FlipdeckClient(base_url="http://api.test", access_token="token", http_client=http)
        with pytest.raises(FlipdeckAPIError) as exc_info:
            await client.get_me()
        assert exc_info.value.status_code == 0


class TestPublicUrl:
    def test_defaults_to_api_storage(self):
        client = FlipdeckClient(base_url="http://api.test/")
        assert client.public_url("pdfs", "u/a.pdf") == "http://api.test/storage/pdfs/u/a.pdf"

    def test_custom_storage_url(self):
        client = FlipdeckClient(base_url="http://api.test", storage_url="https://cdn.test/files/")
        assert client.public_url("logos", "u/l.png") == "https://cdn.test/files/logos/u/l.png"


@pytest.mark.asyncio
class TestAgainstApp:
    async def test_register_then_login(self, anonymous_client):
        user = await anonymous_client.register("maya@example.com", "password123", "Maya")
        assert anonymous_client.is_authenticated

        anonymous_client.access_token = None
        again = await anonymous_client.login("maya@example.com", "password123")
        assert again["id"] == user["id"]
        assert (await anonymous_client.get_me())["email"] == "maya@example.com"

    async def test_list_flipbooks(self, api_client, test_user, flipbook_factory):
        await flipbook_factory(test_user, 2)
        assert len(await api_client.list_flipbooks()) == 2

    async def test_upload_and_delete_object(self, api_client, test_user):
        path = f"{test_user.id}/logo.png"
        uploaded = await api_client.upload("logos", path, b"png", "image/png")
        assert uploaded["public_url"] == api_client.public_url("logos", path)
        assert await api_client.delete_object("logos", path) == [path]

    async def test_session_required(self, anonymous_client):
        with pytest.raises(FlipdeckAPIError, match="Not authenticated"):
            await anonymous_client.list_flipbooks()
