"""Async HTTP client for the FlipDeck API, used by the client-side workflows."""

import logging
import uuid
from dataclasses import dataclass
from pathlib import Path

import httpx

from flipdeck.config import settings

logger = logging.getLogger(__name__)


class FlipdeckAPIError(Exception):
    """Non-2xx response (or missing session) with the server's message."""

    def __init__(self, status_code: int, message: str) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.message = message


@dataclass(frozen=True)
class LocalFile:
    """A user-selected file: original name plus its bytes."""

    name: str
    data: bytes
    content_type: str = "application/octet-stream"

    @property
    def size(self) -> int:
        return len(self.data)

    @property
    def extension(self) -> str:
        return self.name.rsplit(".", 1)[-1]

    @classmethod
    def from_path(cls, path: str | Path, content_type: str = "application/octet-stream") -> "LocalFile":
        path = Path(path)
        return cls(name=path.name, data=path.read_bytes(), content_type=content_type)


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text or response.reason_phrase

    if isinstance(body, dict):
        if "error" in body:
            return str(body["error"])
        detail = body.get("detail")
        if isinstance(detail, dict) and "message" in detail:
            return str(detail["message"])
        if isinstance(detail, str):
            return detail
    return response.reason_phrase


class FlipdeckClient:
    """Thin wrapper over ``httpx.AsyncClient`` with bearer-token handling.

    Pass ``http_client`` to reuse a preconfigured client (for example one
    bound to an ASGI app in tests).
    """

    def __init__(
        self,
        base_url: str | None = None,
        access_token: str | None = None,
        storage_url: str | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self.base_url = (base_url or settings.api_base_url).rstrip("/")
        self.storage_url = (storage_url or f"{self.base_url}/storage").rstrip("/")
        self.access_token = access_token
        self._owns_http = http_client is None
        self.http = http_client or httpx.AsyncClient(base_url=self.base_url, timeout=60.0)

    async def aclose(self) -> None:
        if self._owns_http:
            await self.http.aclose()

    async def __aenter__(self) -> "FlipdeckClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    @property
    def is_authenticated(self) -> bool:
        return self.access_token is not None

    def _headers(self) -> dict[str, str]:
        if self.access_token is None:
            return {}
        return {"Authorization": f"Bearer {self.access_token}"}

    async def _request(self, method: str, path: str, **kwargs) -> httpx.Response:
        headers = {**self._headers(), **kwargs.pop("headers", {})}
        try:
            response = await self.http.request(method, f"{self.base_url}{path}", headers=headers, **kwargs)
        except httpx.HTTPError as e:
            logger.error("%s %s failed: %s", method, path, e)
            raise FlipdeckAPIError(0, str(e)) from e

        if response.is_error:
            raise FlipdeckAPIError(response.status_code, _error_message(response))
        return response

    def _require_session(self) -> None:
        if self.access_token is None:
            raise FlipdeckAPIError(401, "Not authenticated")

    # -- auth ---------------------------------------------------------------

    async def register(self, email: str, password: str, name: str) -> dict:
        response = await self._request(
            "POST", "/api/v1/auth/register", json={"email": email, "password": password, "name": name}
        )
        data = response.json()
        self.access_token = data["tokens"]["access_token"]
        return data["user"]

    async def login(self, email: str, password: str) -> dict:
        response = await self._request("POST", "/api/v1/auth/login", json={"email": email, "password": password})
        data = response.json()
        self.access_token = data["tokens"]["access_token"]
        return data["user"]

    async def get_me(self) -> dict:
        self._require_session()
        return (await self._request("GET", "/api/v1/auth/me")).json()

    # -- plans --------------------------------------------------------------

    async def get_plan(self) -> dict:
        """Role, plan limits and current flipbook count."""
        self._require_session()
        return (await self._request("GET", "/api/v1/billing/me")).json()

    async def get_role(self) -> str:
        self._require_session()
        return (await self._request("GET", "/api/v1/billing/role")).json()["role"]

    # -- storage ------------------------------------------------------------

    def public_url(self, bucket: str, path: str) -> str:
        """Public URL of a stored object. Computed locally, no request."""
        return f"{self.storage_url}/{bucket}/{path}"

    async def upload(self, bucket: str, path: str, data: bytes, content_type: str) -> dict:
        self._require_session()
        response = await self._request(
            "PUT",
            f"/api/v1/storage/{bucket}/{path}",
            content=data,
            headers={"Content-Type": content_type},
        )
        return response.json()

    async def delete_object(self, bucket: str, path: str) -> list[str]:
        self._require_session()
        return (await self._request("DELETE", f"/api/v1/storage/{bucket}/{path}")).json()["removed"]

    # -- flipbooks ----------------------------------------------------------

    async def list_flipbooks(self) -> list[dict]:
        self._require_session()
        return (await self._request("GET", "/api/v1/flipbooks")).json()["items"]

    async def get_flipbook(self, flipbook_id: uuid.UUID | str) -> dict:
        return (await self._request("GET", f"/api/v1/flipbooks/{flipbook_id}")).json()

    async def create_flipbook(self, **fields) -> dict:
        self._require_session()
        return (await self._request("POST", "/api/v1/flipbooks", json=fields)).json()

    async def update_flipbook(self, flipbook_id: uuid.UUID | str, **changes) -> dict:
        self._require_session()
        return (await self._request("PUT", f"/api/v1/flipbooks/{flipbook_id}", json=changes)).json()

    async def delete_flipbook(self, flipbook_id: uuid.UUID | str) -> None:
        self._require_session()
        await self._request("DELETE", f"/api/v1/flipbooks/{flipbook_id}")

    async def record_view(self, flipbook_id: uuid.UUID | str) -> int:
        return (await self._request("POST", f"/api/v1/flipbooks/{flipbook_id}/views")).json()["view_count"]

    async def get_analytics(self, flipbook_id: uuid.UUID | str) -> dict:
        self._require_session()
        return (await self._request("GET", f"/api/v1/flipbooks/{flipbook_id}/analytics")).json()

    # -- payment functions --------------------------------------------------

    async def create_order(self, amount: int, currency: str, plan_type: str) -> dict:
        self._require_session()
        response = await self._request(
            "POST",
            "/functions/v1/create-razorpay-order",
            json={"amount": amount, "currency": currency, "plan_type": plan_type},
        )
        return response.json()

    async def verify_payment(self, razorpay_payment_id: str, razorpay_order_id: str, razorpay_signature: str) -> dict:
        self._require_session()
        response = await self._request(
            "POST",
            "/functions/v1/verify-razorpay-payment",
            json={
                "razorpay_payment_id": razorpay_payment_id,
                "razorpay_order_id": razorpay_order_id,
                "razorpay_signature": razorpay_signature,
            },
        )
        return response.json()
