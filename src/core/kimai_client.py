"""
Async client for the Kimai time-tracking REST API.
"""

from typing import Any

import httpx

from core.config import KIMAI_API_TOKEN, KIMAI_API_URL, KIMAI_TIMEOUT_SECONDS


class KimaiError(Exception):
    """Operator-friendly Kimai API error."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


def _describe_http_error(response: httpx.Response) -> str:
    """Convert HTTP error statuses to readable messages."""
    status = response.status_code

    messages = {
        401: "Kimai: Authentication failed. Check KIMAI_API_TOKEN!",
        403: "Kimai: Access denied. The API token lacks permission for this resource.",
        404: f"Kimai: Resource not found ({response.request.url.path}).",
        429: "Kimai: Too many requests. Wait a moment and try again.",
        500: "Kimai: Server error. The service may be temporarily unavailable.",
        502: "Kimai: Bad gateway. The service may be temporarily unavailable.",
        503: "Kimai: Service unavailable. Try again later.",
    }

    return messages.get(status, f"Kimai: HTTP {status} - {response.reason_phrase}")


class KimaiClient:
    """
    Client for the Kimai REST API.

    Every call is a single GET attempt; failures surface as KimaiError.
    Pass an httpx transport to substitute the network in tests.
    """

    def __init__(
        self,
        base_url: str,
        api_token: str,
        timeout: float = KIMAI_TIMEOUT_SECONDS,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url
        self._http = httpx.AsyncClient(
            base_url=base_url,
            headers={
                "Authorization": f"Bearer {api_token}",
                "Accept": "application/json",
            },
            timeout=timeout,
            transport=transport,
        )

    async def __aenter__(self) -> "KimaiClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    async def _get(self, path: str, params: dict | None = None) -> Any:
        try:
            r = await self._http.get(path, params=params)
        except httpx.TimeoutException:
            raise KimaiError(f"Kimai: Request to {path} timed out. The server may be slow.")
        except httpx.RequestError as e:
            raise KimaiError(f"Kimai: Cannot connect to {self.base_url} ({e}). Check your network!")

        if not r.is_success:
            raise KimaiError(_describe_http_error(r), r.status_code)

        try:
            return r.json()
        except ValueError:
            raise KimaiError(f"Kimai: Response from {path} is not valid JSON.", r.status_code)

    # -------------------------------------------------------------------------
    # Collections and documents
    # -------------------------------------------------------------------------

    async def get_projects(self) -> list[dict]:
        return await self._get("/projects")

    async def get_project(self, project_id: int) -> dict:
        return await self._get(f"/projects/{project_id}")

    async def get_customers(self) -> list[dict]:
        return await self._get("/customers")

    async def get_customer(self, customer_id: int) -> dict:
        return await self._get(f"/customers/{customer_id}")

    async def get_user(self, user_id: int) -> dict:
        return await self._get(f"/users/{user_id}")

    async def get_activity(self, activity_id: int) -> dict:
        return await self._get(f"/activities/{activity_id}")

    async def get_timesheets(self, params: dict) -> list[dict]:
        """Fetch one page of timesheets matching the given query parameters."""
        return await self._get("/timesheets", params=params)


def create_kimai_client() -> KimaiClient:
    """Create a client from the configured API URL and token."""
    return KimaiClient(KIMAI_API_URL, KIMAI_API_TOKEN)
