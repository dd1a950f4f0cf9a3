from typing import Any, Literal, Optional
import asyncio, logging

import requests

from meower.errors import ApiError
from meower.utils import log


Method = Literal["get", "post", "put", "patch", "delete"]


class ApiResponse:
    def __init__(self, status: int, body: Any):
        self.status = status
        self.body = body

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300

    @property
    def failed(self) -> bool:
        # Non-2xx status or an error-flagged body
        return (not self.ok) or (isinstance(self.body, dict) and bool(self.body.get("error")))


class ApiSession:
    """
    Shared request context for the REST client and every entity it hands out.

    Holds the api url, the live token and the HTTP session. When the socket receives a fresh
    token it is written here, so every wrapper created from this session picks it up.
    """

    def __init__(
        self,
        api_url: str,
        token: Optional[str] = None,
        http: Optional[requests.Session] = None,
        timeout: float = 10
    ):
        self.api_url = api_url.rstrip("/")
        self.token = token
        self.http = http if http is not None else requests.Session()
        self.timeout = timeout

    def url(self, endpoint: str) -> str:
        return f"{self.api_url}{endpoint}"

    def _send(self, method: Method, endpoint: str, headers: dict[str, str], **kwargs) -> ApiResponse:
        resp = self.http.request(
            method.upper(),
            self.url(endpoint),
            headers=headers,
            timeout=self.timeout,
            **kwargs
        )

        # Some endpoints answer with an empty body
        try:
            body = resp.json()
        except ValueError:
            body = None

        return ApiResponse(resp.status_code, body)

    async def request(
        self,
        method: Method,
        endpoint: str,
        json: Optional[dict[str, Any]] = None,
        params: Optional[dict[str, Any]] = None,
        auth: bool = True
    ) -> ApiResponse:
        # Set headers
        headers = {}
        if auth and self.token:
            headers["token"] = self.token
        if json is not None:
            headers["Content-Type"] = "application/json"

        return await asyncio.to_thread(self._send, method, endpoint, headers, json=json, params=params)

    async def call(self, method: Method, endpoint: str, error_message: str, **kwargs) -> Any:
        """Issue a request and raise ApiError unless it succeeded. Returns the body."""

        resp = await self.request(method, endpoint, **kwargs)
        if resp.failed:
            log(f"{method.upper()} {endpoint} failed ({resp.status}): {resp.body}", logging.DEBUG)
            raise ApiError(error_message, resp.body)
        return resp.body

    async def autoget(self, endpoint: str, error_message: str, params: Optional[dict[str, Any]] = None) -> list[Any]:
        """GET a paginated listing and return its "autoget" items."""

        params = {"autoget": 1, **(params or {})}
        body = await self.call("get", endpoint, error_message, params=params)
        if not isinstance(body, dict) or not isinstance(body.get("autoget"), list):
            raise ApiError(error_message, body)
        return body["autoget"]
