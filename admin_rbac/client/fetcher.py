"""
HTTP fetcher for the caller's own permission codes.

Talks to `GET /api/profile/permissions` with httpx.  Every failure —
transport error, non-2xx status, malformed body — is raised as
`PermissionFetchError`; nothing here ever answers with an empty set
on the server's behalf.
"""

import logging

import httpx

from admin_rbac.core.config import settings

logger = logging.getLogger(__name__)

PROFILE_PERMISSIONS_PATH = "/api/profile/permissions"


class PermissionFetchError(Exception):
    """The permission set could not be fetched.  The answer is *unknown*, not empty."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code

    @property
    def is_unauthenticated(self) -> bool:
        return self.status_code == 401


class HttpPermissionFetcher:
    """Callable fetcher: `await fetcher()` → list of permission codes."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        access_token: str | None = None,
        path: str = PROFILE_PERMISSIONS_PATH,
    ) -> None:
        self.client = client
        self.access_token = access_token
        self.path = path

    @classmethod
    def from_settings(cls, access_token: str | None = None, timeout: float = 10.0) -> "HttpPermissionFetcher":
        client = httpx.AsyncClient(base_url=settings.API_BASE_URL, timeout=timeout)
        return cls(client, access_token)

    async def __call__(self) -> list[str]:
        headers = {}
        if self.access_token:
            headers["Authorization"] = f"Bearer {self.access_token}"

        try:
            response = await self.client.get(self.path, headers=headers)
        except httpx.HTTPError as exc:
            logger.warning("Permission fetch failed: %s", exc)
            raise PermissionFetchError(f"Permission fetch failed: {exc}") from exc

        if response.status_code != 200:
            raise PermissionFetchError(
                f"Permission fetch returned HTTP {response.status_code}",
                status_code=response.status_code,
            )

        try:
            codes = response.json()["permissions"]
        except (ValueError, KeyError, TypeError) as exc:
            raise PermissionFetchError("Malformed permission payload", status_code=200) from exc

        if not isinstance(codes, list) or not all(isinstance(code, str) for code in codes):
            raise PermissionFetchError("Malformed permission payload", status_code=200)
        return codes

    async def aclose(self) -> None:
        await self.client.aclose()
