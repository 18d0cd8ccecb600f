"""HTTP client for the identity service REST API."""

from typing import Any, Optional
from uuid import UUID

import httpx
import structlog

from client.models import AccountSnapshot, SessionProfile
from core.exceptions import (
    AppException,
    AuthenticationError,
    DuplicateUserError,
    ErrorCode,
    InvalidCredentialsError,
    InvalidProfileNameError,
    ProfileLimitReachedError,
    ProfileNotFoundError,
    RequestTimeoutError,
    UpstreamUnavailableError,
    UserNotFoundError,
)

logger = structlog.get_logger()

DEFAULT_TIMEOUT = 10.0


def _error_from_response(response: httpx.Response) -> AppException:
    """Rebuild the typed exception described by an error envelope."""
    try:
        body = response.json()
    except ValueError:
        body = None

    if not isinstance(body, dict) or "error_code" not in body:
        if response.status_code >= 500:
            return UpstreamUnavailableError(f"Server error ({response.status_code})")
        return AppException(
            ErrorCode.INTERNAL_ERROR,
            f"Unexpected response ({response.status_code})",
            response.status_code,
        )

    code = body["error_code"]
    message = body.get("message") or ""
    details = body.get("details") if isinstance(body.get("details"), dict) else {}

    if code == ErrorCode.INVALID_CREDENTIALS:
        return InvalidCredentialsError()
    if code == ErrorCode.DUPLICATE_USER:
        return DuplicateUserError(details.get("username", ""))
    if code in (ErrorCode.UNAUTHORIZED, ErrorCode.INVALID_TOKEN, ErrorCode.TOKEN_EXPIRED):
        return AuthenticationError(message=message, error_code=ErrorCode(code))
    if code == ErrorCode.USER_NOT_FOUND:
        return UserNotFoundError(details.get("user_id", ""))
    if code == ErrorCode.PROFILE_NOT_FOUND:
        return ProfileNotFoundError(details.get("profile_id", ""))
    if code == ErrorCode.INVALID_PROFILE_NAME:
        return InvalidProfileNameError(message)
    if code == ErrorCode.PROFILE_LIMIT_REACHED:
        return ProfileLimitReachedError(details.get("limit", 0))

    try:
        error_code = ErrorCode(code)
    except ValueError:
        error_code = ErrorCode.INTERNAL_ERROR
    return AppException(error_code, message, response.status_code, body.get("details"))


class IdentityAPIClient:
    """Async client for ``/api/auth`` and ``/api/profiles``.

    Every call is bounded by ``timeout`` seconds. Transport failures are
    raised as RequestTimeoutError or UpstreamUnavailableError, and error
    responses as the matching AppException subclass.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = DEFAULT_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._timeout = timeout
        self._client = httpx.AsyncClient(
            base_url=base_url,
            timeout=timeout,
            transport=transport,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "IdentityAPIClient":
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.aclose()

    async def signup(self, username: str, password: str) -> AccountSnapshot:
        data = await self._request(
            "POST", "/api/auth/signup", json={"username": username, "password": password}
        )
        return AccountSnapshot.from_json(data)

    async def login(self, username: str, password: str) -> AccountSnapshot:
        data = await self._request(
            "POST", "/api/auth/login", json={"email": username, "password": password}
        )
        return AccountSnapshot.from_json(data)

    async def logout(self, token: Optional[str]) -> None:
        await self._request("POST", "/api/auth/logout", token=token)

    async def me(self, token: str) -> AccountSnapshot:
        data = await self._request("GET", "/api/auth/me", token=token)
        return AccountSnapshot.from_json(data)

    async def list_profiles(self, token: str) -> list[SessionProfile]:
        data = await self._request("GET", "/api/profiles", token=token)
        return [SessionProfile.from_json(p) for p in data["data"]]

    async def create_profile(
        self, token: str, name: str, avatar: Optional[str] = None
    ) -> SessionProfile:
        payload: dict[str, Any] = {"name": name}
        if avatar is not None:
            payload["avatar"] = avatar
        data = await self._request("POST", "/api/profiles", token=token, json=payload)
        return SessionProfile.from_json(data["data"])

    async def update_profile(
        self,
        token: str,
        profile_id: UUID,
        name: Optional[str] = None,
        avatar: Optional[str] = None,
    ) -> SessionProfile:
        payload = {k: v for k, v in (("name", name), ("avatar", avatar)) if v is not None}
        data = await self._request(
            "PATCH", f"/api/profiles/{profile_id}", token=token, json=payload
        )
        return SessionProfile.from_json(data["data"])

    async def delete_profile(self, token: str, profile_id: UUID) -> None:
        await self._request("DELETE", f"/api/profiles/{profile_id}", token=token)

    async def _request(
        self,
        method: str,
        url: str,
        token: Optional[str] = None,
        json: Optional[dict[str, Any]] = None,
    ) -> Any:
        headers = {"Authorization": f"Bearer {token}"} if token else None
        try:
            response = await self._client.request(method, url, json=json, headers=headers)
        except httpx.TimeoutException as e:
            logger.warning("identity_request_timeout", method=method, url=url)
            raise RequestTimeoutError(self._timeout) from e
        except httpx.TransportError as e:
            logger.warning("identity_request_failed", method=method, url=url, error=str(e))
            raise UpstreamUnavailableError() from e

        if response.is_error:
            raise _error_from_response(response)
        if response.status_code == 204 or not response.content:
            return None
        return response.json()
