"""Client session: who is signed in and which profile is active.

State machine::

    ANONYMOUS --login/signup--> AUTHENTICATED --set_current_profile--> PROFILE_SELECTED
        ^                            |                                      |
        +-----------logout-----------+------------------logout--------------+

Deleting the active profile falls back to the first remaining profile, or to
AUTHENTICATED when none are left.
"""

from enum import StrEnum
from typing import NoReturn, Optional
from uuid import UUID

import structlog

from client.api import IdentityAPIClient
from client.models import AccountSnapshot, SessionProfile, SessionUser
from client.store import KeyValueStore, StoredValue
from core.exceptions import (
    AppException,
    AuthenticationError,
    ErrorCode,
    InvalidProfileNameError,
    ProfileNotFoundError,
)

logger = structlog.get_logger()

CURRENT_PROFILE_KEY = "currentProfileId"
AUTH_TOKEN_KEY = "authToken"

GENERIC_AUTH_MESSAGE = "Incorrect username or password."

_AUTH_FAILURES = frozenset(
    {
        ErrorCode.INVALID_CREDENTIALS,
        ErrorCode.UNAUTHORIZED,
        ErrorCode.INVALID_TOKEN,
        ErrorCode.TOKEN_EXPIRED,
        ErrorCode.USER_NOT_FOUND,
    }
)


class SessionState(StrEnum):
    ANONYMOUS = "anonymous"
    AUTHENTICATED = "authenticated"
    PROFILE_SELECTED = "profile_selected"


def describe_error(exc: AppException) -> str:
    """User-facing message for a failed session operation."""
    if exc.error_code in _AUTH_FAILURES:
        return GENERIC_AUTH_MESSAGE
    if exc.error_code == ErrorCode.DUPLICATE_USER:
        return "That username is already taken."
    if exc.error_code == ErrorCode.TIMEOUT:
        return "The server took too long to respond. Please try again."
    if exc.error_code == ErrorCode.UPSTREAM_UNAVAILABLE:
        return "Can't reach the server right now. Please try again later."
    if exc.error_code in (
        ErrorCode.INVALID_PROFILE_NAME,
        ErrorCode.VALIDATION_ERROR,
        ErrorCode.PROFILE_NOT_FOUND,
        ErrorCode.PROFILE_LIMIT_REACHED,
    ):
        return exc.message
    return "Something went wrong. Please try again."


class SessionContext:
    """Single source of truth for authentication and profile selection.

    Only the token and the active profile id are persisted. Every state
    change happens after the corresponding request has completed, and a
    response that arrives after a later login/logout is discarded.
    """

    def __init__(self, api: IdentityAPIClient, store: KeyValueStore) -> None:
        self._api = api
        self._stored_profile_id = StoredValue(store, CURRENT_PROFILE_KEY)
        self._stored_token = StoredValue(store, AUTH_TOKEN_KEY)
        self._generation = 0

        self.user: Optional[SessionUser] = None
        self.profiles: list[SessionProfile] = []
        self.current_profile_id: Optional[UUID] = None
        self.last_error: Optional[str] = None
        self._token: Optional[str] = None

    @property
    def is_authenticated(self) -> bool:
        return self.user is not None

    @property
    def current_profile(self) -> Optional[SessionProfile]:
        return self._find(self.current_profile_id)

    @property
    def state(self) -> SessionState:
        if self.user is None:
            return SessionState.ANONYMOUS
        if self.current_profile_id is None:
            return SessionState.AUTHENTICATED
        return SessionState.PROFILE_SELECTED

    async def restore(self) -> bool:
        """Rebuild the session from the stored token on startup.

        Returns True when a session was restored. Never raises: any failure
        leaves the session anonymous. An explicitly rejected token is
        forgotten; a network failure keeps it for the next attempt.
        """
        token = self._stored_token.get()
        if not token:
            return False

        generation = self._next_generation()
        try:
            snapshot = await self._api.me(token)
        except AppException as exc:
            logger.info("session_restore_failed", error_code=exc.error_code.value)
            if generation != self._generation:
                return False
            if isinstance(exc, AuthenticationError) or exc.status_code == 401:
                self._stored_token.clear()
                self._stored_profile_id.clear()
            self._reset()
            return False

        if generation != self._generation:
            return False

        self._apply(snapshot, token)
        saved = self._parse_id(self._stored_profile_id.get())
        if saved is not None and self._find(saved) is not None:
            self.current_profile_id = saved
        else:
            self._stored_profile_id.clear()
        return True

    async def login(self, username: str, password: str) -> None:
        """Sign in. On failure the session is left exactly as it was."""
        generation = self._next_generation()
        try:
            snapshot = await self._api.login(username, password)
        except AppException as exc:
            self._fail(exc)
            raise

        if generation != self._generation:
            logger.debug("stale_login_discarded")
            return
        self._sign_in(snapshot)

    async def signup(self, username: str, password: str) -> None:
        """Create an account (with one default profile) and sign in."""
        generation = self._next_generation()
        try:
            snapshot = await self._api.signup(username, password)
        except AppException as exc:
            self._fail(exc)
            raise

        if generation != self._generation:
            logger.debug("stale_signup_discarded")
            return
        self._sign_in(snapshot)

    async def logout(self) -> None:
        """Sign out. Local state is cleared even if the server call fails."""
        self._next_generation()
        token = self._token
        try:
            await self._api.logout(token)
        except AppException as exc:
            logger.warning("remote_logout_failed", error_code=exc.error_code.value)
        finally:
            self._reset()
            self._stored_token.clear()
            self._stored_profile_id.clear()

    def set_current_profile(self, profile_id: UUID) -> None:
        """Activate a profile. Unknown ids are ignored."""
        if self._find(profile_id) is None:
            return
        self.current_profile_id = profile_id
        self._stored_profile_id.set(str(profile_id))

    async def add_profile(self, name: str, avatar: Optional[str] = None) -> SessionProfile:
        """Create a profile and append it to the local list."""
        if not name or not name.strip():
            self._raise(InvalidProfileNameError())
        token = self._require_token()

        generation = self._generation
        try:
            profile = await self._api.create_profile(token, name, avatar=avatar)
        except AppException as exc:
            self._fail(exc)
            raise

        if generation == self._generation:
            self.profiles = [*self.profiles, profile]
        return profile

    async def delete_profile(self, profile_id: UUID) -> None:
        """Delete a profile; re-point the active profile if it was this one."""
        if self._find(profile_id) is None:
            self._raise(ProfileNotFoundError(str(profile_id)))
        token = self._require_token()

        generation = self._generation
        try:
            await self._api.delete_profile(token, profile_id)
        except AppException as exc:
            self._fail(exc)
            raise

        if generation != self._generation:
            return
        self.profiles = [p for p in self.profiles if p.id != profile_id]
        if self.current_profile_id == profile_id:
            if self.profiles:
                self.set_current_profile(self.profiles[0].id)
            else:
                self.current_profile_id = None
                self._stored_profile_id.clear()

    async def update_profile_avatar(self, profile_id: UUID, avatar: str) -> SessionProfile:
        """Change a profile's avatar."""
        return await self._update(profile_id, avatar=avatar)

    async def rename_profile(self, profile_id: UUID, name: str) -> SessionProfile:
        """Change a profile's display name."""
        if not name or not name.strip():
            self._raise(InvalidProfileNameError())
        return await self._update(profile_id, name=name)

    async def _update(
        self,
        profile_id: UUID,
        name: Optional[str] = None,
        avatar: Optional[str] = None,
    ) -> SessionProfile:
        if self._find(profile_id) is None:
            self._raise(ProfileNotFoundError(str(profile_id)))
        token = self._require_token()

        generation = self._generation
        try:
            updated = await self._api.update_profile(token, profile_id, name=name, avatar=avatar)
        except AppException as exc:
            self._fail(exc)
            raise

        if generation == self._generation:
            self.profiles = [updated if p.id == profile_id else p for p in self.profiles]
        return updated

    def _sign_in(self, snapshot: AccountSnapshot) -> None:
        if not snapshot.token:
            raise AuthenticationError(message="Server did not issue a session token")
        self._apply(snapshot, snapshot.token)
        self._stored_token.set(snapshot.token)
        # A fresh sign-in always goes through profile selection
        self._stored_profile_id.clear()

    def _apply(self, snapshot: AccountSnapshot, token: str) -> None:
        self.user = snapshot.user
        self.profiles = list(snapshot.profiles)
        self.current_profile_id = None
        self._token = token
        self.last_error = None

    def _reset(self) -> None:
        self.user = None
        self.profiles = []
        self.current_profile_id = None
        self._token = None

    def _next_generation(self) -> int:
        self._generation += 1
        return self._generation

    def _require_token(self) -> str:
        if self._token is None:
            self._raise(AuthenticationError())
        return self._token

    def _find(self, profile_id: Optional[UUID]) -> Optional[SessionProfile]:
        if profile_id is None:
            return None
        return next((p for p in self.profiles if p.id == profile_id), None)

    def _fail(self, exc: AppException) -> None:
        self.last_error = describe_error(exc)

    def _raise(self, exc: AppException) -> NoReturn:
        self._fail(exc)
        raise exc

    @staticmethod
    def _parse_id(value: Optional[str]) -> Optional[UUID]:
        if not value:
            return None
        try:
            return UUID(value)
        except ValueError:
            return None
