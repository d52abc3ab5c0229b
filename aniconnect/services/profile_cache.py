"""
Per-process read-through cache of user profiles.
"""

from typing import Callable, Dict, Optional

from ..models.core import Profile
from ..utils.backend_api import BackendAPI
from ..utils.identity_provider import IdentityProvider
from ..utils.logging_config import get_logger
from ..utils.rest_client import HttpError, HttpStatusError

logger = get_logger(__name__)


class ProfileFetchError(Exception):
    """The profile could not be fetched (network, server or decode failure)."""

    def __init__(self, user_id: str, cause: HttpError):
        self.user_id = user_id
        self.cause = cause
        super().__init__(f'Failed to fetch profile for {user_id}: {cause}')


class ProfileNotFound(Exception):
    """The backend has no profile for this user yet (HTTP 404)."""

    def __init__(self, user_id: str):
        self.user_id = user_id
        super().__init__(f'No profile exists for user {user_id}')


class ProfileCache:
    """
    Maps user id to Profile. Entries are never revalidated automatically: callers that mutate a
    profile call ``refresh`` to see their own writes. The whole cache is cleared on sign-out.
    """

    def __init__(self, api: BackendAPI):
        self.api = api
        self._profiles: Dict[str, Profile] = {}
        self._unsubscribe: Optional[Callable[[], None]] = None

    def __contains__(self, user_id: str) -> bool:
        return user_id in self._profiles

    def __len__(self) -> int:
        return len(self._profiles)

    async def get_profile(self, user_id: str) -> Profile:
        """
        Return the profile for a user, fetching it on a cache miss.

        Args:
            user_id: Identity provider user id

        Returns:
            The cached or freshly fetched Profile

        Raises:
            ProfileNotFound: If the backend returns 404 for this user
            ProfileFetchError: On any other HTTP, transport or decode failure
        """
        cached = self._profiles.get(user_id)
        if cached is not None:
            logger.debug(f'Profile cache hit for {user_id}')
            return cached

        logger.debug(f'Profile cache miss for {user_id}')
        try:
            profile = await self.api.get_profile(user_id)
        except HttpStatusError as e:
            if e.code == 404:
                logger.warning(f'No profile found for user {user_id}')
                raise ProfileNotFound(user_id) from e
            raise ProfileFetchError(user_id, e) from e
        except HttpError as e:
            raise ProfileFetchError(user_id, e) from e

        self._profiles[user_id] = profile
        return profile

    async def refresh(self, user_id: str) -> Profile:
        """Drop the cached entry and fetch the profile again."""
        self.evict(user_id)
        return await self.get_profile(user_id)

    def evict(self, user_id: str) -> None:
        self._profiles.pop(user_id, None)

    def clear(self) -> None:
        if self._profiles:
            logger.info(f'Clearing {len(self._profiles)} cached profiles')
        self._profiles.clear()

    async def bind(self, identity: IdentityProvider) -> None:
        """Clear the cache whenever the identity provider reports that no user is signed in."""
        if self._unsubscribe is not None:
            return

        def on_auth_state_change(user_id: Optional[str]) -> None:
            if user_id is None:
                self.clear()

        self._unsubscribe = await identity.on_auth_state_change(on_auth_state_change)

    def unbind(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
