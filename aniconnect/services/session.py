"""
Session context shared by every screen controller.
"""

from enum import Enum
from typing import Callable, Optional

from ..models.core import Profile
from ..utils.backend_api import BackendAPI
from ..utils.config import AppConfig, config as default_config
from ..utils.identity_provider import CognitoIdentityProvider, IdentityProvider
from ..utils.logging_config import get_logger
from ..utils.rest_client import RestClient
from .profile_cache import ProfileCache, ProfileFetchError, ProfileNotFound

logger = get_logger(__name__)


class NotSignedInError(Exception):
    """An operation that needs a signed-in user was attempted without one."""
    pass


class ProfileStatus(Enum):
    EXISTS = 'exists'
    MISSING = 'missing'
    ERROR = 'error'


class SessionContext:
    """
    Holds the identity provider, backend API and profile cache for one running client.

    Controllers receive this object instead of reaching for process-wide singletons.
    """

    def __init__(self,
                 identity: IdentityProvider,
                 api: BackendAPI,
                 profile_cache: Optional[ProfileCache] = None,
                 config: Optional[AppConfig] = None):
        self.identity = identity
        self.api = api
        self.profile_cache = profile_cache or ProfileCache(api)
        self.config = config or default_config
        self.needs_profile_completion = False
        self.profile_status: Optional[ProfileStatus] = None
        self._unsubscribe: Optional[Callable[[], None]] = None

    @classmethod
    def from_config(cls, config: Optional[AppConfig] = None) -> 'SessionContext':
        """Build a context wired to the real backend and Cognito user pool."""
        config = config or default_config
        api = BackendAPI(RestClient(config.backend))
        identity = CognitoIdentityProvider(config.cognito)
        return cls(identity, api, config=config)

    @property
    def user_id(self) -> Optional[str]:
        return self.identity.current_user_id()

    @property
    def is_signed_in(self) -> bool:
        return self.user_id is not None

    def require_user_id(self) -> str:
        user_id = self.user_id
        if user_id is None:
            raise NotSignedInError('No user is signed in')
        return user_id

    async def start(self) -> None:
        """Bind the profile cache and start reacting to auth state changes."""
        await self.profile_cache.bind(self.identity)
        if self._unsubscribe is None:
            self._unsubscribe = await self.identity.on_auth_state_change(self._on_auth_state_change)
        logger.info('Session context started')

    async def close(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        self.profile_cache.unbind()
        await self.api.aclose()

    async def __aenter__(self) -> 'SessionContext':
        await self.start()
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    async def _on_auth_state_change(self, user_id: Optional[str]) -> None:
        if user_id is None:
            self.needs_profile_completion = False
            self.profile_status = None
            return
        await self.check_profile(user_id)

    async def check_profile(self, user_id: str) -> ProfileStatus:
        """
        Check whether the backend has a profile for the user and route accordingly.

        A 404 sets ``needs_profile_completion``; fetch errors leave the routing flag untouched.
        """
        try:
            await self.profile_cache.get_profile(user_id)
        except ProfileNotFound:
            self.needs_profile_completion = True
            self.profile_status = ProfileStatus.MISSING
        except ProfileFetchError as e:
            logger.error(f'Error checking user profile: {e}')
            self.profile_status = ProfileStatus.ERROR
        else:
            self.needs_profile_completion = False
            self.profile_status = ProfileStatus.EXISTS
        return self.profile_status

    async def current_profile(self) -> Profile:
        """
        Return the signed-in user's profile through the cache.

        Raises:
            NotSignedInError: If nobody is signed in
            ProfileNotFound: If the user has not completed their profile
            ProfileFetchError: On fetch failure
        """
        return await self.profile_cache.get_profile(self.require_user_id())
