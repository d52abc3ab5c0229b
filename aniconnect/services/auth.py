"""
Login / registration screen controller.
"""

from ..utils.identity_provider import AuthError
from ..utils.logging_config import get_logger
from .base import ScreenController
from .session import ProfileStatus

logger = get_logger(__name__)


class LoginController(ScreenController):
    """Signs a user in or registers a new account, then routes on profile existence."""

    def __init__(self, session):
        super().__init__(session)
        self.is_login_mode = True
        self.email = ''
        self.password = ''

    def set_login_mode(self, is_login_mode: bool) -> None:
        self.is_login_mode = is_login_mode
        self.error_message = None

    @property
    def is_signed_in(self) -> bool:
        return self.session.is_signed_in

    @property
    def needs_profile_completion(self) -> bool:
        return self.session.needs_profile_completion

    async def submit(self) -> bool:
        """
        Sign in or register with the current email and password.

        Returns:
            True if a session was established
        """
        if self.is_loading:
            return False

        async with self._loading():
            try:
                if self.is_login_mode:
                    await self.session.identity.sign_in(self.email.strip(), self.password)
                else:
                    await self.session.identity.sign_up(self.email.strip(), self.password)
            except AuthError as e:
                self._fail(e)
                return False

            # The auth listener has already run the profile check; report server trouble here
            if self.session.profile_status == ProfileStatus.ERROR:
                self.error_message = 'Could not load your profile. Please try again.'

        self.password = ''
        return True
