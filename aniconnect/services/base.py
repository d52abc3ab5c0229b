"""
Shared conventions for screen controllers (view-models).
"""

from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from ..utils.identity_provider import AuthError
from ..utils.logging_config import get_logger
from ..utils.rest_client import DecodeError, HttpError, HttpStatusError, TransportError
from .profile_cache import ProfileFetchError, ProfileNotFound
from .session import NotSignedInError, SessionContext

logger = get_logger(__name__)

# Failures a controller action converts into a user-visible message instead of raising
CONTROLLER_ERRORS = (HttpError, AuthError, ProfileFetchError, ProfileNotFound, NotSignedInError)


def describe_error(error: Exception) -> str:
    """Turn a library exception into a message suitable for showing to the user."""
    if isinstance(error, TransportError):
        return f'Network error: {error.__cause__ or error}'
    if isinstance(error, HttpStatusError):
        return f'Server error: {error.code}'
    if isinstance(error, DecodeError):
        return 'Failed to decode server response'
    if isinstance(error, ProfileFetchError):
        return describe_error(error.cause)
    if isinstance(error, ProfileNotFound):
        return 'Please complete your profile'
    return str(error)


class ScreenController:
    """Base class owning the transient loading/error state of one screen."""

    def __init__(self, session: SessionContext):
        self.session = session
        self.is_loading = False
        self.error_message: Optional[str] = None

    @property
    def api(self):
        return self.session.api

    @asynccontextmanager
    async def _loading(self) -> AsyncIterator[None]:
        self.is_loading = True
        self.error_message = None
        try:
            yield
        finally:
            self.is_loading = False

    def _fail(self, error: Exception, message: Optional[str] = None) -> None:
        self.error_message = message or describe_error(error)
        logger.error(f'{type(self).__name__}: {self.error_message} ({error!r})')
