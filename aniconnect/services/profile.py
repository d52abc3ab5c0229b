"""
Profile screen and profile-completion controller.
"""

import json
from typing import Optional

from ..models.core import Profile, ProfileDraft
from ..utils.identity_provider import AuthError
from ..utils.logging_config import get_logger
from ..utils.rest_client import HttpStatusError
from .base import CONTROLLER_ERRORS, ScreenController
from .profile_cache import ProfileNotFound

logger = get_logger(__name__)


def _server_message(error: HttpStatusError) -> str:
    """Extract the backend's {"message": ...} text from an error body if there is one."""
    try:
        body = json.loads(error.body)
    except (TypeError, ValueError):
        return f'Server error: {error.body}' if error.body else f'Server error: {error.code}'
    if isinstance(body, dict):
        return body.get('message') or 'Unknown server error'
    return f'Server error: {error.code}'


class ProfileController(ScreenController):

    def __init__(self, session):
        super().__init__(session)
        self.profile: Optional[Profile] = None

    @property
    def needs_profile_completion(self) -> bool:
        return self.session.needs_profile_completion

    async def load(self) -> Optional[Profile]:
        """Load the signed-in user's profile through the cache."""
        async with self._loading():
            try:
                self.profile = await self.session.current_profile()
            except ProfileNotFound as e:
                self.profile = None
                self.session.needs_profile_completion = True
                self._fail(e)
            except CONTROLLER_ERRORS as e:
                self._fail(e)
        return self.profile

    def draft(self) -> ProfileDraft:
        """Form contents for the update screen, pre-filled from the loaded profile."""
        if self.profile is None:
            return ProfileDraft()
        return ProfileDraft.from_profile(self.profile)

    async def complete_profile(self, draft: ProfileDraft) -> bool:
        """
        Create (or overwrite) the signed-in user's profile.

        Returns:
            True if the backend accepted the profile
        """
        if self.is_loading:
            return False
        if not draft.is_valid():
            self.error_message = 'Please fill in every field with a valid age'
            return False

        async with self._loading():
            try:
                user_id = self.session.require_user_id()
                payload = draft.to_payload(user_id, self.session.identity.current_user_email())
                await self.api.create_profile(payload)
            except HttpStatusError as e:
                self._fail(e, _server_message(e))
                return False
            except CONTROLLER_ERRORS as e:
                self._fail(e)
                return False

            logger.info(f'Profile saved for user {user_id}')
            self.session.needs_profile_completion = False
            try:
                self.profile = await self.session.profile_cache.refresh(user_id)
            except CONTROLLER_ERRORS as e:
                self._fail(e)
        return True

    async def sign_out(self) -> bool:
        try:
            await self.session.identity.sign_out()
        except AuthError as e:
            self._fail(e)
            return False
        finally:
            self.profile = None
        return True
