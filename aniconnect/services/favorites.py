"""
Favorite toggle state machine and the favorites list controller.
"""

from enum import Enum
from typing import List, Set

from ..models.core import FavoriteMovieRef
from ..utils.logging_config import get_logger
from .base import CONTROLLER_ERRORS, ScreenController
from .profile_cache import ProfileNotFound

logger = get_logger(__name__)


class FavoriteState(Enum):
    UNKNOWN = 'unknown'
    NOT_FAVORITED = 'not_favorited'
    FAVORITED = 'favorited'


class FavoriteToggle(ScreenController):
    """
    Favorite state of one movie for the signed-in user.

    At most one add/remove request is in flight; a toggle issued while one is outstanding is
    rejected without touching the network. A failed request rolls the state back.
    """

    def __init__(self, session, movie_id: int):
        super().__init__(session)
        self.movie_id = movie_id
        self.state = FavoriteState.UNKNOWN
        self.in_flight = False

    @property
    def is_favorited(self) -> bool:
        return self.state == FavoriteState.FAVORITED

    @property
    def is_enabled(self) -> bool:
        return not self.in_flight

    async def refresh(self) -> FavoriteState:
        """Resolve UNKNOWN from the signed-in user's (cached) profile."""
        if self.session.user_id is None:
            return self.state
        try:
            profile = await self.session.current_profile()
        except ProfileNotFound:
            self.state = FavoriteState.NOT_FAVORITED
        except CONTROLLER_ERRORS as e:
            logger.warning(f'Error checking favorites for movie {self.movie_id}: {e}')
        else:
            self.state = FavoriteState.FAVORITED if profile.is_favorite(self.movie_id) else FavoriteState.NOT_FAVORITED
        return self.state

    async def toggle(self) -> bool:
        """
        Add the movie to favorites, or remove it if it is already a favorite.

        Returns:
            True if the request was issued and succeeded, False if it was rejected or failed
        """
        if self.in_flight:
            logger.warning(f'Favorite toggle for movie {self.movie_id} rejected: request already in flight')
            return False

        user_id = self.session.user_id
        if user_id is None:
            self.error_message = 'Please login to manage favorites'
            return False

        removing = self.state == FavoriteState.FAVORITED
        self.in_flight = True
        self.error_message = None
        try:
            try:
                if removing:
                    await self.api.remove_favorite(user_id, self.movie_id)
                else:
                    await self.api.add_favorite(user_id, self.movie_id)
            except CONTROLLER_ERRORS as e:
                # Unknown collapses to NotFavorited: a failed add proves nothing was added
                self.state = FavoriteState.FAVORITED if removing else FavoriteState.NOT_FAVORITED
                self._fail(e, 'Failed to remove from favorites' if removing else 'Failed to add to favorites')
                return False

            self.state = FavoriteState.NOT_FAVORITED if removing else FavoriteState.FAVORITED
            logger.info(f'Movie {self.movie_id} is now {self.state.value} for user {user_id}')

            # The cached profile is never revalidated, so refetch it to see this write
            try:
                await self.session.profile_cache.refresh(user_id)
            except CONTROLLER_ERRORS as e:
                self._fail(e)
        finally:
            self.in_flight = False
        return True


class FavoritesController(ScreenController):
    """List of the signed-in user's favorite movies with removal."""

    def __init__(self, session):
        super().__init__(session)
        self.favorites: List[FavoriteMovieRef] = []
        self.removing: Set[str] = set()

    async def load(self) -> List[FavoriteMovieRef]:
        async with self._loading():
            try:
                profile = await self.session.current_profile()
            except CONTROLLER_ERRORS as e:
                self._fail(e)
            else:
                self.favorites = list(profile.favorite_movies)
        return self.favorites

    async def remove(self, ref: FavoriteMovieRef) -> bool:
        """Remove a favorite, then refetch the profile so the list reflects the write."""
        if ref.id in self.removing:
            return False

        user_id = self.session.user_id
        if user_id is None:
            self.error_message = 'Please login to remove favorites'
            return False

        try:
            movie_id = int(ref.id)
        except ValueError:
            movie_id = 0

        self.removing.add(ref.id)
        self.error_message = None
        try:
            await self.api.remove_favorite(user_id, movie_id)
        except CONTROLLER_ERRORS as e:
            self._fail(e, 'Failed to remove from favorites')
            return False
        finally:
            self.removing.discard(ref.id)

        try:
            profile = await self.session.profile_cache.refresh(user_id)
        except CONTROLLER_ERRORS as e:
            self._fail(e)
        else:
            self.favorites = list(profile.favorite_movies)
        return True
