"""
Forum controller: list posts, compose a post about a movie, resolve author names.
"""

from typing import List, Optional

from ..models.core import Movie, Post
from ..utils.logging_config import get_logger
from .base import CONTROLLER_ERRORS, ScreenController

logger = get_logger(__name__)

UNKNOWN_AUTHOR = 'Unknown User'


class ForumController(ScreenController):

    def __init__(self, session):
        super().__init__(session)
        self.posts: List[Post] = []
        self.search_results: List[Movie] = []
        self.is_searching = False
        self.is_posting = False

    async def load_posts(self) -> List[Post]:
        async with self._loading():
            try:
                self.posts = await self.api.list_posts()
            except CONTROLLER_ERRORS as e:
                self._fail(e)
        return self.posts

    async def search_movies(self, query: str) -> List[Movie]:
        """Movie search for the post composer."""
        query = query.strip()
        if not query:
            return self.search_results

        self.is_searching = True
        self.search_results = []
        self.error_message = None
        try:
            self.search_results = await self.api.search_movies(query)
        except CONTROLLER_ERRORS as e:
            self._fail(e)
        finally:
            self.is_searching = False
        return self.search_results

    def can_post(self, movie: Optional[Movie], content: str) -> bool:
        return movie is not None and bool(content.strip()) and not self.is_posting

    async def create_post(self, movie: Optional[Movie], content: str) -> bool:
        """
        Create a post about a movie, then reload the post list.

        The reload only starts after the create request has completed.

        Returns:
            True if the post was created
        """
        if not self.can_post(movie, content):
            return False

        self.is_posting = True
        self.error_message = None
        try:
            user_id = self.session.require_user_id()
            await self.api.create_post(user_id, movie.to_post_movie(), content)
        except CONTROLLER_ERRORS as e:
            self._fail(e, 'Failed to create post')
            return False
        finally:
            self.is_posting = False

        logger.info(f'User {user_id} posted about movie {movie.id}')
        await self.load_posts()
        return True

    async def author_name(self, uid: str) -> str:
        """Display name of a post's author, resolved through the profile cache."""
        try:
            profile = await self.session.profile_cache.get_profile(uid)
        except CONTROLLER_ERRORS as e:
            logger.warning(f'Error fetching author {uid}: {e}')
            return UNKNOWN_AUTHOR
        return profile.fullname
