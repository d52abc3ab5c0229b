"""
AI chat and structured movie recommendation controllers.
"""

import asyncio
from dataclasses import dataclass, field
from typing import List, Optional

from ..models.core import ChatMessage, Movie
from ..utils.logging_config import get_logger
from ..utils.rest_client import HttpError
from .base import CONTROLLER_ERRORS, ScreenController

logger = get_logger(__name__)

NO_MOVIES_FOUND = 'No movies found'


class ChatController(ScreenController):
    """Free-form chat. The backend owns the history; every send re-fetches it in full."""

    def __init__(self, session):
        super().__init__(session)
        self.messages: List[ChatMessage] = []
        self.draft = ''

    @property
    def can_send(self) -> bool:
        return bool(self.draft.strip()) and not self.is_loading

    async def load_history(self) -> List[ChatMessage]:
        user_id = self.session.user_id
        if user_id is None:
            return self.messages
        try:
            self.messages = await self.api.chat_history(user_id)
        except CONTROLLER_ERRORS as e:
            self._fail(e)
        return self.messages

    async def send_message(self, text: Optional[str] = None) -> bool:
        """
        Send a message, then reload the full history once the send has completed.

        Args:
            text: Message to send, defaults to the current draft

        Returns:
            True if the backend accepted the message
        """
        message = self.draft if text is None else text
        if not message.strip() or self.is_loading:
            return False

        user_id = self.session.user_id
        if user_id is None:
            return False

        self.draft = ''
        async with self._loading():
            try:
                await self.api.continue_chat(user_id, message)
            except CONTROLLER_ERRORS as e:
                self._fail(e)
                return False

        await self.load_history()
        return True


@dataclass
class RecommendationResult:
    """Outcome of one recommendation request after every title search has settled."""
    titles: List[str] = field(default_factory=list)
    movies: List[Movie] = field(default_factory=list)
    unmatched_titles: List[str] = field(default_factory=list)  # searched fine, no results
    failed_titles: List[str] = field(default_factory=list)  # search request failed


class RecommendationController(ScreenController):
    """Asks the backend for recommended titles and resolves each one to a catalog movie."""

    def __init__(self, session):
        super().__init__(session)
        self.feeling = ''
        self.movie_type = ''
        self.genre = ''
        self.result: Optional[RecommendationResult] = None

    @property
    def is_input_valid(self) -> bool:
        return all(value.strip() for value in (self.feeling, self.movie_type, self.genre))

    @property
    def recommended_movies(self) -> List[Movie]:
        return self.result.movies if self.result else []

    def build_prompt(self) -> str:
        return (f'Feeling: {self.feeling}\n'
                f'Movie Type: {self.movie_type}\n'
                f'Genre: {self.genre}\n'
                'Please recommend movies based on these preferences.')

    async def get_recommendations(self) -> Optional[RecommendationResult]:
        """
        Request recommended titles and search for all of them concurrently.

        Returns:
            The aggregated result, or None if the request was not made or failed
        """
        if self.is_loading or not self.is_input_valid:
            return None

        user_id = self.session.user_id
        if user_id is None:
            return None

        async with self._loading():
            try:
                titles = await self.api.recommend(user_id, self.build_prompt())
            except CONTROLLER_ERRORS as e:
                self._fail(e)
                return None

            self.result = await self.resolve_titles(titles)

        if not self.result.movies:
            self.error_message = NO_MOVIES_FOUND
        return self.result

    async def resolve_titles(self, titles: List[str]) -> RecommendationResult:
        """
        Search each title concurrently and keep the first hit per title.

        Returns only after every search has settled; results keep the order of ``titles``.
        """
        result = RecommendationResult(titles=list(titles))
        if not titles:
            return result

        searches = [self.api.search_movies(title) for title in titles]
        outcomes = await asyncio.gather(*searches, return_exceptions=True)

        for title, outcome in zip(titles, outcomes):
            if isinstance(outcome, HttpError):
                logger.warning(f'Search for recommended title {title!r} failed: {outcome}')
                result.failed_titles.append(title)
            elif isinstance(outcome, BaseException):
                raise outcome
            elif not outcome:
                result.unmatched_titles.append(title)
            else:
                result.movies.append(outcome[0])

        logger.info(f'Resolved {len(result.movies)}/{len(titles)} recommended titles '
                    f'({len(result.unmatched_titles)} unmatched, {len(result.failed_titles)} failed)')
        return result
