"""
Movie catalog controller: home sections, "see more" grids and search.
"""

from enum import Enum
from typing import Dict, List, Optional

from ..models.core import Movie
from ..utils.logging_config import get_logger
from ..utils.rest_client import HttpError
from .base import ScreenController

logger = get_logger(__name__)

TOP_SECTION = 'Top Movies'


class GridKind(Enum):
    SEARCH = 'search'
    GENRE = 'genre'
    TOP = 'top'


class CatalogController(ScreenController):
    """Owns the movie lists shown on the home screen and in grid sheets."""

    def __init__(self, session):
        super().__init__(session)
        self.sections: Dict[str, List[Movie]] = {}
        self.grid_movies: List[Movie] = []
        self.grid_title = ''
        self.grid_kind = GridKind.TOP

    async def load_home(self) -> Dict[str, List[Movie]]:
        """
        Fetch the top movies and each configured genre section.

        Sections load independently: a failing section is logged and left empty while the
        others still render.
        """
        sources = [(TOP_SECTION, None)]
        sources.extend(self.session.config.catalog.home_genres.items())

        async with self._loading():
            for title, genre_id in sources:
                try:
                    if genre_id is None:
                        movies = await self.api.top_movies()
                    else:
                        movies = await self.api.movies_by_genre(genre_id)
                except HttpError as e:
                    logger.error(f'Error fetching {title} movies: {e}')
                    self.error_message = f'Some sections could not be loaded ({title})'
                    continue

                logger.info(f'Fetched {len(movies)} movies for {title}')
                self.sections[title] = movies
        return self.sections

    async def load_grid(self, title: str, genre_id: Optional[int] = None, search_query: Optional[str] = None) -> List[Movie]:
        """
        Load a full grid: search results if a query is given, else a genre, else top movies.
        """
        query = (search_query or '').strip()
        if query:
            self.grid_kind = GridKind.SEARCH
            self.grid_title = f"Results for '{query}'"
        elif genre_id is not None:
            self.grid_kind = GridKind.GENRE
            self.grid_title = title
        else:
            self.grid_kind = GridKind.TOP
            self.grid_title = title

        async with self._loading():
            try:
                if self.grid_kind == GridKind.SEARCH:
                    self.grid_movies = await self.api.search_movies(query)
                elif self.grid_kind == GridKind.GENRE:
                    self.grid_movies = await self.api.movies_by_genre(genre_id)
                else:
                    self.grid_movies = await self.api.top_movies()
            except HttpError as e:
                self.grid_movies = []
                self._fail(e)
        return self.grid_movies

    async def search(self, text: str) -> List[Movie]:
        """Search from the home search bar; blank input is ignored."""
        query = text.strip()
        if not query:
            return self.grid_movies
        return await self.load_grid('Search Results', search_query=query)
