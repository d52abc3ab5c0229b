"""
Typed wrappers for every AniConnect backend endpoint.
"""

from typing import Any, Dict, List
from urllib.parse import quote

from ..models.core import ChatHistory, ChatMessage, Movie, Post, PostMovie, Profile
from .json_utils import parse_title_list
from .logging_config import get_logger
from .rest_client import RestClient

logger = get_logger(__name__)


def _movie_list(payload: Any) -> List[Movie]:
    if not isinstance(payload, list):
        raise TypeError(f'Expected a list of movies, got {type(payload).__name__}')
    return [Movie.from_dict(item) for item in payload]


def _post_list(payload: Any) -> List[Post]:
    if not isinstance(payload, list):
        raise TypeError(f'Expected a list of posts, got {type(payload).__name__}')
    return [Post.from_dict(item) for item in payload]


class BackendAPI:
    """Backend REST surface used by the session layer and screen controllers."""

    def __init__(self, rest: RestClient):
        self.rest = rest

    async def aclose(self) -> None:
        await self.rest.aclose()

    # Users

    async def get_profile(self, uid: str) -> Profile:
        return await self.rest.get(f'/users/users/{quote(uid, safe="")}', parser=Profile.from_dict)

    async def create_profile(self, payload: Dict[str, Any]) -> Any:
        return await self.rest.post('/users/users', payload)

    # Movies

    async def top_movies(self) -> List[Movie]:
        return await self.rest.get('/movies/top', parser=_movie_list)

    async def movies_by_genre(self, genre_id: int) -> List[Movie]:
        return await self.rest.get(f'/movies/genre/{genre_id}', parser=_movie_list)

    async def search_movies(self, query: str) -> List[Movie]:
        return await self.rest.get('/movies/search', params={'query': query}, parser=_movie_list)

    async def add_favorite(self, uid: str, movie_id: int) -> Any:
        return await self.rest.post('/movies/addFav', {'uid': uid, 'movieId': movie_id})

    async def remove_favorite(self, uid: str, movie_id: int) -> Any:
        return await self.rest.post('/movies/removeFav', {'uid': uid, 'movieId': movie_id})

    # Forum

    async def list_posts(self) -> List[Post]:
        return await self.rest.get('/posts/posts', parser=_post_list)

    async def create_post(self, uid: str, movie: PostMovie, content: str) -> Any:
        return await self.rest.post('/posts/posts', {'uid': uid, 'movie': movie.to_dict(), 'content': content})

    # Chat

    async def chat_history(self, uid: str) -> List[ChatMessage]:
        history = await self.rest.get(f'/chat/history/{quote(uid, safe="")}', parser=ChatHistory.from_dict)
        return history.messages

    async def continue_chat(self, uid: str, message: str) -> Any:
        return await self.rest.post('/chat/continue', {'uid': uid, 'message': message})

    async def recommend(self, uid: str, prompt: str) -> List[str]:
        titles = await self.rest.post('/chat/recommend', {'uid': uid, 'message': prompt}, parser=parse_title_list)
        logger.debug(f'Recommend returned {len(titles)} titles for user {uid}')
        return titles
