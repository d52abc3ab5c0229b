"""
Core data models for the AniConnect client.

Records are decoded from backend JSON with ``from_dict``. Missing required keys raise
``KeyError`` and wrong shapes raise ``TypeError``/``ValueError``; the REST client turns
those into a ``DecodeError`` carrying the raw payload.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from ..utils.config import config
from ..utils.timestamp_utils import format_date, format_release_date, format_time


def image_url(path: Optional[str], base_url: Optional[str] = None) -> Optional[str]:
    """Build a full poster/backdrop URL from a TMDB image path."""
    if not path:
        return None
    base_url = base_url or config.backend.image_base_url
    return f'{base_url.rstrip("/")}/{path.lstrip("/")}'


def _require_mapping(data: Any, name: str) -> Dict[str, Any]:
    if not isinstance(data, dict):
        raise TypeError(f'{name} must be a JSON object, got {type(data).__name__}')
    return data


@dataclass
class FavoriteMovieRef:
    """A movie reference stored on a user's profile."""
    id: str  # TMDB movie id, stored as a string by the backend
    title: str
    poster_path: str
    release_date: str
    rating: float
    movie_id: Optional[str] = None  # Backend-internal document id

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'FavoriteMovieRef':
        data = _require_mapping(data, 'FavoriteMovieRef')
        return cls(id=str(data['id']),
                   title=data['title'],
                   poster_path=data.get('poster_path') or '',
                   release_date=data.get('release_date') or '',
                   rating=float(data.get('rating') or 0.0),
                   movie_id=data.get('_id'))

    @property
    def poster_url(self) -> Optional[str]:
        return image_url(self.poster_path)

    @property
    def formatted_rating(self) -> str:
        return f'{self.rating:.1f}'

    def to_movie(self) -> 'Movie':
        """Expand into a minimal Movie so detail screens can render a favorite."""
        try:
            movie_id = int(self.id)
        except ValueError:
            movie_id = 0
        return Movie(id=movie_id,
                     title=self.title,
                     original_title=self.title,
                     overview='',
                     poster_path=self.poster_path,
                     backdrop_path=None,
                     release_date=self.release_date,
                     vote_average=self.rating,
                     vote_count=0,
                     popularity=0.0,
                     genre_ids=[],
                     adult=False,
                     original_language='en',
                     video=False)


@dataclass
class Profile:
    """Server-side user profile keyed by the identity provider's user id."""
    id: str
    uid: str
    email: str
    fullname: str
    age: int
    preferences: str
    gender: str
    favorite_movies: List[FavoriteMovieRef]
    created_at: str

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Profile':
        data = _require_mapping(data, 'Profile')
        favorites = data.get('favoriteMovies') or []
        if not isinstance(favorites, list):
            raise TypeError('favoriteMovies must be a list')
        return cls(id=data['_id'],
                   uid=data['uid'],
                   email=data.get('email') or '',
                   fullname=data['fullname'],
                   age=int(data['age']),
                   preferences=data.get('preferences') or '',
                   gender=data.get('gender') or '',
                   favorite_movies=[FavoriteMovieRef.from_dict(item) for item in favorites],
                   created_at=data.get('createdAt') or '')

    @property
    def preference_tags(self) -> List[str]:
        return [tag.strip() for tag in self.preferences.split(',') if tag.strip()]

    @property
    def formatted_date(self) -> str:
        return format_date(self.created_at)

    def is_favorite(self, movie_id: Any) -> bool:
        """Check whether a movie id (int or str) is among the favorites."""
        return any(ref.id == str(movie_id) for ref in self.favorite_movies)


@dataclass
class ProfileDraft:
    """Profile-completion form contents."""
    fullname: str = ''
    age: str = ''
    preferences: str = ''
    gender: str = ''

    @classmethod
    def from_profile(cls, profile: Profile) -> 'ProfileDraft':
        return cls(fullname=profile.fullname,
                   age=str(profile.age),
                   preferences=profile.preferences,
                   gender=profile.gender)

    def is_valid(self) -> bool:
        fields = (self.fullname, self.age, self.preferences, self.gender)
        if any(not value.strip() for value in fields):
            return False
        return self.age.strip().isdigit()

    def to_payload(self, uid: str, email: Optional[str]) -> Dict[str, Any]:
        """Build the create-profile request body."""
        return {
            'uid': uid,
            'email': email or '',
            'fullName': self.fullname.strip(),
            'age': int(self.age.strip()),
            'preferences': self.preferences.strip(),
            'gender': self.gender.strip(),
            'favoriteMovies': []
        }


@dataclass
class PostMovie:
    """Snapshot of a movie embedded in a forum post."""
    id: str
    title: str
    poster_path: str
    release_date: str
    rating: float

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'PostMovie':
        data = _require_mapping(data, 'PostMovie')
        return cls(id=str(data['id']),
                   title=data['title'],
                   poster_path=data.get('poster_path') or '',
                   release_date=data.get('release_date') or '',
                   rating=float(data.get('rating') or 0.0))

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'title': self.title,
            'poster_path': self.poster_path,
            'release_date': self.release_date,
            'rating': self.rating
        }

    @property
    def poster_url(self) -> Optional[str]:
        return image_url(self.poster_path)

    @property
    def formatted_rating(self) -> str:
        return f'{self.rating:.1f}'


@dataclass
class Movie:
    """Read-only catalog movie as returned by the backend (TMDB shape)."""
    id: int
    title: str
    original_title: str
    overview: str
    poster_path: Optional[str]
    backdrop_path: Optional[str]
    release_date: str
    vote_average: float
    vote_count: int
    popularity: float
    genre_ids: List[int] = field(default_factory=list)
    adult: bool = False
    original_language: str = ''
    video: bool = False

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Movie':
        data = _require_mapping(data, 'Movie')
        return cls(id=int(data['id']),
                   title=data['title'],
                   original_title=data.get('original_title') or data['title'],
                   overview=data.get('overview') or '',
                   poster_path=data.get('poster_path'),
                   backdrop_path=data.get('backdrop_path'),
                   release_date=data.get('release_date') or '',
                   vote_average=float(data.get('vote_average') or 0.0),
                   vote_count=int(data.get('vote_count') or 0),
                   popularity=float(data.get('popularity') or 0.0),
                   genre_ids=[int(genre_id) for genre_id in data.get('genre_ids') or []],
                   adult=bool(data.get('adult', False)),
                   original_language=data.get('original_language') or '',
                   video=bool(data.get('video', False)))

    @property
    def poster_url(self) -> Optional[str]:
        return image_url(self.poster_path)

    @property
    def backdrop_url(self) -> Optional[str]:
        return image_url(self.backdrop_path)

    @property
    def formatted_rating(self) -> str:
        return f'{self.vote_average:.1f}'

    @property
    def formatted_release_date(self) -> str:
        return format_release_date(self.release_date)

    def to_post_movie(self) -> PostMovie:
        return PostMovie(id=str(self.id),
                         title=self.title,
                         poster_path=self.poster_path or '',
                         release_date=self.release_date,
                         rating=self.vote_average)


@dataclass
class Post:
    """Forum post about a movie."""
    id: str
    uid: str
    movie: PostMovie
    content: str
    created_at: str

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Post':
        data = _require_mapping(data, 'Post')
        return cls(id=data['_id'],
                   uid=data['uid'],
                   movie=PostMovie.from_dict(data['movie']),
                   content=data['content'],
                   created_at=data.get('createdAt') or '')

    @property
    def formatted_date(self) -> str:
        return format_date(self.created_at, long_month=False)


@dataclass
class ChatMessage:
    """A single message in a user's AI chat history."""
    id: str
    role: str  # 'user' or 'assistant'
    content: str
    timestamp: str

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ChatMessage':
        data = _require_mapping(data, 'ChatMessage')
        return cls(id=data['_id'],
                   role=data['role'],
                   content=data['content'],
                   timestamp=data.get('timestamp') or '')

    @property
    def is_user(self) -> bool:
        return self.role == 'user'

    @property
    def formatted_time(self) -> str:
        return format_time(self.timestamp)


@dataclass
class ChatHistory:
    """Full chat history for one user, oldest message first."""
    messages: List[ChatMessage]

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ChatHistory':
        data = _require_mapping(data, 'ChatHistory')
        messages = data['messages']
        if not isinstance(messages, list):
            raise TypeError('messages must be a list')
        return cls(messages=[ChatMessage.from_dict(item) for item in messages])
