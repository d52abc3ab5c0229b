# tests/test_models.py

import pytest

from aniconnect.models.core import ChatHistory, Movie, Post, Profile, ProfileDraft, image_url
from aniconnect.utils.config import _parse_genres
from aniconnect.utils.json_utils import clean_json_response, parse_title_list
from aniconnect.utils.timestamp_utils import format_date, format_release_date, format_time, parse_timestamp
from fakes import favorite_json, message_json, movie_json, profile_json


# ─────────────────────────────────────────────────────────────
# Decoding
# ─────────────────────────────────────────────────────────────

def test_profile_decodes_backend_keys():
    profile = Profile.from_dict(profile_json('u1', favorites=[favorite_json(27205, 'Inception')]))

    assert profile.id == 'doc-u1'
    assert profile.fullname == 'Ada Lovelace'
    assert profile.formatted_date == 'January 12, 2025'
    assert profile.is_favorite(27205) and profile.is_favorite('27205')
    assert not profile.is_favorite(155)
    assert profile.favorite_movies[0].movie_id == 'fav-27205'


def test_profile_missing_required_key_raises():
    data = profile_json('u1')
    del data['fullname']

    with pytest.raises(KeyError):
        Profile.from_dict(data)


def test_movie_defaults_and_formatting():
    movie = Movie.from_dict({'id': 7, 'title': 'Heat', 'vote_average': 8.44, 'release_date': '1995-12-15'})

    assert movie.original_title == 'Heat'
    assert movie.genre_ids == []
    assert movie.poster_url is None
    assert movie.formatted_rating == '8.4'
    assert movie.formatted_release_date == 'December 15, 1995'


def test_movie_to_post_movie_snapshot():
    snapshot = Movie.from_dict(movie_json(27205, 'Inception')).to_post_movie()

    assert snapshot.to_dict() == {
        'id': '27205',
        'title': 'Inception',
        'poster_path': '/27205.jpg',
        'release_date': '2010-07-16',
        'rating': 8.4
    }


def test_post_decodes_embedded_movie():
    post = Post.from_dict({
        '_id': 'p1',
        'uid': 'u1',
        'movie': favorite_json(155, 'The Dark Knight'),
        'content': 'why so serious',
        'createdAt': '2025-03-09T08:00:00Z'
    })

    assert post.movie.title == 'The Dark Knight'
    assert post.formatted_date == 'Mar 9, 2025'


def test_chat_history_requires_message_list():
    history = ChatHistory.from_dict({'messages': [message_json('m1', 'assistant', 'hello')]})

    assert history.messages[0].is_user is False
    with pytest.raises(TypeError):
        ChatHistory.from_dict({'messages': 'hello'})
    with pytest.raises(TypeError):
        ChatHistory.from_dict(['hello'])


def test_image_url_joins_paths():
    assert image_url('/abc.jpg', 'https://img.test/w500/') == 'https://img.test/w500/abc.jpg'
    assert image_url('', 'https://img.test/w500') is None


# ─────────────────────────────────────────────────────────────
# Profile form
# ─────────────────────────────────────────────────────────────

@pytest.mark.parametrize('age, valid', [('28', True), (' 28 ', True), ('', False), ('abc', False), ('-1', False)])
def test_profile_draft_age_validation(age, valid):
    draft = ProfileDraft(fullname='Ada', age=age, preferences='sci-fi', gender='female')

    assert draft.is_valid() is valid


def test_profile_draft_round_trips_existing_profile():
    draft = ProfileDraft.from_profile(Profile.from_dict(profile_json('u1')))

    assert draft.is_valid()
    assert draft.to_payload('u1', None)['email'] == ''
    assert draft.to_payload('u1', 'a@b.c')['fullName'] == 'Ada Lovelace'


# ─────────────────────────────────────────────────────────────
# Utilities
# ─────────────────────────────────────────────────────────────

def test_parse_genres_keeps_order_and_skips_garbage():
    assert list(_parse_genres('Action:28, Drama:18,bogus,Science Fiction:878').items()) == [
        ('Action', 28),
        ('Drama', 18),
        ('Science Fiction', 878),
    ]


def test_timestamps():
    assert parse_timestamp('2025-01-12T18:30:00.000Z').hour == 18
    assert parse_timestamp('not a date') is None
    assert format_time('2025-01-12T18:05:00Z') == '18:05'
    assert format_time(None) == ''
    assert format_date('garbage') == 'garbage'
    assert format_release_date('2010-07-16') == 'July 16, 2010'
    assert format_release_date('2010') == '2010'


def test_title_list_parsing():
    assert clean_json_response('```json\n["A"]\n```') == '["A"]'
    assert parse_title_list([' Heat ', '', 'Alien']) == ['Heat', 'Alien']
    assert parse_title_list('```\n["Heat"]\n```') == ['Heat']
    with pytest.raises(ValueError):
        parse_title_list({'titles': []})
    with pytest.raises(ValueError):
        parse_title_list([1, 2])
