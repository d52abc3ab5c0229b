# tests/test_catalog.py

import pytest

from aniconnect.services.catalog import TOP_SECTION, CatalogController, GridKind
from fakes import movie_json


@pytest.mark.anyio
async def test_home_loads_top_and_configured_genres(session, backend):
    backend.add('GET', '/movies/top', json_body=[movie_json(1, 'Top One')])
    backend.add('GET', '/movies/genre/28', json_body=[movie_json(2, 'Heat')])
    backend.add('GET', '/movies/genre/18', json_body=[movie_json(3, 'Drama One')])
    catalog = CatalogController(session)

    sections = await catalog.load_home()

    assert list(sections) == [TOP_SECTION, 'Action', 'Drama']
    assert sections['Action'][0].title == 'Heat'
    assert catalog.error_message is None
    assert catalog.is_loading is False


@pytest.mark.anyio
async def test_failing_section_does_not_block_others(session, backend):
    backend.add('GET', '/movies/top', json_body=[movie_json(1, 'Top One')])
    backend.add('GET', '/movies/genre/28', status=500, text='boom')
    backend.add('GET', '/movies/genre/18', json_body=[movie_json(3, 'Drama One')])
    catalog = CatalogController(session)

    sections = await catalog.load_home()

    assert set(sections) == {TOP_SECTION, 'Drama'}
    assert 'Action' in catalog.error_message


@pytest.mark.anyio
async def test_genre_grid(session, backend):
    backend.add('GET', '/movies/genre/28', json_body=[movie_json(2, 'Heat')])
    catalog = CatalogController(session)

    movies = await catalog.load_grid('Action', genre_id=28)

    assert catalog.grid_kind == GridKind.GENRE
    assert catalog.grid_title == 'Action'
    assert [movie.id for movie in movies] == [2]


@pytest.mark.anyio
async def test_search_grid_title_quotes_query(session, backend):
    backend.add('GET', '/movies/search', params={'query': 'alien'}, json_body=[movie_json(348, 'Alien')])
    catalog = CatalogController(session)

    movies = await catalog.search('  alien ')

    assert catalog.grid_kind == GridKind.SEARCH
    assert catalog.grid_title == "Results for 'alien'"
    assert movies[0].poster_url.endswith('/348.jpg')
    assert backend.calls[-1]['params'] == {'query': 'alien'}


@pytest.mark.anyio
async def test_blank_search_is_ignored(session, backend):
    catalog = CatalogController(session)

    assert await catalog.search('   ') == []
    assert backend.calls == []


@pytest.mark.anyio
async def test_grid_failure_clears_movies(session, backend):
    backend.add('GET', '/movies/top', json_body=[movie_json(1, 'Top One')])
    catalog = CatalogController(session)
    await catalog.load_grid('Top Movies')

    backend.routes.clear()
    backend.add('GET', '/movies/top', status=502, text='bad gateway')
    movies = await catalog.load_grid('Top Movies')

    assert movies == []
    assert catalog.grid_kind == GridKind.TOP
    assert catalog.error_message == 'Server error: 502'
