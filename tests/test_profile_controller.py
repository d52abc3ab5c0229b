# tests/test_profile_controller.py

import json

import httpx
import pytest

from aniconnect.models.core import ProfileDraft
from aniconnect.services.profile import ProfileController
from fakes import profile_json


async def _signed_in(session, identity):
    await session.start()
    await identity.sign_in('ada@example.com', 'secret')


@pytest.mark.anyio
async def test_load_uses_cached_profile(session, identity, backend):
    backend.add('GET', '/users/users/u1', json_body=profile_json('u1'))
    await _signed_in(session, identity)
    controller = ProfileController(session)

    profile = await controller.load()

    assert profile.fullname == 'Ada Lovelace'
    assert profile.preference_tags == ['sci-fi', 'thrillers']
    # the sign-in profile check already populated the cache
    assert backend.count('GET', '/users/users/u1') == 1
    assert controller.is_loading is False


@pytest.mark.anyio
async def test_load_without_profile_routes_to_completion(session, identity, backend):
    backend.add('GET', '/users/users/u1', status=404, json_body={})
    await _signed_in(session, identity)
    session.needs_profile_completion = False
    controller = ProfileController(session)

    assert await controller.load() is None

    assert controller.needs_profile_completion is True
    assert controller.error_message == 'Please complete your profile'


@pytest.mark.anyio
async def test_load_signed_out_shows_message(session):
    controller = ProfileController(session)

    assert await controller.load() is None

    assert controller.error_message == 'No user is signed in'


@pytest.mark.anyio
async def test_complete_profile_posts_and_refreshes(session, identity, backend):
    created = {}

    def get_profile(request):
        if not created:
            return httpx.Response(404, json={'message': 'User not found'})
        return httpx.Response(200, json=profile_json('u1', fullname=created['fullName']))

    def create_profile(request):
        created.update(json.loads(request.content))
        return httpx.Response(201, json={'message': 'created'})

    backend.add('GET', '/users/users/u1', handler=get_profile)
    backend.add('POST', '/users/users', handler=create_profile)
    await _signed_in(session, identity)
    assert session.needs_profile_completion is True

    controller = ProfileController(session)
    draft = ProfileDraft(fullname=' Ada King ', age='28', preferences='sci-fi', gender='female')

    assert await controller.complete_profile(draft) is True

    body = backend.calls[-2]['json']
    assert body == {
        'uid': 'u1',
        'email': 'ada@example.com',
        'fullName': 'Ada King',
        'age': 28,
        'preferences': 'sci-fi',
        'gender': 'female',
        'favoriteMovies': []
    }
    assert session.needs_profile_completion is False
    assert controller.profile.fullname == 'Ada King'


@pytest.mark.anyio
async def test_complete_profile_rejects_invalid_form(session, identity, backend):
    await _signed_in(session, identity)
    controller = ProfileController(session)

    ok = await controller.complete_profile(ProfileDraft(fullname='Ada', age='twenty', preferences='x', gender='f'))

    assert ok is False
    assert backend.count('POST', '/users/users') == 0
    assert controller.error_message


@pytest.mark.anyio
async def test_complete_profile_shows_server_message(session, identity, backend):
    backend.add('GET', '/users/users/u1', status=404, json_body={})
    backend.add('POST', '/users/users', status=400, json_body={'message': 'Age must be positive'})
    await _signed_in(session, identity)
    controller = ProfileController(session)

    ok = await controller.complete_profile(ProfileDraft(fullname='Ada', age='0', preferences='x', gender='f'))

    assert ok is False
    assert controller.error_message == 'Age must be positive'
    assert session.needs_profile_completion is True


@pytest.mark.anyio
async def test_sign_out_clears_profile_and_cache(session, identity, backend):
    backend.add('GET', '/users/users/u1', json_body=profile_json('u1'))
    await _signed_in(session, identity)
    controller = ProfileController(session)
    await controller.load()

    assert await controller.sign_out() is True

    assert controller.profile is None
    assert session.user_id is None
    assert len(session.profile_cache) == 0
