# tests/conftest.py
"""
Global test bootstrap
- Runs async tests on the asyncio backend of the anyio plugin
- Wires a RestClient to the FakeBackend through httpx.MockTransport
- Exposes config, api, identity and session fixtures
"""

import httpx
import pytest

from aniconnect.services.session import SessionContext
from aniconnect.utils.backend_api import BackendAPI
from aniconnect.utils.config import AppConfig, BackendConfig, CatalogConfig, CognitoConfig
from aniconnect.utils.rest_client import RestClient
from fakes import BASE_URL, FakeBackend, FakeIdentityProvider


@pytest.fixture
def anyio_backend():
    return 'asyncio'


@pytest.fixture
def app_config() -> AppConfig:
    return AppConfig(environment='test',
                     log_level='DEBUG',
                     backend=BackendConfig(base_url=BASE_URL, timeout=5.0, image_base_url='https://img.test/w500'),
                     cognito=CognitoConfig(region='us-east-1', client_id='test-client', user_pool_id='us-east-1_test'),
                     catalog=CatalogConfig(home_genres={'Action': 28, 'Drama': 18}))


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def rest(backend, app_config) -> RestClient:
    return RestClient(app_config.backend, transport=httpx.MockTransport(backend))


@pytest.fixture
def api(rest) -> BackendAPI:
    return BackendAPI(rest)


@pytest.fixture
def identity() -> FakeIdentityProvider:
    return FakeIdentityProvider({'ada@example.com': ('secret', 'u1')})


@pytest.fixture
def session(identity, api, app_config) -> SessionContext:
    return SessionContext(identity, api, config=app_config)
