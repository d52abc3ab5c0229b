"""
Async REST client for the AniConnect backend built on httpx.
"""

import json
from typing import Any, Callable, Dict, Optional, TypeVar

import httpx

from .config import BackendConfig
from .logging_config import get_logger

logger = get_logger(__name__)

T = TypeVar('T')

SUCCESS_CODES = (200, 201)


class HttpError(Exception):
    """Base exception for REST client failures."""
    transport = False


class TransportError(HttpError):
    """No response was received (DNS failure, timeout, connection reset)."""
    transport = True


class HttpStatusError(HttpError):
    """A response was received with a non-success status code."""

    def __init__(self, code: int, body: str, path: str = ''):
        self.code = code
        self.body = body
        self.path = path
        super().__init__(f'HTTP {code} for {path or "request"}')


class DecodeError(HttpError):
    """The response body could not be decoded into the expected shape."""

    def __init__(self, message: str, raw: str):
        self.raw = raw
        super().__init__(message)


def decode_payload(raw: str, parser: Optional[Callable[[Any], T]] = None) -> Any:
    """
    Decode a JSON response body and optionally map it through a parser.

    Args:
        raw: Response text
        parser: Callable applied to the decoded JSON (e.g. ``Profile.from_dict``)

    Returns:
        Parsed value, or None for an empty body

    Raises:
        DecodeError: If the body is not JSON or the parser rejects its shape
    """
    if not raw.strip():
        payload = None
    else:
        try:
            payload = json.loads(raw)
        except json.JSONDecodeError as e:
            raise DecodeError(f'Malformed JSON response: {e}', raw)

    if parser is None:
        return payload

    try:
        return parser(payload)
    except (KeyError, TypeError, ValueError, AttributeError) as e:
        raise DecodeError(f'Unexpected response shape: {e!r}', raw)


class RestClient:
    """Thin JSON-over-HTTP client. Performs no retries; callers decide what to do on failure."""

    def __init__(self, config: BackendConfig, transport: Optional[httpx.AsyncBaseTransport] = None):
        """
        Initialize the REST client.

        Args:
            config: BackendConfig with base URL and request timeout
            transport: Optional httpx transport (used to inject a mock backend in tests)
        """
        self.config = config
        self.client = httpx.AsyncClient(base_url=config.base_url,
                                        timeout=httpx.Timeout(config.timeout),
                                        headers={'Accept': 'application/json'},
                                        transport=transport)

        logger.info(f'Initialized REST client for {config.base_url}')

    async def __aenter__(self) -> 'RestClient':
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the underlying connection pool."""
        await self.client.aclose()

    async def get(self, path: str, params: Optional[Dict[str, Any]] = None, parser: Optional[Callable[[Any], T]] = None) -> Any:
        """
        Issue a GET request and decode the JSON response.

        Args:
            path: Path relative to the backend base URL (e.g. '/movies/top')
            params: Optional query parameters
            parser: Optional callable mapping the decoded JSON to a typed value

        Returns:
            Decoded (and parsed) response body

        Raises:
            TransportError: If no response was received
            HttpStatusError: If the status code is not 200/201
            DecodeError: If the body cannot be decoded
        """
        return await self._request('GET', path, params=params, parser=parser)

    async def post(self, path: str, body: Any, parser: Optional[Callable[[Any], T]] = None) -> Any:
        """
        Issue a POST request with a JSON body and decode the JSON response.

        Args:
            path: Path relative to the backend base URL
            body: JSON-serializable request body
            parser: Optional callable mapping the decoded JSON to a typed value

        Returns:
            Decoded (and parsed) response body

        Raises:
            TransportError: If no response was received
            HttpStatusError: If the status code is not 200/201
            DecodeError: If the body cannot be decoded
        """
        return await self._request('POST', path, body=body, parser=parser)

    async def _request(self,
                       method: str,
                       path: str,
                       params: Optional[Dict[str, Any]] = None,
                       body: Any = None,
                       parser: Optional[Callable[[Any], T]] = None) -> Any:
        kwargs: Dict[str, Any] = {}
        if params:
            kwargs['params'] = params
        if method == 'POST':
            kwargs['content'] = json.dumps(body)
            kwargs['headers'] = {'Content-Type': 'application/json'}

        logger.debug(f'{method} {path} params={params}')

        try:
            response = await self.client.request(method, path, **kwargs)
        except httpx.TransportError as e:
            logger.warning(f'{method} {path} failed without a response: {e!r}')
            raise TransportError(f'{method} {path} failed: {e}') from e

        if response.status_code not in SUCCESS_CODES:
            logger.warning(f'{method} {path} returned HTTP {response.status_code}')
            raise HttpStatusError(response.status_code, response.text, path)

        try:
            return decode_payload(response.text, parser)
        except DecodeError as e:
            logger.error(f'Failed to decode {method} {path}: {e}. Raw response: {e.raw[:500]}')
            raise
