"""
Identity provider adapters: session state, sign-in/sign-up/sign-out and auth change notification.
"""

import asyncio
import inspect
from typing import Awaitable, Callable, Dict, List, Optional, Union

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from .config import CognitoConfig
from .logging_config import get_logger

logger = get_logger(__name__)

AuthListener = Callable[[Optional[str]], Union[None, Awaitable[None]]]


class AuthError(Exception):
    """Custom exception for identity provider errors."""
    pass


class IdentityProvider:
    """
    Base adapter over an external identity provider.

    Subclasses implement ``_sign_in``, ``_sign_up`` and ``_sign_out`` against the real provider
    and return the user id. This class owns the single active session and notifies listeners.
    """

    def __init__(self):
        self._user_id: Optional[str] = None
        self._email: Optional[str] = None
        self._listeners: List[AuthListener] = []

    def current_user_id(self) -> Optional[str]:
        return self._user_id

    def current_user_email(self) -> Optional[str]:
        return self._email

    async def on_auth_state_change(self, listener: AuthListener) -> Callable[[], None]:
        """
        Subscribe to authentication state changes.

        The listener is invoked once immediately with the current user id and then once per
        later sign-in or sign-out. It may be a plain function or a coroutine function.

        Args:
            listener: Callable receiving the user id, or None when signed out

        Returns:
            Function that removes the subscription
        """
        self._listeners.append(listener)
        await self._invoke(listener, self._user_id)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    async def sign_in(self, email: str, password: str) -> str:
        """
        Sign in with email and password.

        Returns:
            The authenticated user id

        Raises:
            AuthError: If the provider rejects the credentials
        """
        user_id = await self._sign_in(email, password)
        await self._set_session(user_id, email)
        logger.info(f'Signed in user {user_id}')
        return user_id

    async def sign_up(self, email: str, password: str) -> str:
        """
        Register a new account and start a session for it.

        Returns:
            The new user id

        Raises:
            AuthError: If registration fails
        """
        user_id = await self._sign_up(email, password)
        await self._set_session(user_id, email)
        logger.info(f'Registered user {user_id}')
        return user_id

    async def sign_out(self) -> None:
        """
        End the current session. The session is dropped locally even if the provider call fails.

        Raises:
            AuthError: If the provider fails to revoke the session
        """
        if self._user_id is None:
            return

        user_id = self._user_id
        try:
            await self._sign_out()
        finally:
            await self._set_session(None, None)
            logger.info(f'Signed out user {user_id}')

    async def _set_session(self, user_id: Optional[str], email: Optional[str]) -> None:
        self._user_id = user_id
        self._email = email
        for listener in list(self._listeners):
            await self._invoke(listener, user_id)

    async def _invoke(self, listener: AuthListener, user_id: Optional[str]) -> None:
        result = listener(user_id)
        if inspect.isawaitable(result):
            await result

    async def _sign_in(self, email: str, password: str) -> str:
        raise NotImplementedError

    async def _sign_up(self, email: str, password: str) -> str:
        raise NotImplementedError

    async def _sign_out(self) -> None:
        raise NotImplementedError


class CognitoIdentityProvider(IdentityProvider):
    """Identity provider backed by an Amazon Cognito user pool app client."""

    def __init__(self, config: CognitoConfig, client=None):
        """
        Initialize the Cognito adapter.

        Args:
            config: CognitoConfig with region and app client id
            client: Optional pre-built ``cognito-idp`` client
        """
        super().__init__()
        self.config = config
        self.client = client or boto3.client('cognito-idp', region_name=config.region)
        self._tokens: Dict[str, str] = {}

        logger.info(f'Initialized Cognito identity provider for client: {config.client_id}')

    async def _call(self, operation: str, **params) -> dict:
        """Run a blocking cognito-idp operation in a worker thread and map failures to AuthError."""
        try:
            return await asyncio.to_thread(getattr(self.client, operation), **params)
        except ClientError as e:
            error = e.response.get('Error', {})
            message = error.get('Message') or error.get('Code') or str(e)
            logger.warning(f'Cognito {operation} rejected: {error.get("Code")}: {message}')
            raise AuthError(message) from e
        except BotoCoreError as e:
            logger.error(f'Cognito {operation} failed: {e}')
            raise AuthError(f'Identity provider unavailable: {e}') from e

    async def _sign_in(self, email: str, password: str) -> str:
        response = await self._call('initiate_auth',
                                    AuthFlow='USER_PASSWORD_AUTH',
                                    ClientId=self.config.client_id,
                                    AuthParameters={
                                        'USERNAME': email,
                                        'PASSWORD': password
                                    })

        result = response.get('AuthenticationResult')
        if not result:
            # MFA or password-change challenges are not supported by this client
            raise AuthError(f'Unsupported sign-in challenge: {response.get("ChallengeName", "unknown")}')

        self._tokens = {key: value for key, value in result.items() if key.endswith('Token')}

        user = await self._call('get_user', AccessToken=self._tokens['AccessToken'])
        attributes = {attr['Name']: attr['Value'] for attr in user.get('UserAttributes', [])}
        return attributes.get('sub') or user['Username']

    async def _sign_up(self, email: str, password: str) -> str:
        response = await self._call('sign_up',
                                    ClientId=self.config.client_id,
                                    Username=email,
                                    Password=password,
                                    UserAttributes=[{
                                        'Name': 'email',
                                        'Value': email
                                    }])
        logger.debug(f'Cognito sign_up created {response["UserSub"]} (confirmed: {response.get("UserConfirmed")})')

        # Pools that require verification reject sign-in until the user confirms the account
        if not response.get('UserConfirmed'):
            logger.info(f'Registered unconfirmed user {response["UserSub"]}')
            raise AuthError('Account created. Please confirm your email address, then sign in.')

        return await self._sign_in(email, password)

    async def _sign_out(self) -> None:
        access_token = self._tokens.get('AccessToken')
        self._tokens = {}
        if access_token:
            await self._call('global_sign_out', AccessToken=access_token)
