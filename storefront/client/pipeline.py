"""Outgoing request pipeline for storefront API clients.

Every request carries the session's access token as a bearer credential.
A 401 on a request that has not been retried yet triggers one refresh
through ``/auth/refresh`` and one replay with the new token. A failed
refresh clears the session, calls ``on_logout`` and raises
``SessionExpired``; a 401 on the replay is raised to the caller as is.
Requests sent without a token, or flagged with ``SKIP_REFRESH`` (login and
register), surface their 401 directly.
"""
import asyncio
import inspect
import logging
from typing import Any, Awaitable, Callable, Optional, Union

import httpx

from storefront.client.session import SessionContext
from storefront.core.config import Settings, settings as default_settings

logger = logging.getLogger(__name__)

RETRIED = 'storefront.retried'
# set on requests whose 401 means bad credentials, not an expired access token
SKIP_REFRESH = 'storefront.skip_refresh'
REFRESH_PATH = '/auth/refresh'

LogoutHook = Callable[[], Union[None, Awaitable[None]]]


class ApiError(Exception):
    def __init__(self, status_code: Optional[int], message: str, response: Optional[httpx.Response] = None):
        super().__init__(message)
        self.status_code = status_code
        self.message = message
        self.response = response

    @classmethod
    def from_response(cls, response: httpx.Response) -> 'ApiError':
        message = response.reason_phrase or 'Request failed'
        try:
            body = response.json()
        except ValueError:
            body = None
        if isinstance(body, dict) and body.get('message'):
            message = body['message']
        return cls(response.status_code, message, response)


class SessionExpired(ApiError):
    """The refresh token was rejected; the session has been cleared."""


class RequestPipeline:
    def __init__(self, session: SessionContext, base_url: Optional[str] = None,
                 timeout: Optional[float] = None, on_logout: Optional[LogoutHook] = None,
                 transport: Optional[httpx.AsyncBaseTransport] = None,
                 settings: Optional[Settings] = None):
        settings = settings or default_settings
        self.session = session
        self.on_logout = on_logout
        self.client = httpx.AsyncClient(
            base_url=base_url or settings.API_BASE_URL,
            timeout=timeout if timeout is not None else settings.CLIENT_TIMEOUT_SECONDS,
            headers={'Content-Type': 'application/json'},
            transport=transport,
        )
        self._refresh_lock = asyncio.Lock()

    async def __aenter__(self) -> 'RequestPipeline':
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self.client.aclose()

    def _authorize(self, request: httpx.Request, token: Optional[str]) -> None:
        if token:
            request.headers['Authorization'] = f'Bearer {token}'
        else:
            request.headers.pop('Authorization', None)

    async def request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        request = self.client.build_request(method, url, **kwargs)
        sent_with = self.session.get_access_token()
        self._authorize(request, sent_with)
        response = await self.client.send(request)

        if (response.status_code == 401 and sent_with
                and not request.extensions.get(RETRIED) and not request.extensions.get(SKIP_REFRESH)):
            request.extensions[RETRIED] = True
            await response.aclose()
            token = await self._refresh(sent_with)
            self._authorize(request, token)
            response = await self.client.send(request)

        if response.is_error:
            raise ApiError.from_response(response)
        return response

    async def get(self, url: str, **kwargs: Any) -> httpx.Response:
        return await self.request('GET', url, **kwargs)

    async def post(self, url: str, **kwargs: Any) -> httpx.Response:
        return await self.request('POST', url, **kwargs)

    async def _refresh(self, stale_token: Optional[str]) -> str:
        async with self._refresh_lock:
            current = self.session.get_access_token()
            if current and current != stale_token:
                # another request already rotated the pair while this one was in flight
                return current

            refresh_token = self.session.get_refresh_token()
            if not refresh_token:
                await self._force_logout()
                raise SessionExpired(401, 'No refresh token available')

            logger.info('Access token rejected; refreshing session')
            try:
                response = await self.client.post(REFRESH_PATH, json={'refreshToken': refresh_token})
            except httpx.HTTPError as exc:
                await self._force_logout()
                raise SessionExpired(None, f'Token refresh failed: {exc}') from exc

            if response.is_error:
                await self._force_logout()
                error = ApiError.from_response(response)
                raise SessionExpired(error.status_code, error.message, response)

            try:
                data = response.json()['data']
                access_token, new_refresh = data['accessToken'], data['refreshToken']
            except (ValueError, KeyError, TypeError) as exc:
                await self._force_logout()
                raise SessionExpired(response.status_code, 'Malformed refresh response', response) from exc
            self.session.set_token_pair(access_token, new_refresh)
            return access_token

    async def _force_logout(self) -> None:
        logger.warning('Session refresh failed; clearing credentials')
        self.session.clear()
        if self.on_logout is not None:
            result = self.on_logout()
            if inspect.isawaitable(result):
                await result
