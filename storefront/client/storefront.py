from typing import Any, Dict, Optional

import httpx

from storefront.client.pipeline import SKIP_REFRESH, LogoutHook, RequestPipeline
from storefront.client.session import SessionContext
from storefront.core.config import Settings


class StorefrontClient:
    """Storefront endpoints on top of the request pipeline; login and register fill the session."""

    def __init__(self, base_url: Optional[str] = None, session: Optional[SessionContext] = None,
                 on_logout: Optional[LogoutHook] = None, timeout: Optional[float] = None,
                 transport: Optional[httpx.AsyncBaseTransport] = None, settings: Optional[Settings] = None):
        self.session = session or SessionContext()
        self.api = RequestPipeline(self.session, base_url=base_url, timeout=timeout,
                                   on_logout=on_logout, transport=transport, settings=settings)

    async def __aenter__(self) -> 'StorefrontClient':
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.api.aclose()

    def _remember(self, body: Dict[str, Any]) -> Dict[str, Any]:
        data = body['data']
        self.session.set_token_pair(data['accessToken'], data['refreshToken'])
        self.session.user = data.get('user')
        return body

    async def register(self, user_name: str, email: str, password: str,
                       telephone: Optional[str] = None, address: Optional[str] = None) -> Dict[str, Any]:
        payload = {'user_name': user_name, 'email': email, 'password': password}
        if telephone: payload['telephone'] = telephone
        if address: payload['address'] = address
        resp = await self.api.post('/auth/register', json=payload, extensions={SKIP_REFRESH: True})
        return self._remember(resp.json())

    async def login(self, email: str, password: str) -> Dict[str, Any]:
        resp = await self.api.post('/auth/login', json={'email': email, 'password': password},
                                   extensions={SKIP_REFRESH: True})
        return self._remember(resp.json())

    async def logout(self) -> None:
        try:
            await self.api.post('/auth/logout')
        finally:
            self.session.clear()

    async def me(self) -> Dict[str, Any]:
        return (await self.api.get('/auth/me')).json()

    async def list_products(self, **params: Any) -> Dict[str, Any]:
        params = {k: v for k, v in params.items() if v is not None and v != ''}
        return (await self.api.get('/products/', params=params)).json()

    async def get_product(self, product_id: int) -> Dict[str, Any]:
        return (await self.api.get(f'/products/{product_id}')).json()
