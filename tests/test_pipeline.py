import asyncio
import json

import httpx
import pytest

from storefront.client.pipeline import SKIP_REFRESH, ApiError, RequestPipeline, SessionExpired
from storefront.client.session import SessionContext
from storefront.client.storefront import StorefrontClient

BASE_URL = 'http://testserver/api'


class FakeApi:
    """Auth-aware fake server: only ``valid_tokens`` pass, refresh rotates them."""

    def __init__(self, valid_tokens=('fresh-access',), refresh_ok=True, reject_after_refresh=False):
        self.valid_tokens = set(valid_tokens)
        self.refresh_ok = refresh_ok
        self.reject_after_refresh = reject_after_refresh
        self.calls = []
        self.refresh_bodies = []

    async def __call__(self, request: httpx.Request) -> httpx.Response:
        auth = request.headers.get('Authorization')
        self.calls.append((request.url.path, auth))
        if request.url.path == '/api/auth/refresh':
            self.refresh_bodies.append(json.loads(request.content))
            if not self.refresh_ok:
                return httpx.Response(401, json={'success': False, 'message': 'Invalid refresh token'})
            if not self.reject_after_refresh:
                self.valid_tokens.add('fresh-access')
            return httpx.Response(200, json={'success': True, 'data': {
                'accessToken': 'fresh-access', 'refreshToken': 'fresh-refresh', 'expiresIn': 7200}})
        if request.url.path == '/api/broken':
            return httpx.Response(500, json={'success': False, 'message': 'Server error'})
        if request.url.path == '/api/admin':
            return httpx.Response(403, json={'success': False, 'message': 'Forbidden'})
        if request.url.path == '/api/public':
            return httpx.Response(200, json={'success': True})
        if auth and auth.removeprefix('Bearer ') in self.valid_tokens:
            return httpx.Response(200, json={'success': True, 'auth': auth})
        return httpx.Response(401, json={'success': False, 'message': 'Invalid or expired token'})

    def paths(self):
        return [path for path, _ in self.calls]


def make_pipeline(fake, session=None, on_logout=None):
    session = session or SessionContext('stale-access', 'old-refresh')
    return RequestPipeline(session, base_url=BASE_URL, timeout=5, on_logout=on_logout,
                           transport=httpx.MockTransport(fake))


@pytest.mark.asyncio
async def test_attaches_bearer_token():
    fake = FakeApi(valid_tokens=['good'])
    async with make_pipeline(fake, SessionContext('good', 'r')) as api:
        resp = await api.get('/orders')
    assert resp.json()['auth'] == 'Bearer good'
    assert fake.paths() == ['/api/orders']


@pytest.mark.asyncio
async def test_no_header_without_token():
    fake = FakeApi()
    async with make_pipeline(fake, SessionContext()) as api:
        await api.get('/public')
    assert fake.calls == [('/api/public', None)]


@pytest.mark.asyncio
async def test_expired_token_refreshes_once_and_retries_once():
    fake = FakeApi()
    session = SessionContext('stale-access', 'old-refresh')
    async with make_pipeline(fake, session) as api:
        resp = await api.post('/orders', json={'items': [1]})
    assert resp.status_code == 200
    assert fake.calls == [
        ('/api/orders', 'Bearer stale-access'),
        ('/api/auth/refresh', None),
        ('/api/orders', 'Bearer fresh-access'),
    ]
    assert fake.refresh_bodies == [{'refreshToken': 'old-refresh'}]
    assert session.get_access_token() == 'fresh-access'
    assert session.get_refresh_token() == 'fresh-refresh'


@pytest.mark.asyncio
async def test_second_401_is_surfaced_without_another_refresh():
    fake = FakeApi(valid_tokens=[], reject_after_refresh=True)
    logouts = []
    async with make_pipeline(fake, on_logout=lambda: logouts.append(1)) as api:
        with pytest.raises(ApiError) as excinfo:
            await api.get('/orders')
    assert excinfo.value.status_code == 401
    assert not isinstance(excinfo.value, SessionExpired)
    assert fake.paths() == ['/api/orders', '/api/auth/refresh', '/api/orders']
    assert logouts == []


@pytest.mark.asyncio
async def test_failed_refresh_clears_session_and_forces_logout():
    fake = FakeApi(refresh_ok=False)
    session = SessionContext('stale-access', 'old-refresh')
    session.user = {'id': 1}
    logouts = []

    async def on_logout():
        logouts.append('/login')

    async with make_pipeline(fake, session, on_logout=on_logout) as api:
        with pytest.raises(SessionExpired) as excinfo:
            await api.get('/orders')
    assert excinfo.value.status_code == 401
    assert fake.paths() == ['/api/orders', '/api/auth/refresh']
    assert logouts == ['/login']
    assert session.get_access_token() is None
    assert session.get_refresh_token() is None
    assert session.user is None


@pytest.mark.asyncio
async def test_missing_refresh_token_forces_logout_without_calling_refresh():
    fake = FakeApi()
    session = SessionContext('stale-access', None)
    logouts = []
    async with make_pipeline(fake, session, on_logout=lambda: logouts.append(1)) as api:
        with pytest.raises(SessionExpired):
            await api.get('/orders')
    assert fake.paths() == ['/api/orders']
    assert logouts == [1]


@pytest.mark.asyncio
async def test_transport_failure_during_refresh_forces_logout():
    async def handler(request):
        if request.url.path == '/api/auth/refresh':
            raise httpx.ConnectError('connection refused', request=request)
        return httpx.Response(401, json={'success': False, 'message': 'expired'})

    session = SessionContext('stale', 'refresh')
    async with RequestPipeline(session, base_url=BASE_URL, transport=httpx.MockTransport(handler)) as api:
        with pytest.raises(SessionExpired) as excinfo:
            await api.get('/orders')
    assert excinfo.value.status_code is None
    assert session.get_refresh_token() is None


@pytest.mark.asyncio
@pytest.mark.parametrize('path,status,message', [('/admin', 403, 'Forbidden'), ('/broken', 500, 'Server error')])
async def test_other_errors_propagate_without_refresh(path, status, message):
    fake = FakeApi()
    async with make_pipeline(fake) as api:
        with pytest.raises(ApiError) as excinfo:
            await api.get(path)
    assert (excinfo.value.status_code, excinfo.value.message) == (status, message)
    assert fake.paths() == ['/api' + path]


@pytest.mark.asyncio
async def test_concurrent_401s_share_one_refresh():
    fake = FakeApi()
    async with make_pipeline(fake) as api:
        responses = await asyncio.gather(api.get('/a'), api.get('/b'), api.get('/c'))
    assert all(r.status_code == 200 for r in responses)
    assert fake.paths().count('/api/auth/refresh') == 1


@pytest.mark.asyncio
async def test_cancelled_request_never_refreshes():
    started = asyncio.Event()
    calls = []

    async def handler(request):
        calls.append(request.url.path)
        started.set()
        await asyncio.Event().wait()

    async with RequestPipeline(SessionContext('stale', 'refresh'), base_url=BASE_URL,
                               transport=httpx.MockTransport(handler)) as api:
        task = asyncio.create_task(api.get('/orders'))
        await started.wait()
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task
    assert calls == ['/api/orders']


@pytest.mark.asyncio
async def test_flagged_request_surfaces_401_without_refresh():
    fake = FakeApi()
    logouts = []
    session = SessionContext('stale-access', 'old-refresh')
    async with make_pipeline(fake, session, on_logout=lambda: logouts.append(1)) as api:
        with pytest.raises(ApiError) as excinfo:
            await api.post('/auth/login', json={}, extensions={SKIP_REFRESH: True})
    assert not isinstance(excinfo.value, SessionExpired)
    assert fake.paths() == ['/api/auth/login']
    assert session.get_refresh_token() == 'old-refresh'
    assert logouts == []


@pytest.mark.asyncio
async def test_401_without_token_is_not_refreshed():
    fake = FakeApi()
    logouts = []
    async with make_pipeline(fake, SessionContext(None, 'old-refresh'), on_logout=lambda: logouts.append(1)) as api:
        with pytest.raises(ApiError) as excinfo:
            await api.get('/orders')
    assert excinfo.value.status_code == 401
    assert not isinstance(excinfo.value, SessionExpired)
    assert fake.paths() == ['/api/orders']
    assert logouts == []


@pytest.mark.asyncio
@pytest.mark.parametrize('body', [{'success': True}, {'data': {'accessToken': 'a'}}, 'not json'])
async def test_malformed_refresh_response_forces_logout(body):
    async def handler(request):
        if request.url.path == '/api/auth/refresh':
            if isinstance(body, str):
                return httpx.Response(200, text=body)
            return httpx.Response(200, json=body)
        return httpx.Response(401, json={'success': False, 'message': 'expired'})

    session = SessionContext('stale', 'refresh')
    logouts = []
    async with RequestPipeline(session, base_url=BASE_URL, on_logout=lambda: logouts.append(1),
                               transport=httpx.MockTransport(handler)) as api:
        with pytest.raises(SessionExpired):
            await api.get('/orders')
    assert logouts == [1]
    assert session.get_access_token() is None
    assert session.get_refresh_token() is None


@pytest.mark.asyncio
async def test_wrong_password_login_is_invalid_credentials(app, catalog):
    transport = httpx.ASGITransport(app=app)
    logouts = []
    async with StorefrontClient(base_url=BASE_URL, transport=transport,
                                on_logout=lambda: logouts.append(1)) as client:
        await client.register('Jane', 'jane@example.com', 'secret123')
        stored_refresh = client.session.get_refresh_token()

        # signed in: a bad password must not rotate the stored pair
        with pytest.raises(ApiError) as excinfo:
            await client.login('jane@example.com', 'wrong-password')
        assert not isinstance(excinfo.value, SessionExpired)
        assert (excinfo.value.status_code, excinfo.value.message) == (401, 'Invalid credentials')
        assert client.session.get_refresh_token() == stored_refresh

        client.session.clear()
        with pytest.raises(ApiError) as excinfo:
            await client.login('jane@example.com', 'wrong-password')
        assert not isinstance(excinfo.value, SessionExpired)
        assert (excinfo.value.status_code, excinfo.value.message) == (401, 'Invalid credentials')
    assert logouts == []


@pytest.mark.asyncio
async def test_end_to_end_against_app(app, catalog):
    transport = httpx.ASGITransport(app=app)
    logouts = []
    async with StorefrontClient(base_url=BASE_URL, transport=transport,
                                on_logout=lambda: logouts.append(1)) as client:
        registered = await client.register('Jane', 'jane@example.com', 'secret123')
        user_id = registered['data']['user']['id']
        assert client.session.user['id'] == user_id

        listing = await client.list_products(category='herbs', sortBy='name-asc', limit=1)
        assert listing['pagination'] == {'currentPage': 1, 'totalPages': 2, 'totalProducts': 2}
        assert listing['data'][0]['name'] == 'Ashwagandha'

        product = await client.get_product(listing['data'][0]['id'])
        assert product['data']['category'] == 'herbs'

        r1 = client.session.get_refresh_token()
        client.session.set_token_pair('expired-or-garbage', r1)
        me = await client.me()
        assert me['data']['id'] == user_id
        r2 = client.session.get_refresh_token()
        assert r2 != r1

        # a rotated-out refresh token cannot revive the session
        client.session.set_token_pair('expired-or-garbage', r1)
        with pytest.raises(SessionExpired):
            await client.me()
        assert logouts == [1]
        assert not client.session.is_authenticated

        await client.login('jane@example.com', 'secret123')
        await client.logout()
        assert client.session.get_refresh_token() is None
