# main.py
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from prometheus_client import CollectorRegistry
from prometheus_fastapi_instrumentator import Instrumentator

from storefront.version import VERSION
from storefront.api import auth, products, users
from storefront.core.config import Settings, settings as default_settings
from storefront.core.errors import register_error_handlers
from storefront.core.logging import configure_logging
from storefront.db.session import Database
from storefront.security.tokens import TokenService

logger = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None, database: Optional[Database] = None) -> FastAPI:
    settings = settings or default_settings
    database = database or Database(settings.POSTGRES_DSN)
    configure_logging(settings.LOG_LEVEL)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        database.init()
        for route in app.routes:
            if hasattr(route, "methods") and hasattr(route, "path"):
                logger.debug("%s %s", sorted(route.methods), route.path)
        try:
            yield
        finally:
            database.close()

    app = FastAPI(title='Storefront API', version=VERSION, lifespan=lifespan)
    app.state.settings = settings
    app.state.database = database
    app.state.token_service = TokenService.from_settings(settings)

    if settings.METRICS_ENABLED:
        # Instrument the app BEFORE adding routes or middleware
        Instrumentator(registry=CollectorRegistry()).instrument(app).expose(
            app,
            include_in_schema=False,
            endpoint="/metrics",
            should_gzip=True,
        )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.CLIENT_URL],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_error_handlers(app)

    @app.get('/health')
    def health(): return {'success': True, 'status': 'ok'}

    @app.get('/v1/_info')
    def info(): return {'service': 'storefront', 'version': VERSION}

    app.include_router(auth.router, prefix=f'{settings.API_PREFIX}/auth', tags=['auth'])
    app.include_router(products.router, prefix=f'{settings.API_PREFIX}/products', tags=['products'])
    app.include_router(users.router, prefix=f'{settings.API_PREFIX}/users', tags=['users'])
    return app


app = create_app()
