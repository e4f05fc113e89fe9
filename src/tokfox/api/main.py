from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from tokfox.core.config import Settings, get_settings
from tokfox.core.errors import ServerError
from tokfox.core.logging import configure_logging
from tokfox.db.session import Database
from tokfox.api.routers import (
    health,
    accounts,
    invitations,
)


def create_app(settings: Optional[Settings] = None, database: Optional[Database] = None) -> FastAPI:
    """Build the application.

    ``database`` defaults to one built from settings. Whatever the source, the
    lifespan opens it on startup and closes it on shutdown.
    """
    settings = settings or get_settings()
    database = database or Database.from_settings(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        await database.open()
        try:
            yield
        finally:
            await database.close()

    app = FastAPI(title=settings.app_name, lifespan=lifespan)
    app.state.database = database

    if settings.enable_cors:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=["*"],
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    @app.exception_handler(ServerError)
    async def server_error_handler(request: Request, exc: ServerError):
        return JSONResponse(status_code=exc.http_status, content=exc.to_dict())

    def _include(router):
        app.include_router(router, prefix=settings.api_prefix)

    _include(health.router)
    _include(accounts.router)
    _include(invitations.router)

    @app.get("/")
    async def root():
        return {"service": settings.app_name, "status": "ok"}

    return app


settings = get_settings()
configure_logging(settings.log_level)

app = create_app(settings)
