from contextlib import asynccontextmanager
from typing import Optional

import httpx
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

import odootools
from odootools.common.settings import settings
from .container import Container
from .errors import register_error_handlers
from .routes import access, health, modules, query, translations


def create_app(transport: Optional[httpx.AsyncBaseTransport] = None) -> FastAPI:
    """Builds the HTTP application.

    Args:
        transport: Optional httpx transport for outgoing JSON-RPC calls.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        container = Container(transport=transport)
        app.state.container = container
        try:
            yield
        finally:
            await container.aclose()

    app = FastAPI(
        title="Odoo Tools API",
        version=odootools.__version__,
        lifespan=lifespan,
    )

    app.include_router(query.router, prefix="/api/v1")
    app.include_router(modules.router, prefix="/api/v1")
    app.include_router(access.router, prefix="/api/v1")
    app.include_router(translations.router, prefix="/api/v1")
    app.include_router(health.router, prefix="/api/v1")

    register_error_handlers(app)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.api_cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
