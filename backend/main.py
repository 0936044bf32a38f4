from contextlib import asynccontextmanager
from typing import Optional
import os
import uuid

import httpx
import structlog
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from api.endpoints import health, items, scrape, wishlists
from core import database
from core.config import Settings, get_settings
from core.exceptions import WistException
from core.logging_config import setup_logging
from services.firecrawl import FirecrawlClient

log = structlog.get_logger()


def create_application(
    settings: Optional[Settings] = None,
    http_client: Optional[httpx.AsyncClient] = None
) -> FastAPI:
    # fails here, before anything starts, when FIRECRAWL_API_KEY is missing
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        setup_logging(settings.LOG_LEVEL, json_logs=not settings.DEBUG)
        log.info("application starting", app_name=settings.PROJECT_NAME, version=settings.VERSION)

        app.state.session_factory = database.init_engine(
            settings.async_database_url, echo=settings.DEBUG_SQL
        )
        await database.create_tables(retries=settings.DB_CONNECT_RETRIES)

        # one pooled client shared by every request
        client = http_client or httpx.AsyncClient(timeout=settings.FIRECRAWL_TIMEOUT_SECONDS)
        app.state.firecrawl = FirecrawlClient(
            api_key=settings.FIRECRAWL_API_KEY,
            base_url=settings.FIRECRAWL_BASE_URL,
            http_client=client,
            timeout=settings.FIRECRAWL_TIMEOUT_SECONDS
        )
        try:
            yield
        finally:
            if http_client is None:
                await client.aclose()
            await database.dispose_engine()
            log.info("application stopped")

    app = FastAPI(
        title=f"{settings.PROJECT_NAME} API",
        description="Wishlists with product details scraped from retailer links",
        version=settings.VERSION,
        lifespan=lifespan
    )
    app.state.settings = settings

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Accept", "Content-Type", "Authorization"],
    )

    @app.middleware("http")
    async def logging_middleware(request: Request, call_next):
        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            request_id=str(uuid.uuid4()),
            method=request.method,
            path=request.url.path,
        )
        response = await call_next(request)
        log.info("request processed", status_code=response.status_code)
        return response

    @app.exception_handler(WistException)
    async def wist_exception_handler(request: Request, exc: WistException):
        return JSONResponse(status_code=exc.status_code, content={"error": exc.message})

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        fields = [".".join(str(part) for part in err.get("loc", ()) if part != "body") for err in exc.errors()]
        fields = [f for f in fields if f]
        message = "Invalid request"
        if fields:
            message = f"Invalid request: {', '.join(fields)}"
        return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"error": message})

    # Include routers
    app.include_router(health.router)

    app.include_router(
        scrape.router,
        prefix=f"{settings.API_V1_STR}/scrape",
        tags=["scrape"]
    )

    app.include_router(
        wishlists.router,
        prefix=f"{settings.API_V1_STR}/wishlists",
        tags=["wishlists"]
    )

    app.include_router(
        items.router,
        prefix=f"{settings.API_V1_STR}/wishlists/{{wishlist_id}}/items",
        tags=["items"]
    )

    return app


app = create_application()


if __name__ == "__main__":
    import uvicorn
    port = int(os.environ.get("PORT", 8000))
    uvicorn.run(app, host="0.0.0.0", port=port)
