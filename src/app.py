"""ShopBot FastAPI application.

HTTP ingress for the shop engine. Every request runs inside the shop's
domain context; state is loaded from ``SHOP_DATA_DIR`` at startup,
checkpointed periodically and saved once more at shutdown.

Usage:
    uvicorn app:app --app-dir src --host 0.0.0.0 --port 8000 --reload
"""

# ---------------------------------------------------------------------------
# Domain initialization
# ---------------------------------------------------------------------------
# The domain is initialized at module level so uvicorn workers share it.
import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from protean.integrations.fastapi import register_exception_handlers
from shop.domain import shop
from shop.utils.logging import add_context, clear_context, get_logger

shop.init()

from shop.api import admin_router, catalogue_router, customer_router  # noqa: E402
from shop.notifications.logging import LoggingNotifier  # noqa: E402
from shop.persistence.json_files import JsonFileStore  # noqa: E402
from shop.settings import ShopSettings  # noqa: E402
from shop.storefront import Storefront  # noqa: E402

logger = get_logger(__name__)


def build_storefront(settings: ShopSettings | None = None) -> Storefront:
    settings = settings or ShopSettings.from_env()
    return Storefront(
        persistence=JsonFileStore(settings.data_dir),
        notifier=LoggingNotifier(admin_id=settings.admin_id),
        settings=settings,
    )


def create_app(storefront: Storefront | None = None, checkpoints: bool = True) -> FastAPI:
    storefront = storefront or build_storefront()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        with shop.domain_context():
            storefront.load()
        if checkpoints:
            storefront.start_checkpoints()
        yield
        with shop.domain_context():
            storefront.shutdown()

    app = FastAPI(
        title="ShopBot API",
        description="Conversational shop — catalogue, carts, checkout and administration",
        lifespan=lifespan,
    )
    app.state.storefront = storefront

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def domain_context_middleware(request: Request, call_next):
        """Push the shop's domain context and bind a request id for log lines."""
        add_context(request_id=request.headers.get("x-request-id") or uuid.uuid4().hex[:12], path=request.url.path)
        try:
            with shop.domain_context():
                return await call_next(request)
        except Exception:
            logger.exception("Unhandled error while serving request")
            return JSONResponse(status_code=500, content={"detail": "Internal server error"})
        finally:
            clear_context()

    app.include_router(catalogue_router)
    app.include_router(customer_router)
    app.include_router(admin_router)
    register_exception_handlers(app)

    # -----------------------------------------------------------------------
    # Health / root
    # -----------------------------------------------------------------------
    @app.get("/health")
    async def health():
        return JSONResponse(
            content={
                "status": "ok",
                "domain": shop.name,
                "unsaved_stores": sorted(storefront.unsaved_stores),
            }
        )

    @app.get("/")
    async def root():
        return JSONResponse(content={"name": "ShopBot API", "docs": "/docs", "health": "/health"})

    return app


app = create_app()
