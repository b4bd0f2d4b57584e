import logging
from contextlib import asynccontextmanager
from typing import Callable, Optional

from fastapi import FastAPI

from dawak.core.config import settings

# 1. Infrastructure & Application Imports
from dawak.application.session import PharmacySession
from dawak.infrastructure.auth_gate import AuthGate
from dawak.infrastructure.order_store import RedisOrderStore
from dawak.interfaces import orders_api
from dawak.interfaces.IOrderStore import IOrderStore

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


def create_app(
    store: Optional[IOrderStore] = None,
    session_factory: Optional[Callable[[IOrderStore], PharmacySession]] = None,
) -> FastAPI:

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # ---------------------------------------------------------
        # COMPOSITION ROOT
        # ---------------------------------------------------------
        app.state.store = store if store is not None else RedisOrderStore()
        app.state.auth = AuthGate(app.state.store)
        app.state.session_factory = session_factory or PharmacySession
        app.state.session = None

        # A marker left from before the restart resumes the session
        if app.state.auth.is_active():
            app.state.session = app.state.session_factory(app.state.store)
            app.state.session.start()

        yield

        if app.state.session is not None:
            session, app.state.session = app.state.session, None
            await session.close()

    app = FastAPI(title=settings.PROJECT_NAME, lifespan=lifespan)

    # Include Routers
    app.include_router(orders_api.router)

    @app.get("/")
    async def health_check():
        store_mode = getattr(app.state.store, "mode", "unknown")
        status = "active" if store_mode != "memory" else "degraded"
        return {
            "status": status,
            "store": store_mode,
            "logged_in": app.state.session is not None,
            "system": "Dawak Pharmacy Orders",
        }

    return app


app = create_app()
