from __future__ import annotations

import contextlib
import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from dotenv import load_dotenv

logger = logging.getLogger(__name__)


@contextlib.asynccontextmanager
async def lifespan(app: FastAPI):
    from persistence.repositories import get_default_store

    # Tests may inject a store on app.state before startup.
    if getattr(app.state, "store", None) is None:
        app.state.store = get_default_store()
    logger.info("Document store ready at %s", app.state.store.path)
    yield


def create_app() -> FastAPI:
    load_dotenv("local.env")

    from endpoints.collections_endpoints import router as collections_router
    from persistence.disk_store import utc_now_iso
    from settings import get_settings

    settings = get_settings()
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s - [%(levelname)s] - %(name)s - %(message)s",
    )

    app = FastAPI(title="KazRPG dev store", lifespan=lifespan)
    app.state.store = None

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/health")
    async def health(request: Request):
        store = request.app.state.store
        return JSONResponse(
            {
                "status": "OK",
                "timestamp": utc_now_iso(),
                "database": {
                    "path": str(store.path),
                    "persisted": store.persist,
                    "collections": {name: store.count(name) for name in store.collections()},
                },
            }
        )

    app.include_router(collections_router)

    return app


app = create_app()
